"""Verification helpers for :class:`~contract_mox.controller.Mock`."""

from __future__ import annotations

import typing as t
from textwrap import indent

from .errors import UnfulfilledExpectationError, UnverifiedCallsError
from .times import Times

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .controller import Mock
    from .expectations import CallPattern
    from .invocation import Invocation
    from .setups import Setup


def _describe_invocations(invocations: t.Sequence[Invocation]) -> str:
    if not invocations:
        return "(none)"
    return "\n".join(
        f"#{inv.sequence} {inv.describe()}" for inv in invocations
    )


def _describe_setups(setups: t.Sequence[Setup]) -> str:
    if not setups:
        return "(none)"
    return "\n".join(
        f"{setup.describe()}  [{setup.state}, invoked {setup.times_invoked}x]"
        for setup in setups
    )


def _numbered(entries: t.Sequence[str], *, start: int = 1) -> str:
    if not entries:
        return "(none)"
    lines: list[str] = []
    for index, entry in enumerate(entries, start=start):
        entry_lines = entry.splitlines() or [""]
        lines.append(f"{index}. {entry_lines[0]}")
        lines.extend(f"   {extra}" for extra in entry_lines[1:])
    return "\n".join(lines)


def format_sections(title: str, sections: list[tuple[str, str]]) -> str:
    """Return *title* followed by indented, labelled sections."""
    parts = [title]
    for label, body in sections:
        if not body:
            continue
        parts.append("")
        parts.append(f"{label}:")
        parts.append(indent(body, "  "))
    return "\n".join(parts)


def iter_mocks(mock: Mock) -> t.Iterator[Mock]:
    """Yield *mock* and, recursively, the inner mocks it created."""
    seen: set[int] = set()
    pending = [mock]
    while pending:
        current = pending.pop(0)
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        pending.extend(current.inner_mocks)


def unexpected_call_message(mock: Mock, invocation: Invocation) -> str:
    """Describe a call a strict mock could not answer."""
    return format_sections(
        f"{mock.name}: invocation failed with strict behavior.",
        [
            ("Actual call", f"{invocation.member.owner}.{invocation.describe()}"),
            (
                "Configured setups",
                _describe_setups(mock.setups.find_all(invocation.member)),
            ),
            ("Reason", "all invocations on a strict mock must have a matching setup"),
        ],
    )


class CallCountVerifier:
    """Count journal entries matching a pattern against a :class:`Times` range."""

    def verify(
        self,
        mock: Mock,
        pattern: CallPattern,
        times: Times,
        message: str | None = None,
    ) -> int:
        """Mark matching entries verified and raise if the count is out of range.

        Every matching entry is counted, whether or not an earlier
        verification already flagged it, so repeated or overlapping
        verifications see the same count. Returns that count.
        """
        matching = mock.invocations.matching(pattern)
        for invocation in matching:
            invocation.mark_verified()
        actual = len(matching)
        if times.verify(actual):
            return actual
        title = f"{mock.name}: expected invocation {times}, but was {actual} time(s)."
        if message:
            title = f"{message}\n{title}"
        msg = format_sections(
            title,
            [
                ("Expected", f"{pattern.describe()}\ncalls: {times}"),
                ("Observed calls", f"{actual} (expected {times})"),
                (
                    f"Recorded calls to {pattern.member.name}",
                    _describe_invocations(mock.invocations.for_member(pattern.member)),
                ),
                (
                    "Configured setups",
                    _describe_setups(mock.setups.find_all(pattern.member)),
                ),
            ],
        )
        raise UnfulfilledExpectationError(msg)


class NoOtherCallsVerifier:
    """Fail when calls remain that no verification accounted for."""

    def verify(self, mock: Mock) -> None:
        """Raise if any journal entry of *mock* or its inner mocks is unverified."""
        leftovers: list[str] = []
        for current in iter_mocks(mock):
            leftovers.extend(
                f"{current.name} #{inv.sequence} {inv.describe()}"
                for inv in current.invocations.unverified()
            )
        if not leftovers:
            return
        msg = format_sections(
            f"{mock.name}: the following invocations were not verified.",
            [("Unverified calls", _numbered(leftovers))],
        )
        raise UnverifiedCallsError(msg)


class SetupVerifier:
    """Check that selected setups governed the expected number of calls."""

    def __init__(self, select: t.Callable[[Setup], bool]) -> None:
        self._select = select

    def verify(self, mock: Mock) -> None:
        """Raise listing every selected setup whose count is out of range.

        Invocations governed by a satisfied setup are marked verified.
        """
        failures: list[str] = []
        for current in iter_mocks(mock):
            for setup in current.setups.find_all(predicate=self._select):
                times = setup.expected_times or Times.at_least_once()
                if times.verify(setup.times_invoked):
                    self._mark_governed(current, setup)
                    continue
                line = (
                    f"{current.name}: {setup.describe()} expected {times}, "
                    f"invoked {setup.times_invoked} time(s)"
                )
                if setup.fail_message:
                    line = f"{line}\n{setup.fail_message}"
                failures.append(line)
        if not failures:
            return
        msg = format_sections(
            f"{mock.name}: the following setups were not matched.",
            [("Unmatched setups", _numbered(failures))],
        )
        raise UnfulfilledExpectationError(msg)

    @staticmethod
    def _mark_governed(mock: Mock, setup: Setup) -> None:
        for invocation in mock.invocations:
            if invocation.matched_by is setup:
                invocation.mark_verified()


__all__ = [
    "CallCountVerifier",
    "NoOtherCallsVerifier",
    "SetupVerifier",
    "format_sections",
    "iter_mocks",
    "unexpected_call_message",
]
