"""Append-only, thread-safe log of the calls made against a mock."""

from __future__ import annotations

import itertools
import threading
import typing as t

from .invocation import Invocation

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .contract import Member
    from .expectations import CallPattern


class InvocationJournal:
    """Record every intercepted call in arrival order.

    Sequence numbers are assigned under the journal lock, so concurrent
    callers always receive distinct, gap-free numbers. Numbers are never
    reused, not even after :meth:`clear`.
    """

    def __init__(self) -> None:
        self._entries: list[Invocation] = []
        self._lock = threading.Lock()
        self._sequence = itertools.count(1)

    def record(
        self,
        member: Member,
        args: tuple[t.Any, ...],
        type_args: tuple[t.Any, ...] = (),
    ) -> Invocation:
        """Create, number and append an :class:`Invocation`."""
        with self._lock:
            invocation = Invocation(member, args, next(self._sequence), type_args)
            self._entries.append(invocation)
        return invocation

    def snapshot(self) -> tuple[Invocation, ...]:
        """Return the entries recorded so far."""
        with self._lock:
            return tuple(self._entries)

    def __iter__(self) -> t.Iterator[Invocation]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def matching(self, pattern: CallPattern) -> list[Invocation]:
        """Return entries satisfying *pattern*, oldest first."""
        return [inv for inv in self.snapshot() if pattern.matches(inv)]

    def for_member(self, member: Member) -> list[Invocation]:
        """Return every entry recorded for *member*."""
        return [inv for inv in self.snapshot() if inv.member is member]

    def unverified(self) -> list[Invocation]:
        """Return entries no verification has accounted for."""
        return [inv for inv in self.snapshot() if not inv.verified]

    def clear(self) -> None:
        """Forget all entries; numbering continues where it left off."""
        with self._lock:
            self._entries.clear()


__all__ = ["InvocationJournal"]
