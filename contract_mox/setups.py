"""Declared setups and the ordered registry that selects between them."""

from __future__ import annotations

import dataclasses as dc
import enum
import itertools
import logging
import threading
import typing as t

from .errors import ConfigurationError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .contract import Member
    from .expectations import CallPattern
    from .invocation import Invocation
    from .times import Times

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class ReturnValue:
    """Return a fixed value."""

    value: t.Any


@dc.dataclass(frozen=True, slots=True)
class ReturnComputed:
    """Return ``func(*args, **kwargs)`` for the live call arguments."""

    func: t.Callable[..., t.Any]


@dc.dataclass(frozen=True, slots=True)
class RaiseError:
    """Raise the configured exception."""

    error: BaseException | type[BaseException]

    def __post_init__(self) -> None:
        """Reject values that cannot be raised."""
        error = self.error
        if isinstance(error, BaseException):
            return
        if isinstance(error, type) and issubclass(error, BaseException):
            return
        msg = f"cannot raise {error!r}: not an exception"
        raise ConfigurationError(msg)

    def build(self) -> BaseException:
        """Return the exception instance to raise."""
        if isinstance(self.error, BaseException):
            return self.error
        return self.error()


@dc.dataclass(frozen=True, slots=True)
class CallBase:
    """Delegate to the contract's real implementation."""


@dc.dataclass(frozen=True, slots=True)
class FallThrough:
    """Produce no result of its own; the dispatcher synthesizes a default."""


Outcome = ReturnValue | ReturnComputed | RaiseError | CallBase | FallThrough
FALL_THROUGH = FallThrough()


@dc.dataclass(frozen=True, slots=True)
class Behavior:
    """What a setup does when it governs a call.

    ``steps`` is ``None`` for ordinary setups. Sequence setups consume one
    step per call and ignore ``outcome``.
    """

    outcome: Outcome = FALL_THROUGH
    callback: t.Callable[..., object] | None = None
    steps: tuple[Outcome, ...] | None = None


@dc.dataclass(frozen=True, slots=True)
class Claim:
    """A setup slot reserved for one invocation."""

    setup: Setup
    outcome: Outcome
    callback: t.Callable[..., object] | None


class SetupState(enum.StrEnum):
    """Lifecycle states of a setup."""

    ACTIVE = "active"
    EXHAUSTED = "exhausted"


class Setup:
    """One declared expectation binding a call pattern to a behaviour."""

    def __init__(
        self,
        pattern: CallPattern,
        *,
        condition: t.Callable[[], object] | None = None,
        behavior: Behavior | None = None,
    ) -> None:
        self.pattern = pattern
        self.condition = condition
        self.index = -1
        self.verifiable = False
        self.expected_times: Times | None = None
        self.fail_message: str | None = None
        self._behavior = behavior if behavior is not None else Behavior()
        self._times_invoked = 0
        self._cursor = 0
        self._lock = threading.Lock()

    @property
    def member(self) -> Member:
        """Return the member this setup targets."""
        return self.pattern.member

    @property
    def behavior(self) -> Behavior:
        """Return the currently published behaviour."""
        return self._behavior

    @property
    def times_invoked(self) -> int:
        """Return how many calls this setup has governed."""
        return self._times_invoked

    @property
    def is_sequence(self) -> bool:
        """Return ``True`` for setups built from a bounded response sequence."""
        return self._behavior.steps is not None

    @property
    def state(self) -> SetupState:
        """Return the lifecycle state."""
        steps = self._behavior.steps
        if steps is not None and self._cursor >= len(steps):
            return SetupState.EXHAUSTED
        return SetupState.ACTIVE

    @property
    def is_exhausted(self) -> bool:
        """Return ``True`` once every sequence step has been consumed."""
        return self.state is SetupState.EXHAUSTED

    def configure(self, **changes: t.Any) -> None:
        """Publish a new behaviour with *changes* applied."""
        with self._lock:
            self._behavior = dc.replace(self._behavior, **changes)

    def add_step(self, outcome: Outcome) -> None:
        """Append *outcome* to the response sequence."""
        with self._lock:
            steps = self._behavior.steps or ()
            self._behavior = dc.replace(self._behavior, steps=(*steps, outcome))

    def mark_verifiable(
        self, times: Times | None = None, message: str | None = None
    ) -> None:
        """Include this setup in :meth:`Mock.verify_setups`."""
        self.verifiable = True
        self.expected_times = times
        self.fail_message = message

    def is_eligible(self, invocation: Invocation) -> bool:
        """Return ``True`` when this setup may govern *invocation* right now.

        The guard runs before matcher evaluation; a false guard makes the
        setup ineligible for this call only.
        """
        if invocation.member is not self.member or self.is_exhausted:
            return False
        if self.condition is not None and not self.condition():
            return False
        return self.pattern.matches(invocation)

    def try_claim(self) -> Claim | None:
        """Atomically consume one slot, or return ``None`` if exhausted."""
        with self._lock:
            behavior = self._behavior
            if behavior.steps is not None:
                if self._cursor >= len(behavior.steps):
                    return None
                outcome = behavior.steps[self._cursor]
                self._cursor += 1
            else:
                outcome = behavior.outcome
            self._times_invoked += 1
        return Claim(self, outcome, behavior.callback)

    def reset_count(self) -> None:
        """Zero the invocation counter."""
        with self._lock:
            self._times_invoked = 0

    def describe(self) -> str:
        """Return a readable rendering of the pattern and guard."""
        text = self.pattern.describe()
        if self.condition is not None:
            text += " [conditional]"
        return text

    def __repr__(self) -> str:
        """Return a debug representation."""
        return (
            f"Setup(#{self.index} {self.describe()}, state={self.state}, "
            f"invoked={self._times_invoked})"
        )


class SetupRegistry:
    """Setups in creation order.

    Registration publishes a new tuple under a lock; readers iterate over
    whichever tuple was current when they started, so they never observe a
    half-registered setup.
    """

    def __init__(self) -> None:
        self._setups: tuple[Setup, ...] = ()
        self._lock = threading.Lock()
        self._index = itertools.count()

    def register(self, setup: Setup) -> Setup:
        """Append *setup* and assign its creation index."""
        with self._lock:
            setup.index = next(self._index)
            self._setups = (*self._setups, setup)
        return setup

    def __iter__(self) -> t.Iterator[Setup]:
        return iter(self._setups)

    def __len__(self) -> int:
        return len(self._setups)

    def _eligible(self, invocation: Invocation) -> t.Iterator[Setup]:
        """Yield setups that may govern *invocation*, newest first."""
        for setup in reversed(self._setups):
            if setup.member is invocation.member and setup.is_eligible(invocation):
                yield setup

    def find_governing(self, invocation: Invocation) -> Setup | None:
        """Return the most recently declared eligible setup, if any."""
        return next(self._eligible(invocation), None)

    def claim(self, invocation: Invocation) -> Claim | None:
        """Find the governing setup and consume one of its slots.

        Uses the same scan as :meth:`find_governing`. A sequence setup
        exhausted by a concurrent caller between the eligibility check and
        the claim is skipped in favour of older ones.
        """
        for setup in self._eligible(invocation):
            claim = setup.try_claim()
            if claim is not None:
                return claim
            logger.debug("Setup #%d exhausted while claiming %r", setup.index, invocation)
        return None

    def find_all(
        self,
        member: Member | None = None,
        predicate: t.Callable[[Setup], bool] | None = None,
    ) -> list[Setup]:
        """Return every setup for *member* satisfying *predicate*.

        Exhausted setups are included.
        """
        return [
            setup
            for setup in self._setups
            if (member is None or setup.member is member)
            and (predicate is None or predicate(setup))
        ]

    def reset_counts(self) -> None:
        """Zero every setup's invocation counter."""
        for setup in self._setups:
            setup.reset_count()


__all__ = [
    "FALL_THROUGH",
    "Behavior",
    "CallBase",
    "Claim",
    "FallThrough",
    "Outcome",
    "RaiseError",
    "ReturnComputed",
    "ReturnValue",
    "Setup",
    "SetupRegistry",
    "SetupState",
]
