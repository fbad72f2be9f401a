"""Fluent handles returned by ``Mock.setup`` and ``Mock.setup_sequence``."""

from __future__ import annotations

import typing as t

from .errors import ConfigurationError
from .setups import FALL_THROUGH, CallBase, RaiseError, ReturnComputed, ReturnValue

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .setups import Setup
    from .times import Times


def _require_base(setup: Setup) -> None:
    member = setup.member
    if not member.has_base:
        msg = f"{member.qualified_name} has no base implementation to call"
        raise ConfigurationError(msg)


class SetupHandle:
    """Configure what a single setup does when it governs a call."""

    def __init__(self, setup: Setup) -> None:
        self._setup = setup

    @property
    def setup(self) -> Setup:
        """Return the underlying :class:`Setup`."""
        return self._setup

    def returns(self, value: t.Any) -> SetupHandle:
        """Return *value* from matching calls."""
        self._setup.configure(outcome=ReturnValue(value))
        return self

    def returns_using(self, func: t.Callable[..., t.Any]) -> SetupHandle:
        """Return ``func(*args, **kwargs)`` computed from each call."""
        if not callable(func):
            msg = f"returns_using() needs a callable, got {func!r}"
            raise ConfigurationError(msg)
        self._setup.configure(outcome=ReturnComputed(func))
        return self

    def raises(self, error: BaseException | type[BaseException]) -> SetupHandle:
        """Raise *error* from matching calls."""
        self._setup.configure(outcome=RaiseError(error))
        return self

    def callback(self, func: t.Callable[..., object]) -> SetupHandle:
        """Run *func* with the call's arguments before producing the result."""
        if not callable(func):
            msg = f"callback() needs a callable, got {func!r}"
            raise ConfigurationError(msg)
        self._setup.configure(callback=func)
        return self

    def call_base(self) -> SetupHandle:
        """Delegate matching calls to the contract's implementation."""
        _require_base(self._setup)
        self._setup.configure(outcome=CallBase())
        return self

    def verifiable(
        self, times: Times | None = None, message: str | None = None
    ) -> SetupHandle:
        """Include this setup in ``Mock.verify_setups()``."""
        self._setup.mark_verifiable(times, message)
        return self

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"SetupHandle({self._setup!r})"


class SequenceHandle:
    """Append one response per expected call to a sequence setup."""

    def __init__(self, setup: Setup) -> None:
        self._setup = setup

    @property
    def setup(self) -> Setup:
        """Return the underlying :class:`Setup`."""
        return self._setup

    def returns(self, value: t.Any) -> SequenceHandle:
        """Return *value* from the next call."""
        self._setup.add_step(ReturnValue(value))
        return self

    def returns_using(self, func: t.Callable[..., t.Any]) -> SequenceHandle:
        """Compute the next call's result with *func*."""
        self._setup.add_step(ReturnComputed(func))
        return self

    def raises(self, error: BaseException | type[BaseException]) -> SequenceHandle:
        """Raise *error* from the next call."""
        self._setup.add_step(RaiseError(error))
        return self

    def call_base(self) -> SequenceHandle:
        """Delegate the next call to the contract's implementation."""
        _require_base(self._setup)
        self._setup.add_step(CallBase())
        return self

    def passes(self) -> SequenceHandle:
        """Let the next call fall through to the default value."""
        self._setup.add_step(FALL_THROUGH)
        return self

    def verifiable(
        self, times: Times | None = None, message: str | None = None
    ) -> SequenceHandle:
        """Include this setup in ``Mock.verify_setups()``."""
        self._setup.mark_verifiable(times, message)
        return self

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"SequenceHandle({self._setup!r})"


__all__ = ["SequenceHandle", "SetupHandle"]
