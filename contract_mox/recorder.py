"""Turn ``lambda m: m.method(...)`` expressions into call patterns.

The expression is evaluated once against a recorder standing in for the
contract. Whatever single member it touches, and the arguments it passes,
become the pattern::

    mock.setup(lambda repo: repo.get(IsA(int)))
    mock.setup(lambda repo: repo.size)             # property getter
    mock.setup_set(lambda repo: setattr(repo, "size", 3))
"""

from __future__ import annotations

import dataclasses as dc
import typing as t

from .contract import MemberKind
from .errors import ConfigurationError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .contract import Contract, Member


@dc.dataclass(frozen=True, slots=True)
class RecordedCall:
    """A member access captured by a recorder."""

    name: str
    kind: MemberKind
    args: tuple[t.Any, ...] = ()
    kwargs: dict[str, t.Any] = dc.field(default_factory=dict)


class _PendingAccess:
    """Attribute read that becomes a method call if it is invoked."""

    def __init__(self, recorder: _Recorder, name: str) -> None:
        self._recorder = recorder
        self._name = name
        self.called = False

    def __call__(self, *args: t.Any, **kwargs: t.Any) -> None:
        self.called = True
        self._recorder._calls.append(
            RecordedCall(self._name, MemberKind.METHOD, args, kwargs)
        )

    def __getattr__(self, name: str) -> t.NoReturn:
        msg = (
            f"unsupported expression: {self._name}.{name}; only a single "
            "member access or call is allowed"
        )
        raise ConfigurationError(msg)


class _Recorder:
    """Stand-in for a contract while a setup expression runs."""

    def __init__(self) -> None:
        object.__setattr__(self, "_calls", [])
        object.__setattr__(self, "_reads", [])

    def __getattr__(self, name: str) -> _PendingAccess:
        access = _PendingAccess(self, name)
        self._reads.append(access)
        return access

    def __setattr__(self, name: str, value: t.Any) -> None:
        self._calls.append(RecordedCall(name, MemberKind.SETTER, (value,)))

    def __call__(self, *args: t.Any, **kwargs: t.Any) -> None:
        self._calls.append(RecordedCall("__call__", MemberKind.METHOD, args, kwargs))


def record(expression: t.Callable[[t.Any], object]) -> RecordedCall:
    """Run *expression* against a recorder and return the single access."""
    recorder = _Recorder()
    expression(recorder)
    calls: list[RecordedCall] = recorder._calls
    reads = [access for access in recorder._reads if not access.called]
    captured = calls + [RecordedCall(access._name, MemberKind.GETTER) for access in reads]
    if len(captured) != 1:
        msg = (
            "setup expressions must touch exactly one member, "
            f"got {len(captured)}"
        )
        raise ConfigurationError(msg)
    return captured[0]


def resolve(
    contract: Contract, expression: t.Callable[[t.Any], object]
) -> tuple[Member, tuple[t.Any, ...], dict[str, t.Any]]:
    """Return ``(member, args, kwargs)`` recorded from *expression*."""
    call = record(expression)
    member = contract.member(call.name, call.kind)
    return member, call.args, call.kwargs


__all__ = ["RecordedCall", "record", "resolve"]
