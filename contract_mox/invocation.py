"""The record of one intercepted call."""

from __future__ import annotations

import dataclasses as dc
import inspect
import typing as t

from .contract import MemberKind

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .contract import Member
    from .setups import Setup


def format_call(
    member: Member,
    values: t.Sequence[t.Any],
    render: t.Callable[[t.Any], str] = repr,
) -> str:
    """Return ``name(arg, ...)`` for *values* bound to *member*'s parameters."""
    if member.kind is MemberKind.GETTER:
        return member.name
    if member.kind is MemberKind.SETTER:
        return f"{member.name} = {render(values[0])}" if values else member.name
    parts: list[str] = []
    for param, value in zip(member.parameters, values, strict=True):
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            parts.extend(render(item) for item in getattr(value, "items", value))
        elif param.kind is inspect.Parameter.VAR_KEYWORD:
            mapping = getattr(value, "mapping", value)
            parts.extend(f"{key}={render(item)}" for key, item in mapping.items())
        elif param.kind is inspect.Parameter.KEYWORD_ONLY:
            parts.append(f"{param.name}={render(value)}")
        else:
            parts.append(render(value))
    return f"{member.name}({', '.join(parts)})"


@dc.dataclass(frozen=True, slots=True, eq=False)
class Invocation:
    """One observed call against a mock.

    Immutable apart from :attr:`matched_by` and :attr:`verified`, which only
    the dispatcher and the verifiers update.
    """

    member: Member
    args: tuple[t.Any, ...]
    sequence: int
    type_args: tuple[t.Any, ...] = ()
    matched_by: Setup | None = None
    verified: bool = False

    def mark_matched(self, setup: Setup) -> None:
        """Record *setup* as the one that governed this call."""
        object.__setattr__(self, "matched_by", setup)

    def mark_verified(self) -> None:
        """Flag this call as accounted for by a verification."""
        object.__setattr__(self, "verified", True)

    def call_arguments(self) -> tuple[tuple, dict[str, t.Any]]:
        """Return ``(args, kwargs)`` suitable for re-issuing the call."""
        return self.member.unbind(self.args)

    def describe(self) -> str:
        """Return a readable ``name(args)`` rendering."""
        return format_call(self.member, self.args)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Invocation(#{self.sequence} {self.member.owner}.{self.describe()})"


__all__ = ["Invocation", "format_call"]
