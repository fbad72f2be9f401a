"""Call patterns: a member plus one matcher per parameter."""

from __future__ import annotations

import dataclasses as dc
import inspect
import typing as t

from .comparators import Matcher, as_matcher
from .errors import ConfigurationError
from .invocation import format_call

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .contract import Member
    from .invocation import Invocation


@dc.dataclass(frozen=True, slots=True)
class Elements(Matcher):
    """Match a ``*args`` tuple element by element."""

    items: tuple[Matcher, ...]

    def __call__(self, value: t.Any) -> bool:
        """Return ``True`` when every element satisfies its matcher."""
        if len(value) != len(self.items):
            return False
        return all(
            matcher(item) for matcher, item in zip(self.items, value, strict=True)
        )


@dc.dataclass(frozen=True, slots=True)
class Keywords(Matcher):
    """Match a ``**kwargs`` mapping key by key."""

    mapping: dict[str, Matcher]

    def __call__(self, value: t.Any) -> bool:
        """Return ``True`` when the keys agree and every value matches."""
        if set(value) != set(self.mapping):
            return False
        return all(matcher(value[key]) for key, matcher in self.mapping.items())


def _compile(param: inspect.Parameter, value: t.Any) -> Matcher:
    if param.kind is inspect.Parameter.VAR_POSITIONAL:
        return Elements(tuple(as_matcher(item) for item in value))
    if param.kind is inspect.Parameter.VAR_KEYWORD:
        return Keywords({key: as_matcher(item) for key, item in value.items()})
    return as_matcher(value)


@dc.dataclass(frozen=True, slots=True)
class CallPattern:
    """Member identity plus a matcher for each declared parameter."""

    member: Member
    matchers: tuple[Matcher, ...]

    def __post_init__(self) -> None:
        """Reject patterns whose arity disagrees with the member."""
        if len(self.matchers) != self.member.arity:
            msg = (
                f"{self.member.qualified_name} takes {self.member.arity} "
                f"argument(s) but {len(self.matchers)} matcher(s) were given"
            )
            raise ConfigurationError(msg)

    @classmethod
    def build(
        cls,
        member: Member,
        args: t.Sequence[t.Any] = (),
        kwargs: t.Mapping[str, t.Any] | None = None,
    ) -> CallPattern:
        """Bind *args* and *kwargs* to *member* and wrap literals as matchers."""
        try:
            values = member.bind(args, kwargs or {})
        except TypeError as exc:
            msg = f"invalid arguments for {member.qualified_name}: {exc}"
            raise ConfigurationError(msg) from exc
        matchers = tuple(
            _compile(param, value)
            for param, value in zip(member.parameters, values, strict=True)
        )
        return cls(member, matchers)

    def matches(self, invocation: Invocation) -> bool:
        """Return ``True`` if *invocation* satisfies this pattern."""
        if invocation.member is not self.member:
            return False
        if len(invocation.args) != len(self.matchers):
            return False
        return all(
            matcher(arg)
            for matcher, arg in zip(self.matchers, invocation.args, strict=True)
        )

    def explain_mismatch(self, invocation: Invocation) -> str:
        """Return a human readable reason why *invocation* does not match."""
        if invocation.member is not self.member:
            return (
                f"member {invocation.member.qualified_name} != "
                f"{self.member.qualified_name}"
            )
        for param, matcher, arg in zip(
            self.member.parameters, self.matchers, invocation.args, strict=True
        ):
            if not matcher(arg):
                return f"{param.name}: {arg!r} does not satisfy {matcher!r}"
        return "invocation matches"

    def describe(self) -> str:
        """Return ``name(matcher, ...)``."""
        return format_call(self.member, self.matchers)


__all__ = ["CallPattern", "Elements", "Keywords"]
