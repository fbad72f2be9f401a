"""Comparator classes used for argument matching.

Every comparator is a callable returning ``True`` when a value matches.
Comparators must not have side effects: verification re-evaluates them
against recorded argument snapshots long after the call happened.
"""

from __future__ import annotations

import dataclasses as dc
import re
import types
import typing as t

_NONE_TYPE = type(None)


class Matcher:
    """Base class marking an object as a matcher rather than a literal."""

    def __call__(self, value: t.Any) -> bool:  # pragma: no cover - abstract
        raise NotImplementedError


@dc.dataclass(frozen=True, slots=True)
class Any(Matcher):
    """Match any value, ``None`` included."""

    def __call__(self, value: t.Any) -> bool:
        """Return ``True`` for any input."""
        return True

    def __repr__(self) -> str:
        """Return a debug representation."""
        return "Any()"


def _admits_none(typ: t.Any) -> bool:
    if typ is None or typ is _NONE_TYPE or typ is object or typ is t.Any:
        return True
    origin = t.get_origin(typ)
    if origin is t.Union or origin is types.UnionType:
        return any(_admits_none(arg) for arg in t.get_args(typ))
    return False


def is_assignable(value: t.Any, typ: t.Any) -> bool:
    """Return ``True`` when *value* could be passed where *typ* is declared."""
    if value is None:
        return _admits_none(typ)
    if typ is t.Any or typ is object:
        return True
    origin = t.get_origin(typ)
    if origin is t.Union or origin is types.UnionType:
        return any(is_assignable(value, arg) for arg in t.get_args(typ))
    if origin is t.Literal:
        return value in t.get_args(typ)
    if origin is not None:
        typ = origin
    try:
        return isinstance(value, typ)
    except TypeError:
        return False


@dc.dataclass(frozen=True, slots=True)
class IsA(Matcher):
    """Match values assignable to ``typ``.

    ``None`` only matches when ``typ`` admits it, for example
    ``IsA(int | None)``.
    """

    typ: t.Any

    def __call__(self, value: t.Any) -> bool:
        """Return ``True`` when ``value`` is an instance of ``typ``."""
        return is_assignable(value, self.typ)


@dc.dataclass(frozen=True, slots=True)
class Eq(Matcher):
    """Match values equal to a captured constant."""

    expected: t.Any

    def __call__(self, value: t.Any) -> bool:
        """Return ``True`` if *value* equals the captured constant."""
        if self.expected is value:
            return True
        try:
            return bool(self.expected == value)
        except Exception:  # noqa: BLE001 - foreign __eq__ may blow up
            return False

    def __repr__(self) -> str:
        """Render the literal the way it was written."""
        return repr(self.expected)


@dc.dataclass(frozen=True, slots=True)
class Regex(Matcher):
    """Match if *value* matches ``pattern``."""

    pattern: str
    _compiled: re.Pattern[str] = dc.field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", re.compile(self.pattern))

    def __call__(self, value: t.Any) -> bool:
        """Return ``True`` if the regex matches *value*."""
        if not isinstance(value, str):
            return False
        return bool(self._compiled.search(value))


@dc.dataclass(frozen=True, slots=True)
class Contains(Matcher):
    """Match if ``item`` is found in *value*."""

    item: t.Any

    def __call__(self, value: t.Any) -> bool:
        """Return ``True`` if ``item`` is in *value*."""
        try:
            return self.item in value
        except TypeError:
            return False


@dc.dataclass(frozen=True, slots=True)
class StartsWith(Matcher):
    """Match if *value* begins with ``prefix``."""

    prefix: str

    def __call__(self, value: t.Any) -> bool:
        """Return ``True`` if *value* starts with ``prefix``."""
        return isinstance(value, str) and value.startswith(self.prefix)


@dc.dataclass(frozen=True, slots=True)
class InRange(Matcher):
    """Match values between ``low`` and ``high``."""

    low: t.Any
    high: t.Any
    inclusive: bool = True

    def __call__(self, value: t.Any) -> bool:
        """Return ``True`` if *value* lies within the range."""
        try:
            if self.inclusive:
                return bool(self.low <= value <= self.high)
            return bool(self.low < value < self.high)
        except TypeError:
            return False


@dc.dataclass(frozen=True, slots=True)
class OneOf(Matcher):
    """Match values equal to any of ``options``."""

    options: tuple[t.Any, ...]

    def __init__(self, *options: t.Any) -> None:
        object.__setattr__(self, "options", options)

    def __call__(self, value: t.Any) -> bool:
        """Return ``True`` if *value* equals one of the options."""
        return any(Eq(option)(value) for option in self.options)


@dc.dataclass(frozen=True, slots=True)
class Predicate(Matcher):
    """Use a custom ``func`` to determine a match."""

    func: t.Callable[[t.Any], object]

    def __call__(self, value: t.Any) -> bool:
        """Return ``True`` if ``func(value)`` is truthy."""
        return bool(self.func(value))


def as_matcher(value: t.Any) -> Matcher:
    """Return *value* unchanged when it is a matcher, else wrap it in :class:`Eq`."""
    if isinstance(value, Matcher):
        return value
    return Eq(value)


__all__ = [
    "Any",
    "Contains",
    "Eq",
    "InRange",
    "IsA",
    "Matcher",
    "OneOf",
    "Predicate",
    "Regex",
    "StartsWith",
    "as_matcher",
    "is_assignable",
]
