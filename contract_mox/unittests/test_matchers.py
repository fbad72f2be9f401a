"""Unit tests for argument comparators and call patterns."""

from __future__ import annotations

import typing as t

import pytest

from contract_mox import comparators
from contract_mox.comparators import (
    Any,
    Contains,
    Eq,
    InRange,
    IsA,
    Matcher,
    OneOf,
    Predicate,
    Regex,
    StartsWith,
    as_matcher,
)
from contract_mox.contract import Contract
from contract_mox.errors import ConfigurationError
from contract_mox.expectations import CallPattern
from contract_mox.invocation import Invocation
from contract_mox.unittests._contracts import Calculator, UserRepository


class _ExplodingEq:
    def __eq__(self, other: object) -> bool:
        raise RuntimeError("boom")

    __hash__ = object.__hash__


@pytest.mark.parametrize(
    ("matcher", "value", "expected"),
    [
        (Any(), None, True),
        (Any(), object(), True),
        (IsA(int), 3, True),
        (IsA(int), "3", False),
        (IsA(int), None, False),
        (IsA(int | None), None, True),
        (IsA(t.Optional[str]), None, True),
        (IsA(list[int]), [1, 2], True),
        (IsA(t.Literal["a", "b"]), "b", True),
        (IsA(t.Literal["a", "b"]), "c", False),
        (Eq(2), 2, True),
        (Eq(2), 3, False),
        (Regex(r"\d+"), "abc123", True),
        (Regex(r"\d+"), 123, False),
        (Contains("b"), "abc", True),
        (Contains(1), 5, False),
        (StartsWith("ab"), "abc", True),
        (StartsWith("ab"), None, False),
        (InRange(1, 3), 3, True),
        (InRange(1, 3, inclusive=False), 3, False),
        (InRange(1, 3), "x", False),
        (OneOf("a", "b"), "b", True),
        (OneOf("a", "b"), "c", False),
        (Predicate(lambda v: v > 2), 3, True),
        (Predicate(lambda v: v > 2), 1, False),
    ],
)
def test_comparators(matcher: t.Callable[[t.Any], bool], value: object, expected: bool) -> None:
    """Comparators evaluate consistently, repeated calls included."""
    assert matcher(value) is expected
    assert matcher(value) is expected


def test_eq_survives_failing_equality() -> None:
    """A foreign ``__eq__`` raising counts as a mismatch."""
    assert Eq(_ExplodingEq())(1) is False


def test_exported_comparator_classes_are_matchers() -> None:
    """Every exported comparator class derives from :class:`Matcher`."""
    classes = [
        getattr(comparators, name)
        for name in comparators.__all__
        if isinstance(getattr(comparators, name), type)
    ]
    assert Predicate in classes
    assert all(issubclass(cls, Matcher) for cls in classes)


def test_comparator_reprs() -> None:
    """Literals render as written; matchers render by type."""
    assert repr(Any()) == "Any()"
    assert repr(Eq("x")) == "'x'"
    assert repr(IsA(int)) == "IsA(typ=<class 'int'>)"


def test_as_matcher_wraps_literals() -> None:
    """Literal values become :class:`Eq` matchers; matchers pass through."""
    matcher = Any()
    assert as_matcher(matcher) is matcher
    assert as_matcher(5) == Eq(5)


def _invocation(member_name: str, *values: t.Any, contract: Contract) -> Invocation:
    member = contract.member(member_name)
    return Invocation(member, member.bind(values, {}), 1)


def test_pattern_matches_on_member_identity_and_arguments() -> None:
    """A pattern matches its own member with agreeing arguments only."""
    contract = Contract(UserRepository)
    pattern = CallPattern.build(contract.member("get"), (IsA(int),))
    assert pattern.matches(_invocation("get", 1, contract=contract))
    assert not pattern.matches(_invocation("get", "1", contract=contract))

    other = Contract(UserRepository)
    assert not pattern.matches(_invocation("get", 1, contract=other))


def test_pattern_applies_defaults() -> None:
    """Positional and keyword spellings of a call match the same pattern."""
    contract = Contract(UserRepository)
    pattern = CallPattern.build(contract.member("find"), ("bob",), {"active": True})
    member = contract.member("find")
    call = Invocation(member, member.bind(("bob",), {}), 1)
    assert pattern.matches(call)
    assert pattern.describe() == "find('bob', active=True)"


def test_pattern_varargs_and_kwargs() -> None:
    """``*args`` and ``**kwargs`` are matched element by element."""
    contract = Contract(Calculator)
    member = contract.member("log")
    pattern = CallPattern.build(member, ("a", Any()), {"level": IsA(int)})
    good = Invocation(member, member.bind(("a", "b"), {"level": 1}), 1)
    short = Invocation(member, member.bind(("a",), {"level": 1}), 2)
    extra = Invocation(member, member.bind(("a", "b"), {"level": 1, "x": 2}), 3)
    assert pattern.matches(good)
    assert not pattern.matches(short)
    assert not pattern.matches(extra)
    assert pattern.explain_mismatch(extra).startswith("fields:")


def test_pattern_rejects_wrong_arity() -> None:
    """Too many matchers are a configuration error."""
    member = Contract(UserRepository).member("get")
    with pytest.raises(ConfigurationError, match="invalid arguments"):
        CallPattern.build(member, (1, 2))
    with pytest.raises(ConfigurationError, match="takes 1 argument"):
        CallPattern(member, ())
