"""Step definitions for mock behavioural tests."""
# pyright: reportMissingImports=false, reportUnknownMemberType=false

from __future__ import annotations

import typing as t

from behave import given, then, when  # type: ignore[attr-defined]

from contract_mox import (
    Any,
    ContractMoxError,
    Mock,
    MockBehavior,
    Times,
    UnexpectedCallError,
    VerificationError,
)
from tests.helpers.world import Gateway, parse_ints


class BehaveContext(t.Protocol):
    """Behave step context with attributes used in tests."""

    mock: Mock[Gateway]
    results: list[t.Any]
    error: Exception | None


def _expect_failure(check: t.Callable[[], None]) -> None:
    try:
        check()
    except VerificationError:
        return
    msg = "verification unexpectedly succeeded"
    raise AssertionError(msg)


def _check(outcome: str, check: t.Callable[[], None]) -> None:
    if outcome == "fails":
        _expect_failure(check)
    else:
        check()


@given("a {behavior} mock of the gateway")
def step_create_mock(context: BehaveContext, behavior: str) -> None:
    """Create a mock of :class:`Gateway` for the scenario."""
    context.mock = Mock(Gateway, behavior=MockBehavior(behavior))
    context.results = []
    context.error = None


@given("g with any argument returns {result:d}")
def step_setup_any(context: BehaveContext, result: int) -> None:
    """Answer every call to ``g`` with *result*."""
    context.mock.setup("g", Any()).returns(result)


@given("g with argument {value:d} returns {result:d}")
def step_setup_value(context: BehaveContext, value: int, result: int) -> None:
    """Answer ``g(value)`` with *result*."""
    context.mock.setup("g", value).returns(result)


@given("g with argument {value:d} returns {result:d} and is verifiable")
def step_setup_verifiable(context: BehaveContext, value: int, result: int) -> None:
    """Answer ``g(value)`` and expect it to be called."""
    context.mock.setup("g", value).returns(result).verifiable()


@given("g with any argument returns the sequence {values}")
def step_setup_sequence(context: BehaveContext, values: str) -> None:
    """Answer consecutive calls to ``g`` with *values*."""
    handle = context.mock.setup_sequence("g", Any())
    for value in parse_ints(values):
        handle.returns(value)


@when("I call g with {value:d}")
def step_call(context: BehaveContext, value: int) -> None:
    """Call ``g`` and keep the result."""
    context.results.append(context.mock.object.g(value))


@when("I call g {count:d} times with {value:d}")
def step_call_repeatedly(context: BehaveContext, count: int, value: int) -> None:
    """Call ``g`` *count* times."""
    for _ in range(count):
        context.results.append(context.mock.object.g(value))


@when("I call g with {value:d} expecting an error")
def step_call_failing(context: BehaveContext, value: int) -> None:
    """Call ``g`` and keep the framework error it raises."""
    try:
        context.mock.object.g(value)
    except ContractMoxError as err:
        context.error = err


@when("I verify g with argument {value:d}")
def step_verify_value(context: BehaveContext, value: int) -> None:
    """Verify ``g(value)`` happened at least once."""
    context.mock.verify("g", value)


@then("the results should be {values}")
def step_check_results(context: BehaveContext, values: str) -> None:
    """Compare the collected results."""
    assert context.results == parse_ints(values)


@then("an UnexpectedCallError should have been raised")
def step_check_unexpected(context: BehaveContext) -> None:
    """The last call was rejected by a strict mock."""
    assert isinstance(context.error, UnexpectedCallError)


@then("the journal should contain {count:d} invocation")
def step_check_journal(context: BehaveContext, count: int) -> None:
    """The journal holds *count* entries."""
    assert len(context.mock.invocations) == count


@then("g with argument {value:d} was called exactly {count:d} times")
def step_check_value_count(context: BehaveContext, value: int, count: int) -> None:
    """Verify the exact number of ``g(value)`` calls."""
    context.mock.verify("g", value, times=Times.exactly(count))


@then("g with any argument was called exactly {count:d} times")
def step_check_any_count(context: BehaveContext, count: int) -> None:
    """Verify the exact number of ``g`` calls."""
    context.mock.verify("g", Any(), times=Times.exactly(count))


@then("g with argument {value:d} was never called")
def step_check_never(context: BehaveContext, value: int) -> None:
    """Verify ``g(value)`` never happened."""
    context.mock.verify("g", value, times=Times.never())


@then("verifying g with argument {value:d} exactly {count:d} times fails")
def step_check_count_fails(context: BehaveContext, value: int, count: int) -> None:
    """The count of ``g(value)`` calls differs from *count*."""
    _expect_failure(
        lambda: context.mock.verify("g", value, times=Times.exactly(count))
    )


@then("verifying no other calls {outcome}")
def step_check_no_other_calls(context: BehaveContext, outcome: str) -> None:
    """Check ``verify_no_other_calls`` against the expected *outcome*."""
    _check(outcome, context.mock.verify_no_other_calls)


@then("verifying setups {outcome}")
def step_check_setups(context: BehaveContext, outcome: str) -> None:
    """Check ``verify_setups`` against the expected *outcome*."""
    _check(outcome, context.mock.verify_setups)
