"""pytest-bdd steps that create mocks, declare setups and make calls."""

from __future__ import annotations

from pytest_bdd import given, parsers, then, when

from contract_mox import Any, ContractMoxError, UnexpectedCallError
from tests.helpers.world import World, parse_ints


@given(parsers.parse("a {behavior} mock of the gateway"), target_fixture="world")
def create_mock(behavior: str) -> World:
    """Create a mock of the gateway with the named behaviour."""
    return World.create(behavior)


@given(parsers.parse("g with any argument returns {result:d}"))
def setup_any(world: World, result: int) -> None:
    """Answer every call to ``g`` with *result*."""
    world.mock.setup("g", Any()).returns(result)


@given(parsers.parse("g with argument {value:d} returns {result:d}"))
def setup_value(world: World, value: int, result: int) -> None:
    """Answer ``g(value)`` with *result*."""
    world.mock.setup("g", value).returns(result)


@given(parsers.parse("g with argument {value:d} returns {result:d} and is verifiable"))
def setup_verifiable(world: World, value: int, result: int) -> None:
    """Answer ``g(value)`` and expect it to be called."""
    world.mock.setup("g", value).returns(result).verifiable()


@given(parsers.parse("g with any argument returns the sequence {values}"))
def setup_sequence(world: World, values: str) -> None:
    """Answer consecutive calls to ``g`` with *values*."""
    handle = world.mock.setup_sequence("g", Any())
    for value in parse_ints(values):
        handle.returns(value)


@when(parsers.parse("I call g with {value:d}"))
def call_g(world: World, value: int) -> None:
    """Call ``g`` and keep the result."""
    world.results.append(world.mock.object.g(value))


@when(parsers.parse("I call g {count:d} times with {value:d}"))
def call_g_repeatedly(world: World, count: int, value: int) -> None:
    """Call ``g`` *count* times."""
    for _ in range(count):
        world.results.append(world.mock.object.g(value))


@when(parsers.parse("I call g with {value:d} expecting an error"))
def call_g_failing(world: World, value: int) -> None:
    """Call ``g`` and keep the framework error it raises."""
    try:
        world.mock.object.g(value)
    except ContractMoxError as err:
        world.error = err


@then(parsers.parse("the results should be {values}"))
def check_results(world: World, values: str) -> None:
    """Compare the collected results."""
    assert world.results == parse_ints(values)


@then("an UnexpectedCallError should have been raised")
def check_unexpected(world: World) -> None:
    """The last call was rejected by a strict mock."""
    assert isinstance(world.error, UnexpectedCallError)


@then(parsers.parse("the journal should contain {count:d} invocation"))
def check_journal(world: World, count: int) -> None:
    """The journal holds *count* entries."""
    assert len(world.mock.invocations) == count
