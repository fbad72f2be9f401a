"""Unit tests for setup precedence, sequences and claiming."""

from __future__ import annotations

import threading

import pytest

from contract_mox import Any, Mock, MockBehavior, UnexpectedCallError
from contract_mox.setups import SetupRegistry, SetupState
from contract_mox.unittests._contracts import UserRepository


def test_registry_assigns_creation_indices() -> None:
    """Setups are numbered in declaration order."""
    mock = Mock(UserRepository)
    first = mock.setup("count").setup
    second = mock.setup("count").setup
    assert (first.index, second.index) == (0, 1)
    assert list(mock.setups) == [first, second]
    assert isinstance(mock.setups, SetupRegistry)


def test_sequence_falls_back_to_older_setups_once_exhausted() -> None:
    """An exhausted sequence is skipped, never removed."""
    mock = Mock(UserRepository)
    mock.setup("count").returns(9)
    handle = mock.setup_sequence("count").returns(1).returns(2)
    repo = mock.object
    assert [repo.count() for _ in range(4)] == [1, 2, 9, 9]
    assert handle.setup.state is SetupState.EXHAUSTED
    assert handle.setup in list(mock.setups)
    assert handle.setup.times_invoked == 2


def test_sequence_steps_can_raise_and_pass() -> None:
    """Sequence steps support errors and default fall-through."""
    mock = Mock(UserRepository)
    mock.setup_sequence("count").returns(1).raises(RuntimeError("busy")).passes()
    repo = mock.object
    assert repo.count() == 1
    with pytest.raises(RuntimeError, match="busy"):
        repo.count()
    assert repo.count() == 0
    assert repo.count() == 0


def test_exhausted_sequence_on_strict_mock() -> None:
    """With nothing left to govern the call, strict mocks reject it."""
    mock = Mock(UserRepository, behavior=MockBehavior.STRICT)
    mock.setup_sequence("count").returns(1)
    assert mock.object.count() == 1
    with pytest.raises(UnexpectedCallError):
        mock.object.count()


def test_empty_sequence_is_exhausted_immediately() -> None:
    """A sequence without steps never governs a call."""
    mock = Mock(UserRepository)
    mock.setup("count").returns(4)
    handle = mock.setup_sequence("count")
    assert handle.setup.is_exhausted
    assert mock.object.count() == 4


def test_concurrent_callers_claim_each_step_once() -> None:
    """Every sequence step is handed to exactly one caller."""
    steps = 50
    mock = Mock(UserRepository)
    handle = mock.setup_sequence("count")
    for value in range(1, steps + 1):
        handle.returns(value)

    results: list[int] = []
    lock = threading.Lock()
    barrier = threading.Barrier(8)

    def worker() -> None:
        barrier.wait()
        for _ in range(steps // 4):
            value = mock.object.count()
            with lock:
                results.append(value)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 8 * (steps // 4)
    assert sorted(value for value in results if value) == list(range(1, steps + 1))
    assert results.count(0) == len(results) - steps


def test_reset_calls_keeps_sequence_position() -> None:
    """Resetting counters does not rewind consumed steps."""
    mock = Mock(UserRepository)
    handle = mock.setup_sequence("count").returns(1).returns(2)
    mock.object.count()
    mock.reset_calls()
    assert handle.setup.times_invoked == 0
    assert mock.object.count() == 2


def test_find_governing_uses_the_claim_scan_without_consuming() -> None:
    """The newest eligible setup governs; guards and exhaustion are honoured."""
    enabled = False
    mock = Mock(UserRepository)
    oldest = mock.setup("get", Any()).setup
    unguarded = mock.setup("get", 1).setup
    guarded = mock.when(lambda: enabled).setup("get", 1).setup
    sequence = mock.setup_sequence("get", 1).returns(None).setup
    mock.setup("get", 2)
    mock.setup("count")

    mock.object.get(1)
    invocation = mock.invocations.snapshot()[-1]
    assert invocation.matched_by is sequence
    assert sequence.is_exhausted

    assert mock.setups.find_governing(invocation) is unguarded
    enabled = True
    assert mock.setups.find_governing(invocation) is guarded
    assert mock.setups.find_governing(invocation) is guarded
    assert guarded.times_invoked == 0

    mock.object.get(3)
    assert mock.setups.find_governing(mock.invocations.snapshot()[-1]) is oldest
