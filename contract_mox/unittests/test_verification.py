"""Unit tests for call-count verification."""

from __future__ import annotations

import pytest

from contract_mox import (
    Any,
    DefaultValue,
    Mock,
    Times,
    UnfulfilledExpectationError,
    UnverifiedCallsError,
)
from contract_mox.unittests._contracts import Service, User, UserRepository


def _called_with_1_2_1() -> Mock[UserRepository]:
    mock = Mock(UserRepository)
    repo = mock.object
    repo.get(1)
    repo.get(2)
    repo.get(1)
    return mock


def test_verify_counts_matching_calls() -> None:
    """Each verification counts every matching journal entry."""
    mock = _called_with_1_2_1()
    mock.verify("get", 1, times=Times.exactly(2))
    mock.verify("get", 2, times=Times.once())
    mock.verify("get", Any(), times=Times.exactly(3))
    mock.verify("get", 3, times=Times.never())
    mock.verify("get", 1)
    mock.verify(lambda repo: repo.get(1), times=Times.between(1, 2))


def test_verify_failure_report() -> None:
    """Failures name the expectation, the count and the recorded calls."""
    mock = _called_with_1_2_1()
    with pytest.raises(UnfulfilledExpectationError) as excinfo:
        mock.verify("get", 2, times=Times.exactly(2), message="lookups")
    report = str(excinfo.value)
    assert report.startswith("lookups\n")
    assert "expected invocation exactly 2, but was 1 time(s)." in report
    assert "Expected:" in report
    assert "Recorded calls to get:" in report
    assert "#1 get(1)" in report
    assert "#3 get(1)" in report
    assert isinstance(excinfo.value, AssertionError)


def test_verify_accepts_times_factories() -> None:
    """A callable returning :class:`Times` may stand in for the range."""
    mock = _called_with_1_2_1()
    mock.verify("get", 2, times=Times.once)
    with pytest.raises(UnfulfilledExpectationError):
        mock.verify("get", 1, times=Times.at_most_once)


def test_verify_no_other_calls_before_and_after_verify() -> None:
    """Only calls no verification has accounted for are reported."""
    mock = _called_with_1_2_1()
    with pytest.raises(UnverifiedCallsError, match="not verified"):
        mock.verify_no_other_calls()

    mock.verify("get", 1, times=Times.exactly(2))
    with pytest.raises(UnverifiedCallsError) as excinfo:
        mock.verify_no_other_calls()
    assert "get(2)" in str(excinfo.value)
    assert "get(1)" not in str(excinfo.value)

    mock.verify("get", 2)
    mock.verify_no_other_calls()


def test_failed_verification_still_marks_calls() -> None:
    """Matching entries are marked even when the count is out of range."""
    mock = _called_with_1_2_1()
    with pytest.raises(UnfulfilledExpectationError):
        mock.verify("get", Any(), times=Times.never())
    mock.verify_no_other_calls()


def test_setups_do_not_verify_calls() -> None:
    """A call governed by a setup still needs an explicit verification."""
    mock = Mock(UserRepository)
    mock.setup("count").returns(1)
    mock.object.count()
    with pytest.raises(UnverifiedCallsError):
        mock.verify_no_other_calls()


def test_property_verification() -> None:
    """Property reads and writes are verified separately."""
    mock = Mock(UserRepository)
    repo = mock.object
    repo.size = 3
    repo.size = 4
    _ = repo.size
    mock.verify_set("size", 3, times=Times.once())
    mock.verify_set("size", times=Times.exactly(2))
    mock.verify_get("size", times=Times.once())
    mock.verify_set(lambda r: setattr(r, "size", 4))
    mock.verify_no_other_calls()


def test_verify_setups_checks_verifiable_setups_only() -> None:
    """Only setups flagged ``verifiable()`` are checked by ``verify_setups``."""
    mock = Mock(UserRepository)
    mock.setup("count").returns(1).verifiable()
    mock.setup("get", 1).returns(None).verifiable(Times.exactly(2), "get twice")
    mock.setup("save", Any())

    with pytest.raises(UnfulfilledExpectationError) as excinfo:
        mock.verify_setups()
    report = str(excinfo.value)
    assert "count()" in report
    assert "get twice" in report
    assert "save" not in report

    mock.object.count()
    mock.object.get(1)
    mock.object.get(1)
    mock.verify_setups()
    mock.verify_no_other_calls()


def test_verify_all_checks_every_setup() -> None:
    """``verify_all`` treats every setup as expected at least once."""
    mock = Mock(UserRepository)
    mock.setup("count").returns(1)
    mock.setup("save", Any())
    mock.object.count()
    with pytest.raises(UnfulfilledExpectationError, match="save"):
        mock.verify_all()
    mock.object.save(User(1, "a"))
    mock.verify_all()


def test_reset_calls_forgets_history() -> None:
    """Resetting clears the journal and counters but keeps numbering."""
    mock = _called_with_1_2_1()
    mock.setup("count").returns(1).verifiable()
    mock.object.count()
    mock.reset_calls()
    mock.verify("get", Any(), times=Times.never())
    with pytest.raises(UnfulfilledExpectationError):
        mock.verify_setups()
    mock.object.get(5)
    assert [inv.sequence for inv in mock.invocations] == [5]


def test_verify_no_other_calls_includes_inner_mocks() -> None:
    """Calls on inner mocks must be verified too."""
    mock = Mock(Service, default_value=DefaultValue.MOCK)
    settings = mock.object.open()
    settings.lookup("k")
    mock.verify("open")
    with pytest.raises(UnverifiedCallsError, match="lookup"):
        mock.verify_no_other_calls()
    Mock.get(settings).verify("lookup", "k")
    mock.verify_no_other_calls()
