"""Behavioural tests for mocks using pytest-bdd."""

from __future__ import annotations

from pathlib import Path

from pytest_bdd import scenario

from tests.steps import *  # noqa: F403

FEATURES_DIR = Path(__file__).resolve().parent.parent / "features"


@scenario(str(FEATURES_DIR / "mock_setup.feature"), "later setups take precedence")
def test_later_setups_take_precedence() -> None:
    """The most recent matching setup answers the call."""


@scenario(
    str(FEATURES_DIR / "mock_setup.feature"),
    "exhausted sequences fall back to older setups",
)
def test_exhausted_sequences_fall_back() -> None:
    """Sequences give way to older setups once consumed."""


@scenario(str(FEATURES_DIR / "mock_setup.feature"), "strict mocks reject unmatched calls")
def test_strict_mocks_reject_unmatched_calls() -> None:
    """Strict mocks raise for calls nothing governs."""


@scenario(str(FEATURES_DIR / "mock_setup.feature"), "loose mocks return defaults")
def test_loose_mocks_return_defaults() -> None:
    """Loose mocks answer unmatched calls with defaults."""


@scenario(
    str(FEATURES_DIR / "verification.feature"), "verification counts matching calls"
)
def test_verification_counts_matching_calls() -> None:
    """Verification counts every matching call."""


@scenario(
    str(FEATURES_DIR / "verification.feature"),
    "unverified calls are reported until verified",
)
def test_unverified_calls_are_reported() -> None:
    """Leftover calls fail ``verify_no_other_calls``."""


@scenario(str(FEATURES_DIR / "verification.feature"), "verifiable setups must be matched")
def test_verifiable_setups_must_be_matched() -> None:
    """Setups flagged verifiable must govern a call."""
