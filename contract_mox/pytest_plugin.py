"""Pytest plugin providing the ``contract_mox`` fixture."""

from __future__ import annotations

import logging
import typing as t

import pytest

from .repository import MockRepository

logger = logging.getLogger(__name__)

_OPTION = "contract_mox_verify_on_teardown"


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line and ini options for the plugin."""
    group = parser.getgroup("contract_mox")
    group.addoption(
        "--contract-mox-verify-on-teardown",
        action="store_true",
        dest=_OPTION,
        default=None,
        help=(
            "Run verify() on the contract_mox repository during teardown. "
            "Overrides the pytest.ini setting."
        ),
    )
    group.addoption(
        "--no-contract-mox-verify-on-teardown",
        action="store_false",
        dest=_OPTION,
        default=None,
        help=(
            "Skip verify() on the contract_mox repository during teardown. "
            "Overrides the pytest.ini setting."
        ),
    )
    parser.addini(
        _OPTION,
        "Verify setups marked verifiable() when the contract_mox fixture ends.",
        type="bool",
        default=True,
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register plugin-specific markers."""
    config.addinivalue_line(
        "markers",
        (
            "contract_mox(verify_on_teardown: bool = True): override teardown "
            "verification for a single test."
        ),
    )


class _ContractMoxItem(t.Protocol):
    """pytest item carrying contract_mox teardown state."""

    _contract_mox_verify_error: Exception | None
    _contract_mox_verify_should_fail: bool


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[t.Any]
) -> t.Generator[None, None, None]:
    """Keep each phase's report on the item for the fixture's teardown."""
    del call
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)
    if rep.when == "teardown":
        _apply_deferred_verify_failure(item, rep)


def _verify_on_teardown(request: pytest.FixtureRequest) -> bool:
    """Return whether the fixture verifies the repository on teardown."""
    # Priority order: marker > fixture param > CLI option > INI setting
    marker = request.node.get_closest_marker("contract_mox")
    if marker is not None and "verify_on_teardown" in marker.kwargs:
        return bool(marker.kwargs["verify_on_teardown"])

    param_value = _get_param_verify(request)
    if param_value is not None:
        return param_value

    config = request.config
    cli_value = config.getoption(_OPTION)
    if cli_value is not None:
        return bool(cli_value)

    return bool(config.getini(_OPTION))


def _get_param_verify(request: pytest.FixtureRequest) -> bool | None:
    """Return the fixture parameter override, if the fixture was parametrized."""
    param = getattr(request, "param", None)
    if param is None:
        return None
    if isinstance(param, dict):
        if "verify_on_teardown" in param:
            return bool(param["verify_on_teardown"])
        keys = list(param.keys())
        msg = (
            "contract_mox fixture param dict must contain 'verify_on_teardown' "
            f"key, got keys: {keys}"
        )
        raise TypeError(msg)
    if isinstance(param, bool):
        return param
    msg = (
        "contract_mox fixture param must be a bool or dict with "
        f"'verify_on_teardown' key, got {type(param).__name__}"
    )
    raise TypeError(msg)


def _apply_deferred_verify_failure(
    item: pytest.Item, report: pytest.TestReport
) -> None:
    """Attach a verification error the test body already outranked."""
    err: Exception | None = getattr(item, "_contract_mox_verify_error", None)
    if err is None:
        return
    delattr(item, "_contract_mox_verify_error")
    should_fail = getattr(item, "_contract_mox_verify_should_fail", False)
    if hasattr(item, "_contract_mox_verify_should_fail"):
        delattr(item, "_contract_mox_verify_should_fail")
    if not should_fail:
        report.sections.append(
            ("contract_mox verification", f"{type(err).__name__}: {err}")
        )


def _call_stage_failed(item: pytest.Item) -> bool:
    """Return ``True`` when the test body has already failed."""
    rep_call = getattr(item, "rep_call", None)
    return bool(rep_call and rep_call.failed)


def _teardown_repository(item: pytest.Item, repository: MockRepository) -> None:
    typed_item = t.cast("_ContractMoxItem", item)
    try:
        repository.verify()
    except Exception as err:
        logger.exception("Error during contract_mox verification")
        should_fail = not _call_stage_failed(item)
        typed_item._contract_mox_verify_error = err
        typed_item._contract_mox_verify_should_fail = should_fail
        if should_fail:
            pytest.fail(f"{type(err).__name__}: {err}")


@pytest.fixture
def contract_mox(request: pytest.FixtureRequest) -> t.Generator[MockRepository, None, None]:
    """Provide a :class:`MockRepository`, verified when the test ends."""
    repository = MockRepository()
    verify = _verify_on_teardown(request)
    yield repository
    if verify:
        _teardown_repository(request.node, repository)
