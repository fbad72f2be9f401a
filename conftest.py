"""Global test configuration and shared fixtures."""

from __future__ import annotations

import typing as t

import pytest

from contract_mox.naming import default_name_factory

pytest_plugins = ["pytester"]


@pytest.fixture(autouse=True)
def reset_mock_names() -> t.Generator[None, None, None]:
    """Start every test with fresh default mock names."""
    default_name_factory.reset()
    yield
    default_name_factory.reset()
