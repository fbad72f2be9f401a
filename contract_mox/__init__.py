"""Test doubles for Python contracts: set up responses, call, then verify.

A :class:`Mock` wraps an ABC, protocol, class or callable and hands out a
substitute (``mock.object``) whose every member funnels into a setup
registry and an invocation journal::

    mock = Mock(Repository)
    mock.setup("get", IsA(int)).returns(user)
    service = Service(mock.object)
    ...
    mock.verify("get", 42, times=Times.once())
"""

from __future__ import annotations

from .builder import SequenceHandle, SetupHandle
from .comparators import (
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
)
from .controller import ConditionalSetup, Mock, MockBehavior
from .defaults import DefaultValue, DefaultValueProvider
from .errors import (
    ConfigurationError,
    ContractMoxError,
    MissingReturnValueError,
    UnexpectedCallError,
    UnfulfilledExpectationError,
    UnverifiedCallsError,
    VerificationError,
)
from .events import Event, EventHandlers
from .invocation import Invocation
from .naming import MockNameFactory, default_name_factory
from .pytest_plugin import contract_mox as contract_mox_fixture
from .repository import MockRepository
from .times import Times

__all__ = [
    "Any",
    "ConditionalSetup",
    "ConfigurationError",
    "Contains",
    "ContractMoxError",
    "DefaultValue",
    "DefaultValueProvider",
    "Eq",
    "Event",
    "EventHandlers",
    "InRange",
    "Invocation",
    "IsA",
    "Matcher",
    "MissingReturnValueError",
    "Mock",
    "MockBehavior",
    "MockNameFactory",
    "MockRepository",
    "OneOf",
    "Predicate",
    "Regex",
    "SequenceHandle",
    "SetupHandle",
    "StartsWith",
    "Times",
    "UnexpectedCallError",
    "UnfulfilledExpectationError",
    "UnverifiedCallsError",
    "VerificationError",
    "contract_mox_fixture",
    "default_name_factory",
]
