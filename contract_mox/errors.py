"""Custom exceptions raised by contract-mox."""

from __future__ import annotations


class ContractMoxError(Exception):
    """Base class for all framework errors."""


class ConfigurationError(ContractMoxError, TypeError):
    """Raised synchronously when a setup or mock is declared incorrectly."""


class UnexpectedCallError(ContractMoxError):
    """Raised when a strict mock receives a call no setup governs."""


class MissingReturnValueError(UnexpectedCallError):
    """Raised when a strict setup for a value-returning member has no result."""


class VerificationError(ContractMoxError, AssertionError):
    """Base class for verification failures."""


class UnfulfilledExpectationError(VerificationError):
    """Raised when a call count falls outside the expected range."""


class UnverifiedCallsError(VerificationError):
    """Raised when calls remain that no verification accounted for."""


__all__ = [
    "ConfigurationError",
    "ContractMoxError",
    "MissingReturnValueError",
    "UnexpectedCallError",
    "UnfulfilledExpectationError",
    "UnverifiedCallsError",
    "VerificationError",
]
