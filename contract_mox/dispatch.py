"""Route intercepted calls to the setup that governs them."""

from __future__ import annotations

import logging
import typing as t

from .contract import MemberKind
from .errors import ConfigurationError, MissingReturnValueError, UnexpectedCallError
from .setups import CallBase, RaiseError, ReturnComputed, ReturnValue
from .substitute import field_value
from .verifiers import format_sections, unexpected_call_message

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .contract import Member
    from .controller import Mock
    from .invocation import Invocation
    from .setups import Claim

logger = logging.getLogger(__name__)


class Dispatcher:
    """Turn calls on a substitute into journal entries and results."""

    def __init__(self, mock: Mock) -> None:
        self._mock = mock

    def dispatch(
        self,
        member: Member,
        args: t.Sequence[t.Any],
        kwargs: t.Mapping[str, t.Any],
    ) -> t.Any:
        """Record the call, select its setup and execute the behaviour."""
        mock = self._mock
        values = member.bind(args, kwargs)
        invocation = mock.invocations.record(member, values, mock.contract.type_args)
        claim = mock.setups.claim(invocation)
        if claim is None:
            return self._handle_unmatched(invocation)
        invocation.mark_matched(claim.setup)
        logger.debug(
            "%s: %r handled by setup #%d", mock.name, invocation, claim.setup.index
        )
        if claim.callback is not None:
            call_args, call_kwargs = invocation.call_arguments()
            claim.callback(*call_args, **call_kwargs)
        return self._execute(claim, invocation)

    def _execute(self, claim: Claim, invocation: Invocation) -> t.Any:
        outcome = claim.outcome
        if isinstance(outcome, ReturnValue):
            return outcome.value
        if isinstance(outcome, ReturnComputed):
            call_args, call_kwargs = invocation.call_arguments()
            return outcome.func(*call_args, **call_kwargs)
        if isinstance(outcome, RaiseError):
            raise outcome.build()
        if isinstance(outcome, CallBase):
            return self._call_base(invocation)
        if self._mock.is_strict and invocation.member.returns_value:
            msg = format_sections(
                f"{self._mock.name}: invocation needs a return value.",
                [
                    ("Actual call", invocation.describe()),
                    ("Setup", claim.setup.describe()),
                    (
                        "Reason",
                        "strict mocks require a returns()/raises()/call_base() "
                        "for members that produce a value",
                    ),
                ],
            )
            raise MissingReturnValueError(msg)
        return self._mock.default_value_for(invocation.member)

    def _handle_unmatched(self, invocation: Invocation) -> t.Any:
        mock = self._mock
        if mock.is_strict:
            raise UnexpectedCallError(unexpected_call_message(mock, invocation))
        member = invocation.member
        if member.is_field and member.kind is MemberKind.GETTER:
            stored, value = field_value(mock.object, member.name)
            if stored:
                logger.debug(
                    "%s: %r unmatched; using stored field", mock.name, invocation
                )
                return value
        if mock.call_base and member.has_base:
            logger.debug("%s: %r unmatched; calling base", mock.name, invocation)
            return self._call_base(invocation)
        logger.debug("%s: %r unmatched; using default value", mock.name, invocation)
        return mock.default_value_for(member)

    def _call_base(self, invocation: Invocation) -> t.Any:
        member = invocation.member
        if member.base is None:
            msg = f"{member.qualified_name} has no base implementation to call"
            raise ConfigurationError(msg)
        call_args, call_kwargs = invocation.call_arguments()
        return member.base(self._mock.object, *call_args, **call_kwargs)


__all__ = ["Dispatcher"]
