"""The :class:`Mock` controller and related helpers."""

from __future__ import annotations

import enum
import threading
import typing as t

from .builder import SequenceHandle, SetupHandle
from .comparators import Any
from .contract import Contract, MemberKind
from .defaults import DefaultValue, DefaultValueProvider, resolve_provider
from .dispatch import Dispatcher
from .errors import ConfigurationError
from .events import handlers_for, require_event, strip_frames
from .expectations import CallPattern
from .journal import InvocationJournal
from .naming import MockNameFactory, default_name_factory
from .recorder import resolve
from .setups import Behavior, Setup, SetupRegistry
from .substitute import build_substitute, initialize_substitute, mock_of
from .times import Times
from .verifiers import CallCountVerifier, NoOtherCallsVerifier, SetupVerifier

if t.TYPE_CHECKING:
    from .contract import Member

T = t.TypeVar("T")

MemberRef = str | t.Callable[[t.Any], object]
Condition = t.Callable[[], object]
TimesArg = Times | t.Callable[[], Times] | None

_MISSING: t.Any = object()
_FRAMEWORK_FILES = frozenset({__file__, handlers_for.__code__.co_filename})


class MockBehavior(enum.StrEnum):
    """How a mock answers calls that no setup governs."""

    LOOSE = "loose"
    STRICT = "strict"


def _resolve_times(times: TimesArg) -> Times:
    if times is None:
        return Times.at_least_once()
    if isinstance(times, Times):
        return times
    return times()


class Mock(t.Generic[T]):
    """Substitute a contract, answer its calls and verify them afterwards."""

    def __init__(
        self,
        contract: type[T] | t.Any,
        *args: t.Any,
        behavior: MockBehavior | str = MockBehavior.LOOSE,
        default_value: DefaultValue | str | DefaultValueProvider = DefaultValue.EMPTY,
        call_base: bool = False,
        name: str | None = None,
        name_factory: MockNameFactory | None = None,
    ) -> None:
        """Create a mock of *contract*.

        Parameters
        ----------
        contract:
            An ABC, protocol, class, callable or ``Callable[...]`` alias.
        args:
            Constructor arguments forwarded to the contract's ``__init__``.
            Only class contracts accept them; without them the constructor
            is not run. Values the constructor assigns to annotated fields
            are stored on the substitute, not recorded as calls.
        behavior:
            ``MockBehavior.STRICT`` fails calls that no setup governs;
            ``MockBehavior.LOOSE`` (the default) returns default values.
        default_value:
            Policy or provider used for unanswered calls.
        call_base:
            When ``True``, unanswered calls on members with a real
            implementation call through to it.
        name:
            Display name; defaults to ``Mock<contract:serial>``.
        name_factory:
            Factory supplying default names; the process-wide factory is
            used when omitted.
        """
        self.contract = Contract(contract)
        if args and not self.contract.accepts_constructor_args:
            msg = f"constructor arguments are not supported for {self.contract.display_name}"
            raise ConfigurationError(msg)
        self._behavior = MockBehavior(behavior)
        self.default_value_provider = resolve_provider(default_value)
        self.call_base = call_base
        factory = name_factory if name_factory is not None else default_name_factory
        self.name = name if name is not None else factory.next_name(self.contract.display_name)
        self._name_factory = factory

        self.setups = SetupRegistry()
        self.invocations = InvocationJournal()
        self._dispatcher = Dispatcher(self)
        self._configured_defaults: dict[t.Any, t.Any] = {}
        self._inner_mocks: dict[Member, Mock[t.Any]] = {}
        self._inner_lock = threading.Lock()
        self._auto_properties = False

        self._object = build_substitute(self.contract, self._dispatcher.dispatch, self)
        if args:
            initialize_substitute(self._object, args, {})

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def object(self) -> T:
        """Return the substitute standing in for the contract."""
        return self._object

    @property
    def behavior(self) -> MockBehavior:
        """Return the behaviour fixed at creation."""
        return self._behavior

    @property
    def is_strict(self) -> bool:
        """Return ``True`` for strict mocks."""
        return self._behavior is MockBehavior.STRICT

    @property
    def inner_mocks(self) -> list[Mock[t.Any]]:
        """Return mocks created as default values by this mock."""
        with self._inner_lock:
            return list(self._inner_mocks.values())

    @staticmethod
    def get(substitute: object) -> Mock[t.Any]:
        """Return the mock behind *substitute*."""
        mock = mock_of(substitute)
        if not isinstance(mock, Mock):
            msg = f"{substitute!r} is not a mocked object"
            raise ConfigurationError(msg)
        return mock

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------
    def _pattern(
        self,
        member: MemberRef,
        matchers: tuple[t.Any, ...],
        kw_matchers: dict[str, t.Any],
        kind: MemberKind | None = None,
    ) -> CallPattern:
        if isinstance(member, str):
            resolved = self.contract.member(member, kind)
            return CallPattern.build(resolved, matchers, kw_matchers)
        if matchers or kw_matchers:
            msg = "pass matchers inside the expression, not alongside it"
            raise ConfigurationError(msg)
        resolved, args, kwargs = resolve(self.contract, member)
        if kind is not None and resolved.kind is not kind:
            msg = f"expected a {kind} expression, got {resolved.kind} {resolved.name!r}"
            raise ConfigurationError(msg)
        return CallPattern.build(resolved, args, kwargs)

    def _register(
        self,
        pattern: CallPattern,
        when: Condition | None,
        behavior: Behavior | None = None,
    ) -> Setup:
        return self.setups.register(Setup(pattern, condition=when, behavior=behavior))

    def setup(
        self,
        member: MemberRef,
        *matchers: t.Any,
        when: Condition | None = None,
        **kw_matchers: t.Any,
    ) -> SetupHandle:
        """Declare how calls matching *member* and *matchers* are answered.

        Later setups take precedence over earlier ones matching the same
        call. Literal arguments match by equality; comparator objects from
        :mod:`contract_mox.comparators` match flexibly.
        """
        pattern = self._pattern(member, matchers, kw_matchers)
        return SetupHandle(self._register(pattern, when))

    def setup_sequence(
        self,
        member: MemberRef,
        *matchers: t.Any,
        when: Condition | None = None,
        **kw_matchers: t.Any,
    ) -> SequenceHandle:
        """Declare a bounded sequence of responses, one per matching call."""
        pattern = self._pattern(member, matchers, kw_matchers)
        return SequenceHandle(self._register(pattern, when, Behavior(steps=())))

    def setup_get(self, name: MemberRef, *, when: Condition | None = None) -> SetupHandle:
        """Declare how reads of property *name* are answered."""
        pattern = self._pattern(name, (), {}, MemberKind.GETTER)
        return SetupHandle(self._register(pattern, when))

    def setup_set(
        self,
        name: MemberRef,
        value: t.Any = _MISSING,
        *,
        when: Condition | None = None,
    ) -> SetupHandle:
        """Declare how writes to property *name* are answered.

        *value* defaults to :class:`~contract_mox.comparators.Any`.
        """
        if isinstance(name, str):
            matcher = Any() if value is _MISSING else value
            pattern = self._pattern(name, (matcher,), {}, MemberKind.SETTER)
        else:
            pattern = self._pattern(name, (), {}, MemberKind.SETTER)
        return SetupHandle(self._register(pattern, when))

    def setup_property(self, name: str, initial: t.Any = _MISSING) -> Mock[T]:
        """Make property *name* remember the last value written to it.

        Without *initial*, the property starts at the mock's default value
        for its type.
        """
        getter = self.contract.member(name, MemberKind.GETTER)
        setter = self.contract.find(name, MemberKind.SETTER)
        if setter is None:
            msg = f"{getter.qualified_name} is read-only"
            raise ConfigurationError(msg)
        cell = [self.default_value_for(getter) if initial is _MISSING else initial]

        def store(value: t.Any) -> None:
            cell[0] = value

        self.setup_get(name).returns_using(lambda: cell[0])
        self.setup_set(name).callback(store)
        return self

    def setup_all_properties(self) -> Mock[T]:
        """Stub every property: writable ones remember values, read-only ones return defaults.

        Inner mocks created afterwards inherit this setting.
        """
        self._auto_properties = True
        for name in self.contract.properties():
            if self.contract.find(name, MemberKind.SETTER) is not None:
                self.setup_property(name)
            else:
                getter = self.contract.member(name, MemberKind.GETTER)
                self.setup_get(name).returns(self.default_value_for(getter))
        return self

    def when(self, condition: Condition) -> ConditionalSetup[T]:
        """Return a helper whose setups only apply while *condition* holds."""
        return ConditionalSetup(self, condition)

    def set_returns_default(self, typ: t.Any, value: t.Any) -> Mock[T]:
        """Return *value* for unanswered calls whose return type is *typ*."""
        self._configured_defaults[typ] = value
        return self

    # ------------------------------------------------------------------
    # Default values and inner mocks
    # ------------------------------------------------------------------
    def default_value_for(self, member: Member) -> t.Any:
        """Return the value an unanswered call to *member* produces."""
        typ = member.return_type
        try:
            if typ in self._configured_defaults:
                return self._configured_defaults[typ]
        except TypeError:
            pass
        return self.default_value_provider.produce_for(member, self)

    def create_inner_mock(self, contract: t.Any) -> Mock[t.Any]:
        """Create a mock sharing this mock's settings, for use as a default."""
        inner: Mock[t.Any] = Mock(
            contract,
            behavior=self._behavior,
            default_value=self.default_value_provider,
            call_base=self.call_base,
            name_factory=self._name_factory,
        )
        inner._configured_defaults.update(self._configured_defaults)
        if self._auto_properties:
            inner.setup_all_properties()
        return inner

    def inner_mock_for(self, member: Member) -> Mock[t.Any] | None:
        """Return the inner mock cached for *member*, if any."""
        with self._inner_lock:
            return self._inner_mocks.get(member)

    def remember_inner_mock(self, member: Member, inner: Mock[t.Any]) -> Mock[t.Any]:
        """Cache *inner* for *member*; the first cached mock wins a race."""
        with self._inner_lock:
            return self._inner_mocks.setdefault(member, inner)

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------
    def verify(
        self,
        member: MemberRef,
        *matchers: t.Any,
        times: TimesArg = None,
        message: str | None = None,
        **kw_matchers: t.Any,
    ) -> None:
        """Assert calls matching *member* and *matchers* happened *times*.

        *times* defaults to at least once.
        """
        pattern = self._pattern(member, matchers, kw_matchers)
        CallCountVerifier().verify(self, pattern, _resolve_times(times), message)

    def verify_get(
        self, name: MemberRef, *, times: TimesArg = None, message: str | None = None
    ) -> None:
        """Assert property *name* was read *times*."""
        pattern = self._pattern(name, (), {}, MemberKind.GETTER)
        CallCountVerifier().verify(self, pattern, _resolve_times(times), message)

    def verify_set(
        self,
        name: MemberRef,
        value: t.Any = _MISSING,
        *,
        times: TimesArg = None,
        message: str | None = None,
    ) -> None:
        """Assert property *name* was written (with *value*) *times*."""
        if isinstance(name, str):
            matcher = Any() if value is _MISSING else value
            pattern = self._pattern(name, (matcher,), {}, MemberKind.SETTER)
        else:
            pattern = self._pattern(name, (), {}, MemberKind.SETTER)
        CallCountVerifier().verify(self, pattern, _resolve_times(times), message)

    def verify_no_other_calls(self) -> None:
        """Assert every recorded call was accounted for by a verification."""
        NoOtherCallsVerifier().verify(self)

    def verify_setups(self) -> None:
        """Assert every setup marked ``verifiable()`` met its expected count."""
        SetupVerifier(lambda setup: setup.verifiable).verify(self)

    def verify_all(self) -> None:
        """Assert every setup governed at least one call."""
        SetupVerifier(lambda setup: True).verify(self)

    def reset_calls(self) -> None:
        """Forget recorded calls and setup counters, here and in inner mocks."""
        self.invocations.clear()
        self.setups.reset_counts()
        for inner in self.inner_mocks:
            inner.reset_calls()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def raise_event(self, name: str, *args: t.Any, **kwargs: t.Any) -> None:
        """Invoke the handlers attached to event *name*, in attachment order.

        Exceptions from handlers propagate with the dispatch plumbing
        removed from the traceback. The re-raise adds one frame for this
        method, so the traceback runs from the caller through
        ``raise_event`` straight to the failing handler.
        """
        require_event(self.contract.events, name, self.contract.display_name)
        handlers = handlers_for(self._object, name)
        try:
            handlers.invoke(*args, **kwargs)
        except Exception as err:
            raise err.with_traceback(strip_frames(err.__traceback__, _FRAMEWORK_FILES))

    def __repr__(self) -> str:
        """Return the mock's name."""
        return self.name


class ConditionalSetup(t.Generic[T]):
    """Setups that only apply while a condition holds."""

    def __init__(self, mock: Mock[T], condition: Condition) -> None:
        self._mock = mock
        self._condition = condition

    def setup(self, member: MemberRef, *matchers: t.Any, **kw_matchers: t.Any) -> SetupHandle:
        """Conditional form of :meth:`Mock.setup`."""
        return self._mock.setup(member, *matchers, when=self._condition, **kw_matchers)

    def setup_sequence(
        self, member: MemberRef, *matchers: t.Any, **kw_matchers: t.Any
    ) -> SequenceHandle:
        """Conditional form of :meth:`Mock.setup_sequence`."""
        return self._mock.setup_sequence(
            member, *matchers, when=self._condition, **kw_matchers
        )

    def setup_get(self, name: MemberRef) -> SetupHandle:
        """Conditional form of :meth:`Mock.setup_get`."""
        return self._mock.setup_get(name, when=self._condition)

    def setup_set(self, name: MemberRef, value: t.Any = _MISSING) -> SetupHandle:
        """Conditional form of :meth:`Mock.setup_set`."""
        return self._mock.setup_set(name, value, when=self._condition)


__all__ = ["ConditionalSetup", "Mock", "MockBehavior"]
