"""Default values returned for calls no setup answers."""

from __future__ import annotations

import abc
import collections.abc as cabc
import contextlib
import enum
import inspect
import logging
import threading
import types
import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .contract import Member
    from .controller import Mock

logger = logging.getLogger(__name__)

_NONE_TYPE = type(None)

_ZERO_VALUES: dict[type, t.Any] = {
    bool: False,
    int: 0,
    float: 0.0,
    complex: 0j,
    str: "",
    bytes: b"",
}

_EMPTY_FACTORIES: dict[object, t.Callable[[], t.Any]] = {
    list: list,
    tuple: tuple,
    dict: dict,
    set: set,
    frozenset: frozenset,
    bytearray: bytearray,
    cabc.Iterable: tuple,
    cabc.Collection: tuple,
    cabc.Sequence: tuple,
    cabc.MutableSequence: list,
    cabc.Mapping: dict,
    cabc.MutableMapping: dict,
    cabc.Set: frozenset,
    cabc.MutableSet: set,
    cabc.Iterator: lambda: iter(()),
}


class DefaultValue(enum.StrEnum):
    """Built-in default-value policies."""

    EMPTY = "empty"
    MOCK = "mock"


class DefaultValueProvider(abc.ABC):
    """Produce values for members whose calls no setup answered."""

    @abc.abstractmethod
    def produce(self, typ: t.Any, mock: Mock) -> t.Any:
        """Return a default value of *typ* on behalf of *mock*."""

    def produce_for(self, member: Member, mock: Mock) -> t.Any:
        """Return the default result of *member*."""
        return self.produce(member.return_type, mock)


class EmptyDefaultValueProvider(DefaultValueProvider):
    """Zero values for primitives, empty collections, ``None`` otherwise."""

    def produce(self, typ: t.Any, mock: Mock) -> t.Any:
        """Return the zero or empty value of *typ*."""
        if typ in (None, _NONE_TYPE, t.Any, inspect.Signature.empty):
            return None
        origin = t.get_origin(typ)
        if origin is t.Union or origin is types.UnionType:
            return None
        if origin is t.Literal:
            return t.get_args(typ)[0]
        if origin is t.Annotated:
            return self.produce(t.get_args(typ)[0], mock)
        base = origin if origin is not None else typ
        if base in _ZERO_VALUES:
            return _ZERO_VALUES[base]
        factory = _EMPTY_FACTORIES.get(base)
        if factory is not None:
            return factory()
        if isinstance(base, type) and issubclass(base, enum.Enum):
            return next(iter(base), None)
        return None


_synthesis = threading.local()


@contextlib.contextmanager
def synthesizing(typ: t.Any) -> t.Iterator[bool]:
    """Track *typ* on this thread's synthesis chain.

    Yields ``False`` when *typ* is already being synthesized further up
    the chain, in which case the caller must not recurse.
    """
    chain: list[t.Any] = getattr(_synthesis, "chain", None) or []
    _synthesis.chain = chain
    if typ in chain:
        yield False
        return
    chain.append(typ)
    try:
        yield True
    finally:
        chain.pop()


def is_mockable(typ: t.Any) -> bool:
    """Return ``True`` for abstract classes and protocols."""
    origin = t.get_origin(typ)
    if origin is not None:
        return isinstance(origin, type) and is_mockable(origin)
    if not isinstance(typ, type) or typ.__module__ == "builtins":
        return False
    if typ.__module__ in {"typing", "collections.abc", "abc"}:
        return False
    return inspect.isabstract(typ) or bool(getattr(typ, "_is_protocol", False))


class MockDefaultValueProvider(EmptyDefaultValueProvider):
    """Like :class:`EmptyDefaultValueProvider`, but mock mockable types.

    Inner mocks are cached per member on the owning mock, so repeated calls
    return the same substitute.
    """

    def produce(self, typ: t.Any, mock: Mock) -> t.Any:
        """Return an inner mock's substitute for mockable *typ*."""
        if not is_mockable(typ):
            return super().produce(typ, mock)
        inner = self._synthesize(typ, mock)
        return None if inner is None else inner.object

    def produce_for(self, member: Member, mock: Mock) -> t.Any:
        """Return the cached inner mock for *member*, creating it once."""
        typ = member.return_type
        if not is_mockable(typ):
            return super().produce(typ, mock)
        cached = mock.inner_mock_for(member)
        if cached is not None:
            return cached.object
        inner = self._synthesize(typ, mock)
        if inner is None:
            return None
        return mock.remember_inner_mock(member, inner).object

    def _synthesize(self, typ: t.Any, mock: Mock) -> Mock | None:
        with synthesizing(typ) as allowed:
            if not allowed:
                logger.debug("Cycle while synthesizing %r; returning None", typ)
                return None
            return mock.create_inner_mock(typ)


def resolve_provider(
    default_value: DefaultValue | str | DefaultValueProvider,
) -> DefaultValueProvider:
    """Return a provider instance for a policy name or provider."""
    if isinstance(default_value, DefaultValueProvider):
        return default_value
    policy = DefaultValue(default_value)
    if policy is DefaultValue.MOCK:
        return MockDefaultValueProvider()
    return EmptyDefaultValueProvider()


__all__ = [
    "DefaultValue",
    "DefaultValueProvider",
    "EmptyDefaultValueProvider",
    "MockDefaultValueProvider",
    "is_mockable",
    "resolve_provider",
    "synthesizing",
]
