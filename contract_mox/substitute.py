"""Generate substitute objects whose members funnel into a dispatcher.

Class contracts get a dynamically created subclass overriding every
interceptable member. Callable contracts get a function carrying the
contract's signature.
"""

from __future__ import annotations

import functools
import inspect
import types
import typing as t

from .contract import MemberKind
from .errors import ConfigurationError
from .events import Event

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .contract import Contract, Member

MOCK_ATTR = "__contract_mox__"
_CONSTRUCTING = "__contract_mox_constructing__"

Dispatch = t.Callable[["Member", t.Sequence[t.Any], t.Mapping[str, t.Any]], t.Any]


def _method(member: Member, dispatch: Dispatch) -> t.Callable[..., t.Any]:
    if member.is_async:

        async def forward_async(self: object, *args: t.Any, **kwargs: t.Any) -> t.Any:
            result = dispatch(member, args, kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result

        forward: t.Callable[..., t.Any] = forward_async
    else:

        def forward_sync(self: object, *args: t.Any, **kwargs: t.Any) -> t.Any:
            return dispatch(member, args, kwargs)

        forward = forward_sync
    forward.__name__ = member.name
    forward.__qualname__ = f"{member.owner.rpartition('.')[2]}.{member.name}"
    return forward


def _constructing(instance: object) -> bool:
    return bool(vars(instance).get(_CONSTRUCTING, False))


def _property(
    getter: Member | None, setter: Member | None, dispatch: Dispatch
) -> property:
    # While the contract's constructor runs, fields are plain attributes:
    # writes are stored on the substitute and never reach the journal.
    fget = fset = None
    if getter is not None:

        def fget(self: object) -> t.Any:
            if getter.is_field and getter.base is not None and _constructing(self):
                return getter.base(self)
            return dispatch(getter, (), {})

    if setter is not None:

        def fset(self: object, value: t.Any) -> None:
            if setter.is_field and _constructing(self):
                vars(self)[setter.name] = value
                return
            dispatch(setter, (value,), {})

    return property(fget, fset)


def _namespace(contract: Contract, dispatch: Dispatch, mock: object) -> dict[str, t.Any]:
    namespace: dict[str, t.Any] = {MOCK_ATTR: mock}
    for member in contract.members():
        if member.kind is MemberKind.METHOD:
            namespace[member.name] = _method(member, dispatch)
    for name in contract.properties():
        namespace[name] = _property(
            contract.find(name, MemberKind.GETTER),
            contract.find(name, MemberKind.SETTER),
            dispatch,
        )
    for name in contract.events:
        if not isinstance(inspect.getattr_static(contract.type, name, None), Event):
            namespace[name] = Event()

    def __repr__(self: object) -> str:
        return f"<{getattr(mock, 'name', 'mock')}>"

    namespace["__repr__"] = __repr__
    return namespace


def build_substitute(
    contract: Contract,
    dispatch: Dispatch,
    mock: object,
) -> t.Any:
    """Return a fresh substitute for *contract* routing calls to *dispatch*.

    Constructors are not run here; see :func:`initialize_substitute`.
    """
    base = contract.type
    if base is None:
        return _build_delegate(contract, dispatch, mock)
    namespace = _namespace(contract, dispatch, mock)
    cls = types.new_class(
        f"{base.__name__}Mock",
        (base,),
        exec_body=lambda ns: ns.update(namespace),
    )
    cls.__module__ = base.__module__
    # Members the mock cannot intercept (static methods, for example) may be
    # abstract; they still must not block instantiation.
    cls.__abstractmethods__ = frozenset()
    return object.__new__(cls)


def initialize_substitute(
    substitute: object, args: t.Sequence[t.Any], kwargs: t.Mapping[str, t.Any]
) -> None:
    """Run the contract's ``__init__`` on *substitute* with *args*.

    Assignments to annotated fields made by the constructor are kept as the
    substitute's state rather than recorded as calls.
    """
    init = type(substitute).__init__
    state = vars(substitute)
    state[_CONSTRUCTING] = True
    try:
        init(substitute, *args, **kwargs)
    except TypeError as exc:
        msg = f"constructor arguments rejected: {exc}"
        raise ConfigurationError(msg) from exc
    finally:
        del state[_CONSTRUCTING]


def field_value(substitute: object, name: str) -> tuple[bool, t.Any]:
    """Return ``(True, value)`` when *substitute* holds state for field *name*."""
    state = getattr(substitute, "__dict__", {})
    if name in state:
        return True, state[name]
    return False, None


def _build_delegate(contract: Contract, dispatch: Dispatch, mock: object) -> t.Any:
    member = contract.member("__call__")
    forward = _method(member, dispatch)

    if member.is_async:

        async def delegate_async(*args: t.Any, **kwargs: t.Any) -> t.Any:
            return await forward(None, *args, **kwargs)

        delegate: t.Callable[..., t.Any] = delegate_async
    else:

        def delegate_sync(*args: t.Any, **kwargs: t.Any) -> t.Any:
            return forward(None, *args, **kwargs)

        delegate = delegate_sync
    target = contract.target
    if inspect.isfunction(target):
        functools.update_wrapper(delegate, target)
        del delegate.__wrapped__  # type: ignore[attr-defined]
    delegate.__signature__ = inspect.Signature(  # type: ignore[attr-defined]
        list(member.parameters), return_annotation=member.return_type
    )
    setattr(delegate, MOCK_ATTR, mock)
    return delegate


def mock_of(obj: object) -> t.Any:
    """Return the mock behind substitute *obj*, or ``None``."""
    return getattr(obj, MOCK_ATTR, None)


__all__ = [
    "MOCK_ATTR",
    "build_substitute",
    "field_value",
    "initialize_substitute",
    "mock_of",
]
