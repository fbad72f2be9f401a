"""Introspection of the contracts a mock substitutes.

A :class:`Contract` wraps the type (or callable signature) handed to
:class:`~contract_mox.controller.Mock` and exposes the interceptable
surface as :class:`Member` records. Member identity is object identity:
each contract builds its members exactly once.
"""

from __future__ import annotations

import abc
import collections.abc
import dataclasses as dc
import enum
import inspect
import typing as t

from .errors import ConfigurationError
from .events import Event, is_event_annotation

_NONE_TYPE = type(None)
_NO_DEFAULT = object()
_SKIPPED_BASES: frozenset[object] = frozenset({object, t.Generic, abc.ABC})


class MemberKind(enum.StrEnum):
    """Kinds of interceptable members."""

    METHOD = "method"
    GETTER = "getter"
    SETTER = "setter"


@dc.dataclass(frozen=True, slots=True, eq=False)
class Member:
    """Identity and signature of one interceptable contract member."""

    owner: str
    name: str
    kind: MemberKind
    parameters: tuple[inspect.Parameter, ...]
    return_type: t.Any = t.Any
    base: t.Callable[..., t.Any] | None = None
    is_async: bool = False
    is_field: bool = False

    @property
    def arity(self) -> int:
        """Return the number of declared parameters, ``self`` excluded."""
        return len(self.parameters)

    @property
    def signature(self) -> inspect.Signature:
        """Return the call signature without ``self``."""
        return inspect.Signature(list(self.parameters))

    @property
    def returns_value(self) -> bool:
        """Return ``True`` when the member declares a non-``None`` result."""
        if self.kind is MemberKind.SETTER:
            return False
        return self.return_type not in (None, _NONE_TYPE, t.Any, t.NoReturn)

    @property
    def has_base(self) -> bool:
        """Return ``True`` when a real implementation can be called through."""
        return self.base is not None

    @property
    def qualified_name(self) -> str:
        """Return ``Owner.name`` for messages."""
        return f"{self.owner}.{self.name}"

    def bind(self, args: t.Sequence[t.Any], kwargs: t.Mapping[str, t.Any]) -> tuple:
        """Return one value per parameter for a call with *args* and *kwargs*.

        Defaults are applied, so positional and keyword spellings of the same
        call produce the same snapshot. Raises :class:`TypeError` exactly
        like calling the real member would.
        """
        bound = self.signature.bind(*args, **kwargs)
        bound.apply_defaults()
        return tuple(bound.arguments[param.name] for param in self.parameters)

    def unbind(self, values: t.Sequence[t.Any]) -> tuple[tuple, dict[str, t.Any]]:
        """Turn a per-parameter snapshot back into ``(args, kwargs)``."""
        args: list[t.Any] = []
        kwargs: dict[str, t.Any] = {}
        for param, value in zip(self.parameters, values, strict=True):
            if param.kind is inspect.Parameter.VAR_POSITIONAL:
                args.extend(value)
            elif param.kind is inspect.Parameter.VAR_KEYWORD:
                kwargs.update(value)
            elif param.kind is inspect.Parameter.KEYWORD_ONLY:
                kwargs[param.name] = value
            else:
                args.append(value)
        return tuple(args), kwargs

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Member({self.qualified_name!r}, {self.kind})"


def _resolve_typevars(annotation: t.Any, mapping: t.Mapping[t.Any, t.Any]) -> t.Any:
    if isinstance(annotation, t.TypeVar):
        return mapping.get(annotation, t.Any)
    return annotation


def _return_type(func: t.Callable[..., t.Any], mapping: t.Mapping[t.Any, t.Any]) -> t.Any:
    try:
        hints = t.get_type_hints(func)
    except (NameError, TypeError):
        hints = {}
    if "return" in hints:
        return _resolve_typevars(hints["return"], mapping)
    annotation = inspect.signature(func).return_annotation
    if annotation is inspect.Signature.empty or isinstance(annotation, str):
        return t.Any
    return _resolve_typevars(annotation, mapping)


def _instance_parameters(func: t.Callable[..., t.Any]) -> tuple[inspect.Parameter, ...]:
    params = tuple(inspect.signature(func).parameters.values())
    return params[1:]


def _is_protocol(cls: type) -> bool:
    return bool(getattr(cls, "_is_protocol", False))


def _field_reader(name: str, default: object) -> t.Callable[[object], t.Any]:
    """Return a base getter reading instance state, then the class default."""

    def read(instance: object) -> t.Any:
        state = vars(instance)
        if name in state:
            return state[name]
        if default is _NO_DEFAULT:
            msg = f"{type(instance).__name__!r} object has no attribute {name!r}"
            raise AttributeError(msg)
        return default

    return read


def _field_writer(name: str) -> t.Callable[[object, t.Any], None]:
    def write(instance: object, value: t.Any) -> None:
        vars(instance)[name] = value

    return write


def _display_name(target: t.Any) -> str:
    if isinstance(target, type):
        return f"{target.__module__}.{target.__qualname__}"
    origin = t.get_origin(target)
    if isinstance(origin, type) and origin is not collections.abc.Callable:
        args = ", ".join(
            getattr(arg, "__qualname__", None) or repr(arg) for arg in t.get_args(target)
        )
        return f"{origin.__module__}.{origin.__qualname__}[{args}]"
    qualname = getattr(target, "__qualname__", None)
    if qualname is not None:
        return f"{getattr(target, '__module__', '?')}.{qualname}"
    return repr(target)


class Contract:
    """The interceptable surface of a type or callable."""

    def __init__(self, target: t.Any) -> None:
        self.target = target
        self.display_name = _display_name(target)
        self.type_args: tuple[t.Any, ...] = ()
        self.events: tuple[str, ...] = ()
        self._members: dict[tuple[str, MemberKind], Member] = {}
        self._unmockable: dict[str, str] = {}

        origin = t.get_origin(target)
        if origin is collections.abc.Callable:
            self.type = None
            self._add_callable_alias(target)
        elif isinstance(origin, type):
            self.type = origin
            self.type_args = t.get_args(target)
            self._add_class_members(origin)
        elif isinstance(target, type):
            self.type = target
            self._add_class_members(target)
        elif callable(target):
            self.type = None
            self._add_function(target)
        else:
            msg = f"cannot mock {target!r}: expected a class or a callable"
            raise ConfigurationError(msg)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def is_delegate(self) -> bool:
        """Return ``True`` for callable contracts without a class."""
        return self.type is None

    @property
    def accepts_constructor_args(self) -> bool:
        """Return ``True`` when constructor arguments can be forwarded."""
        return self.type is not None and not _is_protocol(self.type)

    def members(self) -> list[Member]:
        """Return every interceptable member."""
        return list(self._members.values())

    def properties(self) -> list[str]:
        """Return the names of members exposed as attributes."""
        return [name for name, kind in self._members if kind is MemberKind.GETTER]

    def find(self, name: str, kind: MemberKind) -> Member | None:
        """Return the member *name* of *kind*, or ``None``."""
        return self._members.get((name, kind))

    def member(self, name: str, kind: MemberKind | None = None) -> Member:
        """Return the member called *name*.

        Without *kind*, methods are preferred over property getters.

        Raises
        ------
        ConfigurationError
            When the member does not exist or cannot be intercepted.
        """
        kinds = (kind,) if kind is not None else (MemberKind.METHOD, MemberKind.GETTER)
        for candidate in kinds:
            found = self._members.get((name, candidate))
            if found is not None:
                return found
        if name in self._unmockable:
            msg = f"{self.display_name}.{name} cannot be mocked: {self._unmockable[name]}"
            raise ConfigurationError(msg)
        if kind is MemberKind.SETTER and (name, MemberKind.GETTER) in self._members:
            msg = f"{self.display_name}.{name} is read-only"
            raise ConfigurationError(msg)
        msg = f"{self.display_name} has no member named {name!r}"
        raise ConfigurationError(msg)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Contract({self.display_name})"

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    def _declares(self, name: str) -> bool:
        return name in self._unmockable or any(
            (name, kind) in self._members for kind in MemberKind
        )

    def _add(self, member: Member) -> None:
        self._members[(member.name, member.kind)] = member

    def _add_function(self, func: t.Callable[..., t.Any]) -> None:
        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError) as exc:
            msg = f"cannot mock {func!r}: signature unavailable"
            raise ConfigurationError(msg) from exc

        def call_through(_instance: object, *args: t.Any, **kwargs: t.Any) -> t.Any:
            return func(*args, **kwargs)

        self._add(
            Member(
                owner=self.display_name,
                name="__call__",
                kind=MemberKind.METHOD,
                parameters=tuple(signature.parameters.values()),
                return_type=_return_type(func, {}),
                base=call_through,
                is_async=inspect.iscoroutinefunction(func),
            )
        )

    def _add_callable_alias(self, alias: t.Any) -> None:
        arg_types, return_type = t.get_args(alias) or (Ellipsis, t.Any)
        if arg_types is Ellipsis:
            params = (
                inspect.Parameter("args", inspect.Parameter.VAR_POSITIONAL),
                inspect.Parameter("kwargs", inspect.Parameter.VAR_KEYWORD),
            )
        else:
            params = tuple(
                inspect.Parameter(
                    f"arg{index}", inspect.Parameter.POSITIONAL_ONLY, annotation=typ
                )
                for index, typ in enumerate(arg_types)
            )
        self._add(
            Member(
                owner=self.display_name,
                name="__call__",
                kind=MemberKind.METHOD,
                parameters=params,
                return_type=return_type,
            )
        )

    def _add_class_members(self, cls: type) -> None:
        mapping = dict(zip(getattr(cls, "__parameters__", ()), self.type_args, strict=False))
        namespace: dict[str, tuple[type, object]] = {}
        annotations: dict[str, tuple[type, object]] = {}
        for klass in reversed(cls.__mro__):
            if klass in _SKIPPED_BASES or klass.__module__ == "typing":
                continue
            for name, value in inspect.get_annotations(klass).items():
                if not _is_dunder(name):
                    annotations[name] = (klass, value)
            for name, value in vars(klass).items():
                if name == "__call__" or not _is_dunder(name):
                    namespace[name] = (klass, value)

        try:
            hints = t.get_type_hints(cls)
        except (NameError, TypeError):
            hints = {}

        events: list[str] = []
        for name, (klass, value) in namespace.items():
            self._classify(name, klass, value, mapping, events)
        concrete = not _is_protocol(cls)
        for name, (_klass, raw) in annotations.items():
            if name.startswith("_") or name in events or self._declares(name):
                continue
            annotation = hints.get(name, raw)
            if is_event_annotation(annotation):
                events.append(name)
            elif t.get_origin(annotation) is not t.ClassVar:
                default = _NO_DEFAULT
                if name in namespace:
                    value = namespace[name][1]
                    if not hasattr(type(value), "__get__"):
                        default = value
                self._add_data_member(
                    name, annotation, mapping, concrete=concrete, default=default
                )
        self.events = tuple(events)

    def _classify(
        self,
        name: str,
        klass: type,
        value: object,
        mapping: t.Mapping[t.Any, t.Any],
        events: list[str],
    ) -> None:
        if isinstance(value, staticmethod | classmethod):
            self._unmockable[name] = "static and class methods are not dispatched"
            return
        if isinstance(value, Event):
            events.append(name)
            return
        if isinstance(value, property):
            self._add_property(name, klass, value, mapping)
            return
        if not inspect.isfunction(value):
            return
        if name.startswith("_") and name != "__call__":
            self._unmockable[name] = "private members are not part of the contract"
            return
        has_base = not _is_protocol(klass) and not getattr(
            value, "__isabstractmethod__", False
        )
        self._add(
            Member(
                owner=self.display_name,
                name=name,
                kind=MemberKind.METHOD,
                parameters=_instance_parameters(value),
                return_type=_return_type(value, mapping),
                base=value if has_base else None,
                is_async=inspect.iscoroutinefunction(value),
            )
        )

    def _add_property(
        self,
        name: str,
        klass: type,
        prop: property,
        mapping: t.Mapping[t.Any, t.Any],
    ) -> None:
        concrete = not _is_protocol(klass)
        if prop.fget is not None:
            has_base = concrete and not getattr(prop.fget, "__isabstractmethod__", False)
            self._add(
                Member(
                    owner=self.display_name,
                    name=name,
                    kind=MemberKind.GETTER,
                    parameters=(),
                    return_type=_return_type(prop.fget, mapping),
                    base=prop.fget if has_base else None,
                )
            )
        if prop.fset is not None:
            has_base = concrete and not getattr(prop.fset, "__isabstractmethod__", False)
            params = _instance_parameters(prop.fset)
            self._add(
                Member(
                    owner=self.display_name,
                    name=name,
                    kind=MemberKind.SETTER,
                    parameters=params,
                    return_type=None,
                    base=prop.fset if has_base else None,
                )
            )

    def _add_data_member(
        self,
        name: str,
        annotation: object,
        mapping: t.Mapping[t.Any, t.Any],
        *,
        concrete: bool,
        default: object,
    ) -> None:
        # On concrete classes the base behaves like a plain attribute stored
        # on the substitute, falling back to the class-level value.
        resolved = t.Any if isinstance(annotation, str) else annotation
        resolved = _resolve_typevars(resolved, mapping)
        self._add(
            Member(
                owner=self.display_name,
                name=name,
                kind=MemberKind.GETTER,
                parameters=(),
                return_type=resolved,
                base=_field_reader(name, default) if concrete else None,
                is_field=True,
            )
        )
        self._add(
            Member(
                owner=self.display_name,
                name=name,
                kind=MemberKind.SETTER,
                parameters=(
                    inspect.Parameter(
                        "value",
                        inspect.Parameter.POSITIONAL_OR_KEYWORD,
                        annotation=resolved,
                    ),
                ),
                return_type=None,
                base=_field_writer(name) if concrete else None,
                is_field=True,
            )
        )


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


__all__ = ["Contract", "Member", "MemberKind"]
