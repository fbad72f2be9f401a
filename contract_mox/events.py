"""Event slots for contracts and the handler collections behind them.

A contract declares an event either as a class attribute or as an
annotation::

    class Downloader(abc.ABC):
        progress = Event()
        finished: Event

Instances expose an :class:`EventHandlers` collection supporting
``obj.progress += handler`` and ``obj.progress -= handler``.
"""

from __future__ import annotations

import threading
import types
import typing as t

from .errors import ConfigurationError

Handler = t.Callable[..., object]


class EventHandlers:
    """Ordered, thread-safe collection of event handlers."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._handlers: list[Handler] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: Handler) -> None:
        """Attach *handler*; it runs after every handler attached earlier."""
        if not callable(handler):
            msg = f"event handler for {self.name!r} must be callable"
            raise TypeError(msg)
        with self._lock:
            self._handlers.append(handler)

    def unsubscribe(self, handler: Handler) -> None:
        """Detach the most recently attached occurrence of *handler*."""
        with self._lock:
            for index in range(len(self._handlers) - 1, -1, -1):
                if self._handlers[index] == handler:
                    del self._handlers[index]
                    return

    def __iadd__(self, handler: Handler) -> EventHandlers:
        self.subscribe(handler)
        return self

    def __isub__(self, handler: Handler) -> EventHandlers:
        self.unsubscribe(handler)
        return self

    def snapshot(self) -> tuple[Handler, ...]:
        """Return the handlers attached right now, in attachment order."""
        with self._lock:
            return tuple(self._handlers)

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)

    def invoke(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Call every attached handler in attachment order."""
        for handler in self.snapshot():
            handler(*args, **kwargs)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"EventHandlers({self.name!r}, handlers={len(self)})"


class Event:
    """Descriptor declaring an event slot on a contract."""

    def __init__(self) -> None:
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    @t.overload
    def __get__(self, instance: None, owner: type | None = None) -> Event: ...

    @t.overload
    def __get__(self, instance: object, owner: type | None = None) -> EventHandlers: ...

    def __get__(
        self, instance: object | None, owner: type | None = None
    ) -> Event | EventHandlers:
        if instance is None:
            return self
        return handlers_for(instance, self.name)

    def __set__(self, instance: object, value: object) -> None:
        # ``obj.event += handler`` rebinds the attribute to the same collection.
        if value is not handlers_for(instance, self.name):
            msg = f"event {self.name!r} only supports += and -="
            raise AttributeError(msg)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Event({self.name!r})"


_HANDLERS_ATTR = "__contract_mox_events__"
_registry_lock = threading.Lock()


def handlers_for(instance: object, name: str) -> EventHandlers:
    """Return the handler collection for event *name* on *instance*."""
    with _registry_lock:
        table: dict[str, EventHandlers] | None = instance.__dict__.get(_HANDLERS_ATTR)
        if table is None:
            table = {}
            instance.__dict__[_HANDLERS_ATTR] = table
        handlers = table.get(name)
        if handlers is None:
            handlers = table[name] = EventHandlers(name)
        return handlers


def is_event_annotation(annotation: object) -> bool:
    """Return ``True`` when *annotation* declares an event slot."""
    if annotation is Event:
        return True
    return isinstance(annotation, str) and annotation.rpartition(".")[2] == "Event"


def strip_frames(
    tb: types.TracebackType | None, filenames: t.Collection[str]
) -> types.TracebackType | None:
    """Return *tb* rebuilt without frames whose code lives in *filenames*."""
    kept: list[types.TracebackType] = []
    while tb is not None:
        if tb.tb_frame.f_code.co_filename not in filenames:
            kept.append(tb)
        tb = tb.tb_next
    rebuilt: types.TracebackType | None = None
    for entry in reversed(kept):
        rebuilt = types.TracebackType(
            rebuilt, entry.tb_frame, entry.tb_lasti, entry.tb_lineno
        )
    return rebuilt


def require_event(contract_events: t.Collection[str], name: str, owner: str) -> None:
    """Raise :class:`ConfigurationError` unless *name* is a declared event."""
    if name not in contract_events:
        msg = f"{owner} declares no event named {name!r}"
        raise ConfigurationError(msg)


__all__ = [
    "Event",
    "EventHandlers",
    "handlers_for",
    "is_event_annotation",
    "require_event",
    "strip_frames",
]
