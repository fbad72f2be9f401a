"""Sample contracts shared by the unit tests."""

from __future__ import annotations

import abc
import dataclasses as dc
import enum
import typing as t

from contract_mox.events import Event

T = t.TypeVar("T")


@dc.dataclass
class User:
    """Value object returned by repositories."""

    user_id: int
    name: str


class Color(enum.Enum):
    """Enum used for default-value checks."""

    RED = 1
    GREEN = 2


class UserRepository(abc.ABC):
    """Abstract repository with methods, a property and an event."""

    changed = Event()

    @abc.abstractmethod
    def get(self, user_id: int) -> User | None: ...

    @abc.abstractmethod
    def find(self, name: str, *, active: bool = True) -> list[User]: ...

    @abc.abstractmethod
    def save(self, user: User) -> None: ...

    @abc.abstractmethod
    def count(self) -> int: ...

    @property
    @abc.abstractmethod
    def size(self) -> int: ...

    @size.setter
    @abc.abstractmethod
    def size(self, value: int) -> None: ...

    @property
    def label(self) -> str:
        return "users"

    @staticmethod
    def version() -> str:
        return "1"


class Greeter(t.Protocol):
    """Protocol with a data member and a method."""

    greeting: str

    def greet(self, name: str) -> str: ...


class Calculator:
    """Concrete class whose methods can be called through."""

    def __init__(self, offset: int = 0) -> None:
        self.offset = offset

    def add(self, a: int, b: int) -> int:
        return a + b + self.offset

    def describe(self) -> str:
        return "calculator"

    def log(self, *messages: str, **fields: t.Any) -> None:
        pass

    def _internal(self) -> None:
        pass


class Account:
    """Concrete class with annotated fields set by its constructor."""

    balance: int
    retries: int = 3

    def __init__(self, balance: int = 0) -> None:
        self.balance = balance

    def attempts(self) -> int:
        return self.retries


class Settings(abc.ABC):
    """Nested contract returned by :class:`Service`."""

    @abc.abstractmethod
    def lookup(self, key: str) -> str: ...

    @abc.abstractmethod
    def color(self) -> Color: ...


class Service(abc.ABC):
    """Contract whose members return other mockable contracts."""

    @property
    @abc.abstractmethod
    def settings(self) -> Settings: ...

    @abc.abstractmethod
    def open(self) -> Settings: ...

    @abc.abstractmethod
    def tags(self) -> set[str]: ...

    @abc.abstractmethod
    def ratio(self) -> float: ...

    @abc.abstractmethod
    def mapping(self) -> dict[str, int]: ...

    @abc.abstractmethod
    def maybe(self) -> int | None: ...


class Node(abc.ABC):
    """Self-referential contract."""

    @property
    @abc.abstractmethod
    def parent(self) -> Node: ...

    @parent.setter
    @abc.abstractmethod
    def parent(self, value: Node) -> None: ...

    @property
    @abc.abstractmethod
    def name(self) -> str: ...

    @name.setter
    @abc.abstractmethod
    def name(self, value: str) -> None: ...


class Store(abc.ABC, t.Generic[T]):
    """Generic contract."""

    @abc.abstractmethod
    def load(self, key: str) -> T: ...


class Fetcher(abc.ABC):
    """Contract with an async member."""

    @abc.abstractmethod
    async def fetch(self, url: str) -> bytes: ...


class Downloader(abc.ABC):
    """Contract declaring events as attribute and as annotation."""

    progress = Event()
    finished: Event

    @abc.abstractmethod
    def start(self) -> None: ...


def parse(text: str, *, strict: bool = False) -> int:
    """Plain function used as a callable contract."""
    return len(text)
