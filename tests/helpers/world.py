"""Shared scenario state for the behavioural tests."""

from __future__ import annotations

import abc
import dataclasses as dc
import typing as t

from contract_mox import Mock, MockBehavior


class Gateway(abc.ABC):
    """Contract exercised by the feature files."""

    @abc.abstractmethod
    def g(self, value: int) -> int: ...

    @abc.abstractmethod
    def ping(self) -> None: ...


@dc.dataclass
class World:
    """A mock of :class:`Gateway` plus what the scenario observed."""

    mock: Mock[Gateway]
    results: list[t.Any] = dc.field(default_factory=list)
    error: Exception | None = None

    @classmethod
    def create(cls, behavior: str) -> World:
        """Return a world around a fresh mock with *behavior*."""
        return cls(Mock(Gateway, behavior=MockBehavior(behavior)))


def parse_ints(text: str) -> list[int]:
    """Return the comma-separated integers in *text*."""
    return [int(item) for item in text.split(",") if item.strip()]
