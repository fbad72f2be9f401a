"""Create mocks with shared settings and verify them together."""

from __future__ import annotations

import threading
import typing as t

from .controller import Mock, MockBehavior
from .defaults import DefaultValue, DefaultValueProvider
from .errors import UnfulfilledExpectationError, UnverifiedCallsError, VerificationError
from .naming import MockNameFactory
from .verifiers import format_sections

T = t.TypeVar("T")


class MockRepository:
    """Factory remembering every mock it creates.

    Settings given here become the defaults of :meth:`create`; each call
    may still override them.
    """

    def __init__(
        self,
        behavior: MockBehavior | str = MockBehavior.LOOSE,
        default_value: DefaultValue | str | DefaultValueProvider = DefaultValue.EMPTY,
        *,
        call_base: bool = False,
        name_factory: MockNameFactory | None = None,
    ) -> None:
        self.behavior = MockBehavior(behavior)
        self.default_value = default_value
        self.call_base = call_base
        self._name_factory = name_factory
        self._mocks: list[Mock[t.Any]] = []
        self._lock = threading.Lock()

    def create(self, contract: type[T] | t.Any, *args: t.Any, **options: t.Any) -> Mock[T]:
        """Create and remember a mock of *contract*."""
        options.setdefault("behavior", self.behavior)
        options.setdefault("default_value", self.default_value)
        options.setdefault("call_base", self.call_base)
        options.setdefault("name_factory", self._name_factory)
        mock: Mock[T] = Mock(contract, *args, **options)
        with self._lock:
            self._mocks.append(mock)
        return mock

    @property
    def mocks(self) -> list[Mock[t.Any]]:
        """Return the mocks created so far, oldest first."""
        with self._lock:
            return list(self._mocks)

    def verify(self) -> None:
        """Run :meth:`Mock.verify_setups` on every mock."""
        self._collect("setups marked verifiable were not satisfied", Mock.verify_setups)

    def verify_all(self) -> None:
        """Run :meth:`Mock.verify_all` on every mock."""
        self._collect("setups were not matched", Mock.verify_all)

    def verify_no_other_calls(self) -> None:
        """Run :meth:`Mock.verify_no_other_calls` on every mock."""
        self._collect("unverified invocations remain", Mock.verify_no_other_calls)

    def _collect(self, title: str, check: t.Callable[[Mock[t.Any]], None]) -> None:
        failures: list[VerificationError] = []
        for mock in self.mocks:
            try:
                check(mock)
            except VerificationError as err:
                failures.append(err)
        if not failures:
            return
        if len(failures) == 1:
            raise failures[0]
        msg = format_sections(
            f"{len(failures)} mocks failed verification: {title}.",
            [(f"Failure {index}", str(err)) for index, err in enumerate(failures, 1)],
        )
        if all(isinstance(err, UnverifiedCallsError) for err in failures):
            raise UnverifiedCallsError(msg)
        raise UnfulfilledExpectationError(msg)

    def __len__(self) -> int:
        return len(self.mocks)


__all__ = ["MockRepository"]
