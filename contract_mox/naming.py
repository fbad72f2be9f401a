"""Default mock names built from a resettable serial counter."""

from __future__ import annotations

import itertools
import threading


class MockNameFactory:
    """Hand out ``Mock<contract:serial>`` names.

    The serial is shared by every mock created through the same factory.
    Call :meth:`reset` between tests to get reproducible names.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counter = itertools.count(1)

    def next_serial(self) -> int:
        """Return the next serial number."""
        with self._lock:
            return next(self._counter)

    def next_name(self, contract_name: str) -> str:
        """Return a fresh default name for a mock of *contract_name*."""
        return f"Mock<{contract_name}:{self.next_serial():08x}>"

    def reset(self) -> None:
        """Restart numbering from 1."""
        with self._lock:
            self._counter = itertools.count(1)


default_name_factory = MockNameFactory()

__all__ = ["MockNameFactory", "default_name_factory"]
