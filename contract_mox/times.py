"""Inclusive call-count ranges used by verification."""

from __future__ import annotations

import dataclasses as dc


@dc.dataclass(frozen=True, slots=True)
class Times:
    """An inclusive ``[minimum, maximum]`` bound on a call count.

    ``maximum`` is ``None`` when the range is unbounded above. Build
    instances with the class methods rather than the constructor.
    """

    minimum: int
    maximum: int | None
    label: str = dc.field(default="", compare=False)

    def __post_init__(self) -> None:
        """Validate the bounds."""
        if self.minimum < 0:
            msg = "minimum call count must be >= 0"
            raise ValueError(msg)
        if self.maximum is not None and self.maximum < self.minimum:
            msg = "maximum call count must be >= minimum"
            raise ValueError(msg)

    @classmethod
    def exactly(cls, count: int) -> Times:
        """Require exactly *count* calls."""
        return cls(count, count, f"exactly {count}")

    @classmethod
    def at_least(cls, count: int) -> Times:
        """Require *count* calls or more."""
        return cls(count, None, f"at least {count}")

    @classmethod
    def at_most(cls, count: int) -> Times:
        """Allow up to *count* calls."""
        return cls(0, count, f"at most {count}")

    @classmethod
    def between(cls, low: int, high: int, *, inclusive: bool = True) -> Times:
        """Require a count between *low* and *high*.

        An exclusive range excludes both bounds, so ``between(1, 4,
        inclusive=False)`` accepts 2 and 3.
        """
        if inclusive:
            return cls(low, high, f"between {low} and {high} (inclusive)")
        if high - low < 2:
            msg = f"exclusive range between {low} and {high} contains no call count"
            raise ValueError(msg)
        return cls(low + 1, high - 1, f"between {low} and {high} (exclusive)")

    @classmethod
    def never(cls) -> Times:
        """Require no calls at all."""
        return cls(0, 0, "never")

    @classmethod
    def once(cls) -> Times:
        """Require exactly one call."""
        return cls(1, 1, "once")

    @classmethod
    def at_least_once(cls) -> Times:
        """Require one call or more."""
        return cls(1, None, "at least once")

    @classmethod
    def at_most_once(cls) -> Times:
        """Allow zero or one call."""
        return cls(0, 1, "at most once")

    def verify(self, count: int) -> bool:
        """Return ``True`` when *count* lies inside the range."""
        if count < self.minimum:
            return False
        return self.maximum is None or count <= self.maximum

    def __str__(self) -> str:
        """Return the range in words."""
        if self.label:
            return self.label
        if self.maximum is None:
            return f"at least {self.minimum}"
        return f"between {self.minimum} and {self.maximum} (inclusive)"


__all__ = ["Times"]
