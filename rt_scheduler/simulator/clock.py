"""Simulated time source for the scheduling simulator."""

from __future__ import annotations


class Clock:
    """Monotonic integer simulation clock.

    Only the simulation stepper advances it, by the size of each
    dispatched slice or by the policy's idle unit.
    """

    __slots__ = ("_now",)

    def __init__(self) -> None:
        self._now: int = 0

    @property
    def now(self) -> int:
        return self._now

    def advance(self, delta: int) -> int:
        """Move time forward by *delta* and return the new time.

        Raises:
            ValueError: If *delta* is negative.
        """
        if delta < 0:
            raise ValueError(f"clock cannot move backwards (delta={delta})")
        self._now += delta
        return self._now

    def reset(self) -> None:
        self._now = 0

    def __repr__(self) -> str:
        return f"Clock(now={self._now})"
