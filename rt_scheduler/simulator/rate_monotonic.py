"""Rate-monotonic fixed-priority scheduling policy."""

from __future__ import annotations

import logging
from typing import Sequence

from rt_scheduler.simulator.scheduler_base import SchedulerBase
from rt_scheduler.simulator.task import Task

logger = logging.getLogger(__name__)

TICK = 10
# Rank given to tasks without a period, so they run after every periodic task.
NO_PERIOD_RANK = 999999


class RateMonotonicScheduler(SchedulerBase):
    """Preemptive rate-monotonic scheduler.

    Priority is static: the shorter the period, the higher the priority.
    Every dispatch gets the same fixed slice, *tick_size*.

    Args:
        tick_size: Slice length and idle clock advance.
    """

    name = "rm"

    def __init__(self, tick_size: int = TICK) -> None:
        self._tick_size: int = TICK
        self.set_tick_size(tick_size)

    @property
    def tick_size(self) -> int:
        return self._tick_size

    def set_tick_size(self, value: int) -> None:
        if value <= 0:
            raise ValueError(f"tick_size must be positive, got {value}")
        self._tick_size = value

    @property
    def idle_unit(self) -> int:
        return self._tick_size

    def quantum(self, tasks: Sequence[Task], now: int) -> int:
        return self._tick_size

    def rank_key(self, task: Task, now: int) -> int:
        return task.period if task.period is not None else NO_PERIOD_RANK

    def describe(self, task: Task, now: int) -> str:
        return f"period {task.period}"

    def on_task_complete(self, task: Task, now: int) -> None:
        if task.missed:
            logger.warning("%s MISSED its deadline (%d) at t=%d", task.name, task.deadline, now)

    def __repr__(self) -> str:
        return f"RateMonotonicScheduler(tick_size={self._tick_size})"
