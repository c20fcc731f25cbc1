"""Adaptive laxity scheduling policy with deadline-miss feedback."""

from __future__ import annotations

import logging
import math
from typing import Sequence

from rt_scheduler.simulator.scheduler_base import SchedulerBase
from rt_scheduler.simulator.task import Task

logger = logging.getLogger(__name__)

BASE_QUANTUM = 20
MIN_QUANTUM = 6
# Active tasks at which the system counts as fully loaded.
LOAD_SATURATION = 6
# Fraction of the base quantum given up at full load.
LOAD_SHRINK = 0.7
MISSED_PENALTY = 200
MISS_BOOST = 100
AGING_STEP = 1


class AdaptiveScheduler(SchedulerBase):
    """Least-laxity scheduler with a load-adaptive quantum.

    Tasks are ranked by ``laxity - missed_penalty - priority_boost``.
    A task that finishes late earns a boost; every task that waits while
    another runs loses one point of boost per dispatch, never going
    below zero.  The quantum shrinks as more tasks compete for the CPU,
    down to *min_quantum*.

    Args:
        base_quantum: Slice length on an unloaded system, and the clock
            advance of an idle tick.
        min_quantum: Floor of the dynamic quantum.
    """

    name = "adaptive"

    def __init__(self, base_quantum: int = BASE_QUANTUM, min_quantum: int = MIN_QUANTUM) -> None:
        if min_quantum <= 0:
            raise ValueError(f"min_quantum must be positive, got {min_quantum}")
        self.min_quantum: int = min_quantum
        self._base_quantum: int = BASE_QUANTUM
        self.set_base_quantum(base_quantum)

    @property
    def base_quantum(self) -> int:
        return self._base_quantum

    def set_base_quantum(self, value: int) -> None:
        if value <= 0:
            raise ValueError(f"base_quantum must be positive, got {value}")
        self._base_quantum = value

    @property
    def idle_unit(self) -> int:
        return self._base_quantum

    def load(self, tasks: Sequence[Task], now: int) -> float:
        """Fraction of saturation reached by the arrived, unfinished tasks."""
        active = sum(1 for t in tasks if t.is_active(now))
        return min(1.0, active / LOAD_SATURATION)

    def quantum(self, tasks: Sequence[Task], now: int) -> int:
        scaled = self._base_quantum * (1 - LOAD_SHRINK * self.load(tasks, now))
        # Round half up.
        return max(self.min_quantum, math.floor(scaled + 0.5))

    def rank_key(self, task: Task, now: int) -> int:
        return self.priority_score(task, now)

    @staticmethod
    def priority_score(task: Task, now: int) -> int:
        score = task.laxity(now)
        if task.missed:
            score -= MISSED_PENALTY
        return score - task.priority_boost

    def describe(self, task: Task, now: int) -> str:
        return f"laxity {task.laxity(now)}, boost {task.priority_boost}"

    def on_task_complete(self, task: Task, now: int) -> None:
        if task.missed:
            task.priority_boost += MISS_BOOST
            logger.warning(
                "%s MISSED deadline %d at t=%d, boosting priority to %d",
                task.name,
                task.deadline,
                now,
                task.priority_boost,
            )

    def on_dispatch(self, task: Task, ready: Sequence[Task], now: int) -> None:
        for other in ready:
            if other is task or other.finished:
                continue
            other.priority_boost = max(0, other.priority_boost - AGING_STEP)

    def __repr__(self) -> str:
        return f"AdaptiveScheduler(base_quantum={self._base_quantum}, min_quantum={self.min_quantum})"
