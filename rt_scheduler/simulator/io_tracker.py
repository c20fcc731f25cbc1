"""Tracks tasks blocked on simulated I/O and resumes them."""

from __future__ import annotations

import logging
from typing import Iterable, List

from rt_scheduler.simulator.task import Task

logger = logging.getLogger(__name__)


class IOSuspensionTracker:
    """Counts down I/O waits and returns finished ones to the ready set.

    A task's wait is charged with the simulated time elapsed since it
    was last accounted, so a burst of ``io_time`` keeps the task off the
    CPU for ``io_time`` units of simulated time, rounded up to the next
    tick boundary.  This is not a fixed decrement per tick: with 20-unit
    idle steps a task blocked at t=10 for 30 units resumes at t=50, not t=30.
    """

    def advance(self, tasks: Iterable[Task], now: int) -> List[Task]:
        """Charge every suspended task up to *now*.

        Returns:
            Tasks whose I/O completed and are eligible again at *now*.
        """
        resumed: List[Task] = []
        for task in tasks:
            if not task.suspended:
                continue
            if task.tick_io_block(now):
                resumed.append(task)
                logger.info("%s I/O completed at t=%d, back to ready queue", task.name, now)
        return resumed

    @staticmethod
    def on_blocked(task: Task, now: int) -> None:
        logger.info(
            "%s performing I/O operation %d/%d for %d at t=%d",
            task.name,
            task.io_count,
            task.io_ops,
            task.io_time,
            now,
        )
