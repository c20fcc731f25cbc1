"""Periodic release: re-arming completed periodic tasks."""

from __future__ import annotations

import logging
from typing import Iterable, List

from rt_scheduler.simulator.task import Task

logger = logging.getLogger(__name__)


def is_release_point(task: Task, now: int) -> bool:
    """True if *now* is a period boundary at which *task* may be re-armed.

    The first instance is pre-loaded, so nothing is released at t=0, and
    a task whose previous instance still owes work is left alone.
    """
    if task.period is None or now <= 0:
        return False
    if (now - task.arrival_time) % task.period != 0:
        return False
    return task.remaining_time <= 0


def release_periodic(tasks: Iterable[Task], now: int) -> List[Task]:
    """Re-arm every periodic task that is due at *now*.

    Returns:
        The tasks released on this call, in registry order.
    """
    released: List[Task] = []
    for task in tasks:
        if is_release_point(task, now):
            task.release(now)
            released.append(task)
            logger.info(
                "Periodic release: %s at t=%d (deadline %d)", task.name, now, task.deadline
            )
    return released
