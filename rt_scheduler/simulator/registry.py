"""Task registry: the mutable set of tasks owned by a simulation."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional

from rt_scheduler.simulator.task import Task, TaskSpec

logger = logging.getLogger(__name__)


class TaskRegistry:
    """Ordered collection of tasks keyed by a stable integer id.

    Insertion order is preserved and ids only ever grow, so iteration
    order is also id order.
    """

    def __init__(self, specs: Iterable[TaskSpec] = ()) -> None:
        self._tasks: List[Task] = []
        self._next_id: int = 0
        self.replace(specs)

    def add(self, spec: TaskSpec) -> Task:
        """Create a task from *spec* with a fresh id and register it."""
        task = Task(self._next_id, spec)
        self._next_id += 1
        self._tasks.append(task)
        logger.info(
            "Task %r added (id=%d, arrival=%d, exec=%d, deadline=%d%s%s)",
            task.name,
            task.task_id,
            task.arrival_time,
            task.exec_time,
            task.deadline,
            f", period={task.period}" if task.period else "",
            f", {task.io_ops} I/O ops of {task.io_time}" if task.io_ops else "",
        )
        return task

    def remove(self, task_id: int) -> Optional[Task]:
        """Remove the task with *task_id*; unknown ids are ignored."""
        for index, task in enumerate(self._tasks):
            if task.task_id == task_id:
                del self._tasks[index]
                logger.info("Task %r removed (id=%d)", task.name, task_id)
                return task
        return None

    def replace(self, specs: Iterable[TaskSpec]) -> None:
        """Swap the whole task set for *specs*, numbering ids from 0."""
        self._tasks = [Task(i, spec) for i, spec in enumerate(specs)]
        self._next_id = len(self._tasks)

    def reset(self) -> None:
        for task in self._tasks:
            task.reset()

    def ready(self, now: int) -> List[Task]:
        """Tasks eligible for selection at *now*, in id order."""
        return [t for t in self._tasks if t.is_eligible(now)]

    def export(self) -> List[Dict[str, Any]]:
        """Static projection of the task list for download/export."""
        return [
            {
                "name": t.name,
                "arrival": t.arrival_time,
                "exec": t.exec_time,
                "deadline": t.initial_deadline,
                "period": t.period,
            }
            for t in self._tasks
        ]

    def export_json(self) -> str:
        return json.dumps(self.export(), indent=2)

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __repr__(self) -> str:
        return f"TaskRegistry(tasks={len(self._tasks)}, next_id={self._next_id})"
