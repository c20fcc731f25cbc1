"""Abstract base class for all scheduling policies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from rt_scheduler.simulator.task import Task


class SchedulerBase(ABC):
    """Interface that every scheduling policy must implement.

    The simulation stepper owns the clock and the task registry and
    interacts with a policy only through these methods, so policies
    differ purely in how they rank ready tasks and size the slice.

    Subclasses *must* implement the three abstract members.  The hooks
    (on_task_complete, on_dispatch) have no-op defaults so that static
    priority policies need not override them.
    """

    name: str = "base"

    @property
    @abstractmethod
    def idle_unit(self) -> int:
        """Clock advance for a tick in which nothing is ready."""

    @abstractmethod
    def rank_key(self, task: Task, now: int) -> int:
        """Ranking value of *task* at *now*; lower runs first.

        Args:
            task: A ready task.
            now: The current simulation clock value.
        """

    @abstractmethod
    def quantum(self, tasks: Sequence[Task], now: int) -> int:
        """Time slice to grant the selected task at *now*.

        Args:
            tasks: Every registered task, ready or not.
            now: The current simulation clock value.
        """

    def rank(self, ready: Sequence[Task], now: int) -> List[Task]:
        """Order *ready* by rank key, breaking ties by task id."""
        return sorted(ready, key=lambda t: (self.rank_key(t, now), t.task_id))

    def select(self, ready: Sequence[Task], now: int) -> Optional[Task]:
        """Pick the task to run at *now*, or None if *ready* is empty."""
        if not ready:
            return None
        return self.rank(ready, now)[0]

    def describe(self, task: Task, now: int) -> str:
        """Short ranking annotation used in the dispatch log."""
        return f"rank {self.rank_key(task, now)}"

    # ------------------------------------------------------------------
    # Hooks with safe defaults
    # ------------------------------------------------------------------

    def on_task_complete(self, task: Task, now: int) -> None:
        """Called after *task* retires its current release.

        ``task.missed`` tells whether it finished past its deadline.

        Args:
            task: The task that just finished.
            now: Clock value at the end of its final slice.
        """

    def on_dispatch(self, task: Task, ready: Sequence[Task], now: int) -> None:
        """Called once per dispatch, after *task* ran its slice.

        Args:
            task: The task that ran.
            ready: The ready set the task was selected from.
            now: Clock value at the start of the slice.
        """
