"""Tick-driven single-CPU real-time scheduling simulation.

This module contains no ranking logic. It owns the clock and the task
registry and orchestrates I/O resumption, periodic release, dispatch,
completion and deadline bookkeeping; every scheduling decision is
delegated to the injected SchedulerBase policy.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterable, List, Optional

from rt_scheduler.metrics.performance import compute_metrics
from rt_scheduler.simulator.adaptive import AdaptiveScheduler
from rt_scheduler.simulator.clock import Clock
from rt_scheduler.simulator.io_tracker import IOSuspensionTracker
from rt_scheduler.simulator.rate_monotonic import RateMonotonicScheduler
from rt_scheduler.simulator.registry import TaskRegistry
from rt_scheduler.simulator.release import release_periodic
from rt_scheduler.simulator.scheduler_base import SchedulerBase
from rt_scheduler.simulator.task import Task, TaskSpec, TickResult

logger = logging.getLogger(__name__)

TIMELINE_LIMIT = 160


@dataclass(frozen=True)
class TimelineSlot:
    """One entry of the rendered timeline: a run, an I/O marker or idle time."""

    kind: str
    start: int
    length: int
    task_id: Optional[int] = None
    name: str = "idle"


@dataclass(frozen=True)
class Dispatch:
    """A single slice granted to a task."""

    task_id: int
    name: str
    start: int
    length: int
    result: TickResult
    missed: bool = False


@dataclass
class TickReport:
    """What happened during one call to Simulation.tick()."""

    start: int
    end: int
    dispatches: List[Dispatch] = field(default_factory=list)
    resumed: List[int] = field(default_factory=list)
    released: List[int] = field(default_factory=list)
    idle: bool = False
    paused: bool = False


@dataclass(frozen=True)
class Preview:
    """The task the policy would pick next, and the slice it would get."""

    task_id: int
    name: str
    quantum: int
    rank: int
    load: Optional[float] = None


class Simulation:
    """Deterministic, tick-driven uniprocessor scheduling simulation.

    Each tick the engine:
      1. Does nothing if paused.
      2. Charges I/O-blocked tasks and resumes those whose wait is over.
      3. Re-arms periodic tasks at their period boundary.
      4. Idles for one policy unit if no task is ready.
      5. Otherwise runs the policy's choice for one slice and applies
         completion, I/O and deadline-miss bookkeeping.
      6. If that task blocked on I/O, dispatches once more from the
         remaining ready tasks before the tick ends.

    All scheduling decisions are delegated to the provided SchedulerBase
    implementation -- no policy logic lives here.

    Args:
        scheduler: The scheduling policy to use.
        tasks: Initial task specs; ids are assigned 0..n-1.
        timeline_limit: Number of timeline slots kept for display.
    """

    def __init__(
        self,
        scheduler: SchedulerBase,
        tasks: Iterable[TaskSpec] = (),
        timeline_limit: int = TIMELINE_LIMIT,
    ) -> None:
        if timeline_limit <= 0:
            raise ValueError(f"timeline_limit must be positive, got {timeline_limit}")

        self._scheduler: SchedulerBase = scheduler
        self._registry: TaskRegistry = TaskRegistry(tasks)
        self._clock: Clock = Clock()
        self._io: IOSuspensionTracker = IOSuspensionTracker()
        self._timeline: Deque[TimelineSlot] = deque(maxlen=timeline_limit)
        self._paused: bool = False
        self._current_task_id: Optional[int] = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def now(self) -> int:
        return self._clock.now

    @property
    def scheduler(self) -> SchedulerBase:
        return self._scheduler

    @property
    def tasks(self) -> List[Task]:
        return list(self._registry)

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def current_task_id(self) -> Optional[int]:
        """Id of the task that ran last, or None after an idle tick."""
        return self._current_task_id

    @property
    def timeline(self) -> List[TimelineSlot]:
        return list(self._timeline)

    def snapshot(self) -> Dict[str, Any]:
        """Copy of the task list and clock for renderers and exporters."""
        now = self._clock.now
        tasks = []
        for task in self._registry:
            entry = task.to_dict()
            entry["status"] = task.status(now, self._current_task_id)
            tasks.append(entry)
        return {"tasks": tasks, "now": now}

    def peek(self) -> Optional[Preview]:
        """Preview the next selection at the current clock without running it.

        Resumptions and releases due at the start of the next tick are not
        taken into account.
        """
        now = self._clock.now
        task = self._scheduler.select(self._registry.ready(now), now)
        if task is None:
            return None
        load = None
        if isinstance(self._scheduler, AdaptiveScheduler):
            load = self._scheduler.load(self.tasks, now)
        return Preview(
            task_id=task.task_id,
            name=task.name,
            quantum=self._scheduler.quantum(self.tasks, now),
            rank=self._scheduler.rank_key(task, now),
            load=load,
        )

    def stats(self) -> Dict[str, float]:
        return compute_metrics(self.tasks, self._clock.now)

    def export_tasks(self) -> List[Dict[str, Any]]:
        return self._registry.export()

    def export_json(self) -> str:
        return self._registry.export_json()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def add_task(self, spec: TaskSpec) -> Task:
        return self._registry.add(spec)

    def remove_task(self, task_id: int) -> None:
        self._registry.remove(task_id)
        if self._current_task_id == task_id:
            self._current_task_id = None

    def load_preset(self, specs: Iterable[TaskSpec]) -> None:
        """Replace every task with *specs* and rewind the clock."""
        self._registry.replace(specs)
        self._clock.reset()
        self._timeline.clear()
        self._current_task_id = None
        logger.info("Loaded preset with %d tasks", len(self._registry))

    def reset(self) -> None:
        """Restore all tasks to their initial state and rewind the clock.

        The task set itself is kept. Safe to call at any time and
        repeatedly.
        """
        self._paused = False
        self._registry.reset()
        self._clock.reset()
        self._timeline.clear()
        self._current_task_id = None
        logger.info("Simulation reset")

    def pause(self) -> None:
        if not self._paused:
            self._paused = True
            logger.info("Simulation paused at t=%d", self._clock.now)

    def resume(self) -> None:
        if self._paused:
            self._paused = False
            logger.info("Simulation resumed at t=%d", self._clock.now)

    def set_base_quantum(self, value: int) -> None:
        if not isinstance(self._scheduler, AdaptiveScheduler):
            raise ValueError(f"policy {self._scheduler.name!r} has no base quantum")
        self._scheduler.set_base_quantum(value)

    def set_tick_size(self, value: int) -> None:
        if not isinstance(self._scheduler, RateMonotonicScheduler):
            raise ValueError(f"policy {self._scheduler.name!r} has no tick size")
        self._scheduler.set_tick_size(value)

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def tick(self) -> TickReport:
        """Advance the simulation by one logical step."""
        now = self._clock.now
        report = TickReport(start=now, end=now)
        if self._paused:
            report.paused = True
            return report

        # 1. Resume tasks whose I/O finished.
        report.resumed = [t.task_id for t in self._io.advance(self._registry, now)]

        # 2. Re-arm periodic tasks.
        report.released = [t.task_id for t in release_periodic(self._registry, now)]

        # 3. Idle if nothing can run.
        ready = self._registry.ready(now)
        if not ready:
            unit = self._scheduler.idle_unit
            self._current_task_id = None
            self._timeline.append(TimelineSlot("idle", now, unit))
            report.idle = True
            report.end = self._clock.advance(unit)
            return report

        # 4. Run the policy's choice.
        dispatch = self._dispatch(ready)
        report.dispatches.append(dispatch)

        # 5. Back-fill the CPU once if that task blocked on I/O.
        if dispatch.result is TickResult.IO_BLOCKED:
            ready = self._registry.ready(self._clock.now)
            if ready:
                report.dispatches.append(self._dispatch(ready))

        report.end = self._clock.now
        return report

    def _dispatch(self, ready: List[Task]) -> Dispatch:
        now = self._clock.now
        task = self._scheduler.select(ready, now)
        assert task is not None
        quantum = self._scheduler.quantum(self.tasks, now)
        note = self._scheduler.describe(task, now)

        used, result = task.run_slice(now, quantum)
        self._current_task_id = task.task_id
        self._timeline.append(TimelineSlot("run", now, used, task.task_id, task.name))
        logger.debug("t=%d: running %s for %d (%s)", now, task.name, used, note)
        end = self._clock.advance(used)

        if result is TickResult.IO_BLOCKED:
            self._timeline.append(
                TimelineSlot("io", end, task.io_time, task.task_id, f"{task.name}-IO")
            )
            self._io.on_blocked(task, end)
        elif result is TickResult.COMPLETED:
            if not task.missed:
                logger.info("%s finished at t=%d", task.name, end)
            self._scheduler.on_task_complete(task, end)

        self._scheduler.on_dispatch(task, ready, now)
        return Dispatch(
            task_id=task.task_id,
            name=task.name,
            start=now,
            length=used,
            result=result,
            missed=task.missed,
        )

    def advance(self, count: int = 1) -> List[TickReport]:
        """Run *count* ticks back to back (the speed multiplier)."""
        if count <= 0:
            raise ValueError(f"count must be positive, got {count}")
        return [self.tick() for _ in range(count)]

    def is_done(self) -> bool:
        """True when every task has finished its current release."""
        return all(task.finished for task in self._registry)

    def run_until_idle(self, max_ticks: int = 10_000) -> List[TickReport]:
        """Tick until every task is finished or *max_ticks* is reached."""
        if max_ticks <= 0:
            raise ValueError(f"max_ticks must be positive, got {max_ticks}")
        reports: List[TickReport] = []
        while len(reports) < max_ticks and not self.is_done():
            report = self.tick()
            reports.append(report)
            if report.paused:
                break
        return reports

    def __repr__(self) -> str:
        return (
            f"Simulation(policy={self._scheduler.name}, now={self._clock.now}, "
            f"tasks={len(self._registry)}, paused={self._paused})"
        )
