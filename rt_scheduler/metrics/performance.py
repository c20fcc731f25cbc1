"""Schedule statistics for the simulator's task list."""

from __future__ import annotations

from typing import Dict, Sequence

import numpy as np

from rt_scheduler.simulator.task import Task


def compute_metrics(tasks: Sequence[Task], now: int) -> Dict[str, float]:
    """Summarise the schedule at time *now*.

    The miss rate is the share of completed tasks that finished late, in
    percent; it is 0.0 until something completes.
    """
    completed = [t for t in tasks if t.finished]
    missed = [t for t in completed if t.missed]
    waiting = [t for t in tasks if not t.finished and t.arrival_time > now]

    turnarounds = np.array(
        [t.turnaround_time for t in completed if t.turnaround_time is not None], dtype=float
    )
    lateness = np.array([t.lateness for t in completed if t.lateness is not None], dtype=float)

    if turnarounds.size:
        avg_turnaround = float(turnarounds.mean())
        max_turnaround = float(turnarounds.max())
        p99_turnaround = float(np.percentile(turnarounds, 99))
    else:
        avg_turnaround = max_turnaround = p99_turnaround = 0.0

    return {
        "total": float(len(tasks)),
        "completed": float(len(completed)),
        "missed": float(len(missed)),
        "miss_rate": 100.0 * len(missed) / len(completed) if completed else 0.0,
        "waiting": float(len(waiting)),
        "current_time": float(now),
        "avg_turnaround": avg_turnaround,
        "max_turnaround": max_turnaround,
        "p99_turnaround": p99_turnaround,
        "mean_lateness": float(lateness.mean()) if lateness.size else 0.0,
    }
