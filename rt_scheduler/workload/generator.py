"""Workload generation for the real-time scheduling simulator."""

from __future__ import annotations

import math
import random
from typing import List, Sequence

from rt_scheduler.simulator.task import TaskSpec


def generate_workload(
    num_tasks: int,
    seed: int = 42,
    arrival_time_range: tuple[int, int] = (0, 200),
    exec_time_range: tuple[int, int] = (10, 100),
    slack_factor_range: tuple[float, float] = (1.5, 3.0),
    io_fraction: float = 0.0,
) -> List[TaskSpec]:
    """Generate a reproducible list of one-shot deadline tasks.

    Uses a local Random instance seeded with *seed* so that results are
    fully deterministic regardless of external random state.

    Args:
        num_tasks: Number of tasks to generate.
        seed: RNG seed for reproducibility.
        arrival_time_range: Inclusive (min, max) range for arrival times.
        exec_time_range: Inclusive (min, max) range for execution demand.
        slack_factor_range: The relative deadline is the execution demand
            scaled by a factor drawn from this range.
        io_fraction: Share of tasks (0.0-1.0) that perform I/O.

    Returns:
        A list of TaskSpec objects sorted by arrival.
    """
    if num_tasks < 0:
        raise ValueError(f"num_tasks must be non-negative, got {num_tasks}")
    if not 0.0 <= io_fraction <= 1.0:
        raise ValueError(f"io_fraction must be within [0, 1], got {io_fraction}")

    rng = random.Random(seed)
    specs: List[TaskSpec] = []

    for i in range(num_tasks):
        arrival = rng.randint(*arrival_time_range)
        exec_time = rng.randint(*exec_time_range)
        factor = rng.uniform(*slack_factor_range)
        io_ops, io_time = 0, 0
        if rng.random() < io_fraction:
            io_ops = rng.randint(1, 2)
            io_time = rng.randint(1, 4) * 10
        # Each I/O phase repeats the execution demand.
        demand = exec_time * (io_ops + 1) + io_ops * io_time
        specs.append(
            TaskSpec(
                name=f"T{i}",
                arrival=arrival,
                exec_time=exec_time,
                deadline=arrival + math.ceil(demand * factor),
                io_ops=io_ops,
                io_time=io_time,
            )
        )

    specs.sort(key=lambda s: s.arrival)
    return specs


def generate_periodic_workload(
    num_tasks: int,
    seed: int = 42,
    periods: Sequence[int] = (50, 100, 200, 400),
    utilization: float = 0.7,
) -> List[TaskSpec]:
    """Generate a reproducible set of periodic tasks released at t=0.

    The total utilization is split at random between the tasks, and each
    execution demand is its share times its period (at least 1).  No
    feasibility test is applied; overloaded sets simply miss deadlines.

    Args:
        num_tasks: Number of periodic tasks.
        seed: RNG seed for reproducibility.
        periods: Candidate periods to draw from.
        utilization: Target total CPU utilization.

    Returns:
        A list of TaskSpec objects with periods and implicit deadlines.
    """
    if num_tasks < 0:
        raise ValueError(f"num_tasks must be non-negative, got {num_tasks}")
    if utilization <= 0:
        raise ValueError(f"utilization must be positive, got {utilization}")
    if not periods:
        raise ValueError("periods must not be empty")

    rng = random.Random(seed)
    weights = [rng.random() + 0.1 for _ in range(num_tasks)]
    total = sum(weights)
    specs: List[TaskSpec] = []

    for i, weight in enumerate(weights):
        period = rng.choice(list(periods))
        share = utilization * weight / total
        specs.append(
            TaskSpec(
                name=f"P{i}",
                arrival=0,
                exec_time=max(1, round(share * period)),
                period=period,
            )
        )

    return specs
