"""CLI entry point for the real-time scheduling simulator."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Type

from rt_scheduler.simulator.adaptive import BASE_QUANTUM, AdaptiveScheduler
from rt_scheduler.simulator.rate_monotonic import TICK, RateMonotonicScheduler
from rt_scheduler.simulator.scheduler_base import SchedulerBase
from rt_scheduler.simulator.simulation import Simulation, TimelineSlot
from rt_scheduler.simulator.task import TaskSpec
from rt_scheduler.workload.generator import generate_periodic_workload, generate_workload
from rt_scheduler.workload.presets import DEFAULT_PRESET, PRESETS, get_preset, load_tasks

SCHEDULERS: Dict[str, Type[SchedulerBase]] = {
    "adaptive": AdaptiveScheduler,
    "rm": RateMonotonicScheduler,
}


def build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Real-time Scheduling Simulator",
    )
    parser.add_argument(
        "--policy",
        type=str,
        choices=list(SCHEDULERS.keys()),
        default="adaptive",
        help="Scheduling policy (default: adaptive)",
    )
    parser.add_argument(
        "--workload",
        type=str,
        choices=["preset", "random", "periodic"],
        default="preset",
        help="Where tasks come from (default: preset)",
    )
    parser.add_argument(
        "--preset",
        type=str,
        choices=sorted(PRESETS.keys()),
        default=None,
        help="Preset task set (default: the policy's sample set)",
    )
    parser.add_argument(
        "--tasks-file",
        type=Path,
        default=None,
        help="JSON task list in the export format; overrides --workload",
    )
    parser.add_argument(
        "--tasks",
        type=int,
        default=6,
        help="Number of tasks for generated workloads (default: 6)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for workload generation (default: 42)",
    )
    parser.add_argument(
        "--io-fraction",
        type=float,
        default=0.0,
        help="Share of random tasks that perform I/O (default: 0.0)",
    )
    parser.add_argument(
        "--base-quantum",
        type=int,
        default=BASE_QUANTUM,
        help=f"Adaptive base quantum (default: {BASE_QUANTUM})",
    )
    parser.add_argument(
        "--tick-size",
        type=int,
        default=TICK,
        help=f"Rate-monotonic tick size (default: {TICK})",
    )
    parser.add_argument(
        "--max-ticks",
        type=int,
        default=1000,
        help="Stop after this many ticks (default: 1000)",
    )
    parser.add_argument(
        "--speed",
        type=int,
        default=1,
        help="Ticks per progress line when tracing (default: 1)",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Print a status line after every --speed ticks",
    )
    parser.add_argument(
        "--export",
        type=Path,
        default=None,
        help="Write the task list as JSON to this path",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Event log verbosity (default: WARNING)",
    )
    return parser


def make_scheduler(name: str, base_quantum: int, tick_size: int) -> SchedulerBase:
    """Instantiate the requested scheduler."""
    if name == "rm":
        return RateMonotonicScheduler(tick_size=tick_size)
    return AdaptiveScheduler(base_quantum=base_quantum)


def load_workload(args: argparse.Namespace) -> List[TaskSpec]:
    """Resolve the task set from the parsed arguments."""
    if args.tasks_file is not None:
        return load_tasks(args.tasks_file)
    if args.workload == "random":
        return generate_workload(num_tasks=args.tasks, seed=args.seed, io_fraction=args.io_fraction)
    if args.workload == "periodic":
        return generate_periodic_workload(num_tasks=args.tasks, seed=args.seed)
    return get_preset(args.preset or DEFAULT_PRESET[args.policy])


def format_timeline(slots: List[TimelineSlot]) -> str:
    parts = []
    for slot in slots:
        if slot.kind == "idle":
            parts.append(f"[{slot.start} idle]")
        else:
            parts.append(f"[{slot.start} {slot.name} {slot.length}]")
    return " ".join(parts)


def print_results(sim: Simulation, policy: str) -> None:
    """Print per-task results and summary statistics to stdout."""
    snapshot = sim.snapshot()
    has_io = any(t["ioOps"] for t in snapshot["tasks"])

    cols = (
        f"{'ID':>4}  {'Name':<8}  {'Arrival':>7}  {'Exec':>5}  {'Deadline':>8}  "
        f"{'Period':>6}  {'Remain':>6}  {'Status':<8}  {'Missed':>6}"
    )
    if has_io:
        cols += f"  {'IO':>5}"
    header = cols
    separator = "-" * len(header)

    print(f"\n=== Simulation Results: {policy.upper()} | t={snapshot['now']} ===\n")
    print(header)
    print(separator)

    for t in snapshot["tasks"]:
        period = t["period"] if t["period"] is not None else "-"
        line = (
            f"{t['id']:>4}  {t['name']:<8}  {t['arrival']:>7}  {t['exec']:>5}  {t['deadline']:>8}  "
            f"{period:>6}  {t['remaining']:>6}  {t['status']:<8}  {'yes' if t['missed'] else 'no':>6}"
        )
        if has_io:
            line += f"  {t['ioCount']}/{t['ioOps']:<3}"
        print(line)

    stats = sim.stats()
    print(separator)
    print(f"  Completed:      {int(stats['completed'])}/{int(stats['total'])}")
    print(f"  Missed:         {int(stats['missed'])}")
    print(f"  Miss Rate:      {stats['miss_rate']:.1f}%")
    print(f"  Avg Turnaround: {stats['avg_turnaround']:.2f}")
    print(f"  Mean Lateness:  {stats['mean_lateness']:.2f}")
    print()
    print("Timeline:", format_timeline(sim.timeline))
    print()


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, run simulation, print results."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.speed <= 0:
        parser.error(f"--speed must be positive, got {args.speed}")
    try:
        workload = load_workload(args)
        scheduler = make_scheduler(args.policy, args.base_quantum, args.tick_size)
    except (ValueError, KeyError, OSError) as e:
        parser.error(str(e))

    sim = Simulation(scheduler=scheduler, tasks=workload)

    ticks = 0
    while ticks < args.max_ticks and not sim.is_done():
        batch = min(args.speed, args.max_ticks - ticks)
        sim.advance(batch)
        ticks += batch
        if args.trace:
            preview = sim.peek()
            upcoming = f"next {preview.name} (quantum {preview.quantum})" if preview else "idle"
            running = sim.current_task_id if sim.current_task_id is not None else "-"
            print(f"t={sim.now:>5}  ran {running}  {upcoming}")

    print_results(sim, args.policy)

    if args.export is not None:
        args.export.write_text(sim.export_json(), encoding="utf-8")
        print(f"Exported {len(sim.tasks)} tasks to {args.export}")


if __name__ == "__main__":
    main()
