"""Task model for the real-time scheduling simulator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional


class TickResult(Enum):
    """Outcome of granting a task one slice of CPU time."""

    RUNNING = auto()
    COMPLETED = auto()
    IO_BLOCKED = auto()


@dataclass(frozen=True)
class TaskSpec:
    """Static description of a task, as entered by a user or a preset.

    Either an absolute *deadline* or a *period* must be supplied.  When
    only a period is given the first deadline is one period after
    arrival.  Validation happens here so that a bad spec never reaches
    the registry.
    """

    name: str
    arrival: int
    exec_time: int
    deadline: Optional[int] = None
    period: Optional[int] = None
    io_ops: int = 0
    io_time: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError(f"name must be a non-empty string, got {self.name!r}")
        for attr in ("arrival", "exec_time", "io_ops", "io_time"):
            _require_int(attr, getattr(self, attr))
        for attr in ("deadline", "period"):
            if getattr(self, attr) is not None:
                _require_int(attr, getattr(self, attr))
        if self.exec_time <= 0:
            raise ValueError(f"exec_time must be positive, got {self.exec_time}")
        if self.arrival < 0:
            raise ValueError(f"arrival must be non-negative, got {self.arrival}")
        if self.period is not None and self.period <= 0:
            raise ValueError(f"period must be positive, got {self.period}")
        if self.deadline is None and self.period is None:
            raise ValueError("deadline or period is required")
        if self.deadline is not None and self.deadline < 0:
            raise ValueError(f"deadline must be non-negative, got {self.deadline}")
        if self.io_ops < 0:
            raise ValueError(f"io_ops must be non-negative, got {self.io_ops}")
        if self.io_time < 0:
            raise ValueError(f"io_time must be non-negative, got {self.io_time}")

    @property
    def first_deadline(self) -> int:
        if self.deadline is not None:
            return self.deadline
        assert self.period is not None
        return self.arrival + self.period

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskSpec":
        """Build a spec from the exported task-list format.

        Accepts both the export keys (``exec``, ``ioOps``, ``ioTime``) and
        the attribute names used here.

        Raises:
            ValueError: If *data* is not an object, a required field is
                missing, or a field does not hold a whole number.
        """
        if not isinstance(data, dict):
            raise ValueError(f"task entry must be a JSON object, got {data!r}")
        try:
            name = data["name"]
            exec_time = data["exec"] if "exec" in data else data["exec_time"]
        except KeyError as e:
            raise ValueError(f"task entry is missing field {e.args[0]!r}") from e
        if not isinstance(name, str):
            raise ValueError(f"name must be a non-empty string, got {name!r}")
        return cls(
            name=name,
            arrival=_to_int("arrival", data.get("arrival", 0)),
            exec_time=_to_int("exec", exec_time),
            deadline=_optional_int("deadline", data.get("deadline")),
            period=_optional_int("period", data.get("period")),
            io_ops=_to_int("ioOps", data.get("ioOps", data.get("io_ops")) or 0),
            io_time=_to_int("ioTime", data.get("ioTime", data.get("io_time")) or 0),
        )


def _require_int(field: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field} must be an integer, got {value!r}")


def _to_int(field: str, value: Any) -> int:
    """Convert a loaded JSON value to int, refusing nulls and fractions."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{field} must be an integer, got {value!r}") from None
    _require_int(field, value)
    return value


def _optional_int(field: str, value: Any) -> Optional[int]:
    if value is None:
        return None
    return _to_int(field, value)


class Task:
    """A schedulable unit of work and its runtime state.

    A task with ``io_ops`` I/O points is ``io_ops + 1`` execution phases
    of ``exec_time`` each, separated by blocking phases of ``io_time``.
    Periodic tasks are re-armed by the release manager once their
    current instance is done.
    """

    __slots__ = (
        "task_id",
        "name",
        "arrival_time",
        "exec_time",
        "remaining_time",
        "deadline",
        "initial_deadline",
        "period",
        "io_ops",
        "io_time",
        "io_count",
        "finished",
        "missed",
        "suspended",
        "suspend_time",
        "io_accounted_at",
        "priority_boost",
        "release_time",
        "start_time",
        "completion_time",
    )

    def __init__(self, task_id: int, spec: TaskSpec) -> None:
        self.task_id: int = task_id
        self.name: str = spec.name
        self.arrival_time: int = spec.arrival
        self.exec_time: int = spec.exec_time
        self.initial_deadline: int = spec.first_deadline
        self.period: Optional[int] = spec.period
        self.io_ops: int = spec.io_ops
        self.io_time: int = spec.io_time
        self.reset()

    def reset(self) -> None:
        """Restore every runtime field to its initial value."""
        self.remaining_time: int = self.exec_time
        self.deadline: int = self.initial_deadline
        self.io_count: int = 0
        self.finished: bool = False
        self.missed: bool = False
        self.suspended: bool = False
        self.suspend_time: int = 0
        self.io_accounted_at: int = 0
        self.priority_boost: int = 0
        self.release_time: int = self.arrival_time
        self.start_time: Optional[int] = None
        self.completion_time: Optional[int] = None

    def is_eligible(self, now: int) -> bool:
        """Return True if the task may be selected at *now*."""
        return (
            not self.finished
            and not self.suspended
            and self.arrival_time <= now
            and self.remaining_time > 0
        )

    def is_active(self, now: int) -> bool:
        """Arrived and not yet finished (suspended tasks count)."""
        return not self.finished and self.arrival_time <= now

    def laxity(self, now: int) -> int:
        return self.deadline - now - self.remaining_time

    def run_slice(self, now: int, quantum: int) -> tuple[int, TickResult]:
        """Grant the task up to *quantum* units of CPU time starting at *now*.

        Returns:
            ``(slice, result)`` where *slice* is the time actually used.

        Raises:
            RuntimeError: If the task is not eligible at *now*.
        """
        if not self.is_eligible(now):
            raise RuntimeError(
                f"Task {self.task_id} ({self.name}) is not runnable at t={now}."
            )

        if self.start_time is None:
            self.start_time = now

        used = min(quantum, self.remaining_time)
        self.remaining_time -= used
        end = now + used

        if self.remaining_time > 0:
            return used, TickResult.RUNNING

        if self.io_count < self.io_ops:
            self.io_count += 1
            self.suspended = True
            self.suspend_time = self.io_time
            self.io_accounted_at = end
            self.remaining_time = self.exec_time
            return used, TickResult.IO_BLOCKED

        self.finished = True
        self.completion_time = end
        if end > self.deadline:
            self.missed = True
        return used, TickResult.COMPLETED

    def tick_io_block(self, now: int) -> bool:
        """Charge the I/O wait with the time elapsed up to *now*.

        Returns:
            True if the I/O burst is over and the task is ready again.
        """
        if not self.suspended:
            return False
        self.suspend_time -= now - self.io_accounted_at
        self.io_accounted_at = now
        if self.suspend_time <= 0:
            self.suspended = False
            self.suspend_time = 0
            return True
        return False

    def release(self, now: int) -> None:
        """Re-arm a periodic task for its next instance."""
        assert self.period is not None
        self.remaining_time = self.exec_time
        self.finished = False
        self.missed = False
        self.io_count = 0
        self.deadline = now + self.period
        self.release_time = now
        self.start_time = None
        self.completion_time = None

    def status(self, now: int, running_id: Optional[int] = None) -> str:
        """Display status of the task at *now*."""
        if self.finished:
            return "done"
        if self.suspended:
            return "io-wait"
        if self.task_id == running_id:
            return "running"
        if self.arrival_time > now:
            return "waiting"
        return "ready"

    @property
    def turnaround_time(self) -> Optional[int]:
        """Time from release to completion, or None if not yet complete."""
        if self.completion_time is None:
            return None
        return self.completion_time - self.release_time

    @property
    def lateness(self) -> Optional[int]:
        """Completion minus deadline (negative when early), or None."""
        if self.completion_time is None:
            return None
        return self.completion_time - self.deadline

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.task_id,
            "name": self.name,
            "arrival": self.arrival_time,
            "exec": self.exec_time,
            "remaining": self.remaining_time,
            "deadline": self.deadline,
            "period": self.period,
            "ioOps": self.io_ops,
            "ioTime": self.io_time,
            "ioCount": self.io_count,
            "finished": self.finished,
            "missed": self.missed,
            "suspended": self.suspended,
            "suspendTime": self.suspend_time,
            "priorityBoost": self.priority_boost,
        }

    def __repr__(self) -> str:
        return (
            f"Task(id={self.task_id}, name={self.name!r}, arrival={self.arrival_time}, "
            f"exec={self.exec_time}, remaining={self.remaining_time}, "
            f"deadline={self.deadline}, finished={self.finished}, missed={self.missed})"
        )
