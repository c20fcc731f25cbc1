from __future__ import annotations

import pytest

from rt_scheduler.simulator.task import Task, TaskSpec, TickResult


def test_spec_rejects_non_positive_exec():
    with pytest.raises(ValueError, match="exec_time"):
        TaskSpec(name="A", arrival=0, exec_time=0, deadline=10)


def test_spec_rejects_negative_arrival():
    with pytest.raises(ValueError, match="arrival"):
        TaskSpec(name="A", arrival=-1, exec_time=5, deadline=10)


def test_spec_rejects_non_positive_period():
    with pytest.raises(ValueError, match="period"):
        TaskSpec(name="A", arrival=0, exec_time=5, period=0)


def test_spec_rejects_negative_io_fields():
    with pytest.raises(ValueError, match="io_ops"):
        TaskSpec(name="A", arrival=0, exec_time=5, deadline=10, io_ops=-1)
    with pytest.raises(ValueError, match="io_time"):
        TaskSpec(name="A", arrival=0, exec_time=5, deadline=10, io_time=-5)


def test_spec_requires_deadline_or_period():
    with pytest.raises(ValueError, match="deadline or period"):
        TaskSpec(name="A", arrival=0, exec_time=5)


def test_period_only_spec_gets_implicit_deadline():
    spec = TaskSpec(name="P", arrival=30, exec_time=5, period=100)
    assert spec.first_deadline == 130
    assert Task(0, spec).deadline == 130


@pytest.mark.parametrize(
    "field, value",
    [
        ("exec_time", 2.5),
        ("arrival", 1.0),
        ("deadline", "50"),
        ("period", True),
        ("io_ops", None),
        ("io_time", 0.5),
    ],
)
def test_spec_rejects_non_integer_fields(field, value):
    fields = {"name": "A", "arrival": 0, "exec_time": 10, "deadline": 50}
    fields[field] = value
    with pytest.raises(ValueError, match=field):
        TaskSpec(**fields)


def test_spec_rejects_non_string_name():
    with pytest.raises(ValueError, match="name"):
        TaskSpec(name=None, arrival=0, exec_time=10, deadline=50)


def test_from_dict_accepts_export_keys():
    spec = TaskSpec.from_dict(
        {"name": "A", "arrival": 5, "exec": 40, "deadline": 90, "period": None, "ioOps": 2, "ioTime": 15}
    )
    assert spec == TaskSpec(name="A", arrival=5, exec_time=40, deadline=90, io_ops=2, io_time=15)


def test_from_dict_missing_exec_is_a_value_error():
    with pytest.raises(ValueError, match="exec"):
        TaskSpec.from_dict({"name": "A", "deadline": 10})


def test_new_task_starts_ready():
    task = Task(3, TaskSpec(name="A", arrival=0, exec_time=20, deadline=50))
    assert task.remaining_time == 20
    assert not task.finished and not task.missed and not task.suspended
    assert task.priority_boost == 0 and task.io_count == 0
    assert task.is_eligible(0)


def test_task_not_eligible_before_arrival():
    task = Task(0, TaskSpec(name="A", arrival=10, exec_time=20, deadline=50))
    assert not task.is_eligible(9)
    assert task.is_eligible(10)
    with pytest.raises(RuntimeError):
        task.run_slice(0, 10)


def test_run_slice_partial_then_complete():
    task = Task(0, TaskSpec(name="A", arrival=0, exec_time=25, deadline=50))
    assert task.run_slice(0, 20) == (20, TickResult.RUNNING)
    assert task.remaining_time == 5
    assert task.run_slice(20, 20) == (5, TickResult.COMPLETED)
    assert task.finished
    assert task.completion_time == 25
    assert not task.missed
    assert task.turnaround_time == 25
    assert task.lateness == -25


def test_run_slice_marks_late_completion_as_missed():
    task = Task(0, TaskSpec(name="A", arrival=0, exec_time=10, deadline=5))
    _, result = task.run_slice(0, 10)
    assert result is TickResult.COMPLETED
    assert task.missed


def test_exhausting_a_phase_with_io_owed_suspends():
    task = Task(0, TaskSpec(name="A", arrival=0, exec_time=10, deadline=500, io_ops=1, io_time=30))
    used, result = task.run_slice(0, 20)
    assert (used, result) == (10, TickResult.IO_BLOCKED)
    assert task.suspended
    assert task.suspend_time == 30
    assert task.io_count == 1
    assert task.remaining_time == 10
    assert not task.finished
    assert not task.is_eligible(10)


def test_io_wait_is_charged_with_elapsed_time():
    task = Task(0, TaskSpec(name="A", arrival=0, exec_time=10, deadline=500, io_ops=1, io_time=30))
    task.run_slice(0, 10)
    assert not task.tick_io_block(10)
    assert not task.tick_io_block(25)
    assert task.suspend_time == 15
    assert task.tick_io_block(40)
    assert not task.suspended
    assert task.suspend_time == 0


def test_release_rearms_periodic_task():
    task = Task(0, TaskSpec(name="P", arrival=0, exec_time=10, period=50))
    task.run_slice(0, 10)
    task.missed = True
    task.priority_boost = 100
    task.release(50)
    assert task.remaining_time == 10
    assert not task.finished
    assert not task.missed
    assert task.deadline == 100
    assert task.release_time == 50
    assert task.priority_boost == 100


def test_reset_restores_initial_deadline():
    task = Task(0, TaskSpec(name="P", arrival=0, exec_time=10, period=50))
    task.run_slice(0, 10)
    task.release(50)
    task.reset()
    assert task.deadline == 50
    assert task.remaining_time == 10
    assert task.release_time == 0


def test_status_labels():
    task = Task(0, TaskSpec(name="A", arrival=10, exec_time=10, deadline=100))
    assert task.status(0) == "waiting"
    assert task.status(10) == "ready"
    assert task.status(10, running_id=0) == "running"
    task.run_slice(10, 10)
    assert task.status(20) == "done"
