from __future__ import annotations

import json

import pytest

from rt_scheduler.simulator.task import TaskSpec
from rt_scheduler.workload.generator import generate_periodic_workload, generate_workload
from rt_scheduler.workload.presets import PRESETS, get_preset, load_tasks, parse_tasks


def test_presets_are_valid_and_copied():
    assert {"light", "medium", "heavy", "adaptive-sample", "rm-sample"} <= set(PRESETS)
    heavy = get_preset("heavy")
    heavy.clear()
    assert len(get_preset("heavy")) == 4


def test_unknown_preset():
    with pytest.raises(KeyError, match="unknown preset"):
        get_preset("extreme")


def test_parse_tasks_reads_export_format(tmp_path):
    text = json.dumps(
        [
            {"name": "A", "arrival": 0, "exec": 30, "deadline": 100, "period": None},
            {"name": "B", "arrival": 10, "exec": 20, "deadline": None, "period": 50},
        ]
    )
    specs = parse_tasks(text)
    assert specs[1] == TaskSpec(name="B", arrival=10, exec_time=20, period=50)

    path = tmp_path / "tasks.json"
    path.write_text(text, encoding="utf-8")
    assert load_tasks(path) == specs


def test_parse_tasks_rejects_non_list():
    with pytest.raises(ValueError, match="array"):
        parse_tasks('{"name": "A"}')


def test_random_workload_is_reproducible():
    first = generate_workload(num_tasks=12, seed=7, io_fraction=0.5)
    second = generate_workload(num_tasks=12, seed=7, io_fraction=0.5)
    assert first == second
    assert [s.arrival for s in first] == sorted(s.arrival for s in first)
    for spec in first:
        assert spec.deadline > spec.arrival + spec.exec_time


def test_random_workload_io_fraction():
    specs = generate_workload(num_tasks=10, seed=1, io_fraction=1.0)
    assert all(s.io_ops >= 1 and s.io_time > 0 for s in specs)
    with pytest.raises(ValueError, match="io_fraction"):
        generate_workload(num_tasks=3, io_fraction=1.5)


def test_periodic_workload():
    specs = generate_periodic_workload(num_tasks=5, seed=3, periods=(50, 100))
    assert len(specs) == 5
    for spec in specs:
        assert spec.arrival == 0
        assert spec.period in (50, 100)
        assert spec.first_deadline == spec.period
        assert spec.exec_time >= 1


@pytest.mark.parametrize(
    "entry, field",
    [
        ({"name": "A", "arrival": None, "exec": 10, "deadline": 50}, "arrival"),
        ({"name": "A", "exec": None, "deadline": 50}, "exec"),
        ({"name": "A", "exec": 2.5, "deadline": 50}, "exec"),
        ({"name": "A", "exec": 10, "deadline": "soon"}, "deadline"),
        ({"name": None, "exec": 10, "deadline": 50}, "name"),
        ([1], "object"),
    ],
)
def test_parse_tasks_rejects_malformed_entries(entry, field):
    with pytest.raises(ValueError, match=field):
        parse_tasks(json.dumps([entry]))


def test_parse_tasks_accepts_whole_number_floats():
    (spec,) = parse_tasks('[{"name": "A", "arrival": 5.0, "exec": 10, "deadline": 50.0}]')
    assert spec == TaskSpec(name="A", arrival=5, exec_time=10, deadline=50)
