from __future__ import annotations

import json

import pytest

from rt_scheduler.main import build_parser, main, make_scheduler
from rt_scheduler.simulator.adaptive import AdaptiveScheduler
from rt_scheduler.simulator.rate_monotonic import RateMonotonicScheduler


def test_make_scheduler():
    assert isinstance(make_scheduler("adaptive", 25, 10), AdaptiveScheduler)
    rm = make_scheduler("rm", 20, 5)
    assert isinstance(rm, RateMonotonicScheduler)
    assert rm.tick_size == 5


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.policy == "adaptive"
    assert args.workload == "preset"
    assert args.base_quantum == 20
    assert args.tick_size == 10


def test_main_runs_default_adaptive_sample(capsys):
    main([])
    out = capsys.readouterr().out
    assert "Simulation Results: ADAPTIVE" in out
    assert "Completed:      2/2" in out
    assert "Missed:         0" in out


def test_main_rm_with_trace_and_export(tmp_path, capsys):
    export = tmp_path / "out.json"
    main(["--policy", "rm", "--max-ticks", "20", "--speed", "5", "--trace", "--export", str(export)])
    out = capsys.readouterr().out
    assert "Simulation Results: RM" in out
    assert "t=" in out
    data = json.loads(export.read_text(encoding="utf-8"))
    assert [entry["name"] for entry in data] == ["T1", "T2"]


def test_main_random_workload(capsys):
    main(["--workload", "random", "--tasks", "4", "--seed", "3", "--io-fraction", "0.5"])
    assert "Completed:" in capsys.readouterr().out


def test_main_rejects_bad_quantum():
    with pytest.raises(SystemExit):
        main(["--base-quantum", "0"])


def test_main_rejects_unknown_preset():
    with pytest.raises(SystemExit):
        main(["--preset", "nope"])


def test_main_rejects_malformed_tasks_file(tmp_path):
    path = tmp_path / "tasks.json"
    path.write_text('[{"name": "A", "exec": null, "deadline": 50}]', encoding="utf-8")
    with pytest.raises(SystemExit):
        main(["--tasks-file", str(path)])
