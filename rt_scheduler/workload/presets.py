"""Built-in task sets and task-list loading."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Union

from rt_scheduler.simulator.task import TaskSpec

PRESETS: Dict[str, List[TaskSpec]] = {
    "light": [
        TaskSpec(name="Light1", arrival=0, exec_time=30, deadline=100),
        TaskSpec(name="Light2", arrival=50, exec_time=25, deadline=150),
    ],
    "medium": [
        TaskSpec(name="M1", arrival=0, exec_time=60, deadline=200),
        TaskSpec(name="M2", arrival=40, exec_time=80, deadline=250),
        TaskSpec(name="M3", arrival=100, exec_time=50, deadline=300),
    ],
    "heavy": [
        TaskSpec(name="Heavy1", arrival=0, exec_time=100, deadline=300),
        TaskSpec(name="Heavy2", arrival=50, exec_time=120, deadline=350),
        TaskSpec(name="Heavy3", arrival=100, exec_time=90, deadline=280),
        TaskSpec(name="Heavy4", arrival=150, exec_time=110, deadline=380),
    ],
    # Initial task sets each policy starts with.
    "adaptive-sample": [
        TaskSpec(name="X", arrival=0, exec_time=120, deadline=400),
        TaskSpec(name="Y", arrival=50, exec_time=90, deadline=300),
    ],
    "rm-sample": [
        TaskSpec(name="T1", arrival=0, exec_time=10, deadline=100, period=100),
        TaskSpec(name="T2", arrival=0, exec_time=20, deadline=200, period=200),
    ],
}

DEFAULT_PRESET = {"adaptive": "adaptive-sample", "rm": "rm-sample"}


def get_preset(name: str) -> List[TaskSpec]:
    """Return a copy of the named preset.

    Raises:
        KeyError: If *name* is not a known preset.
    """
    try:
        return list(PRESETS[name])
    except KeyError:
        raise KeyError(f"unknown preset {name!r}; choose from {', '.join(sorted(PRESETS))}") from None


def parse_tasks(text: str) -> List[TaskSpec]:
    """Parse a JSON task list in the export format.

    Raises:
        ValueError: If the document is not a list of valid task entries.
    """
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError("task list must be a JSON array")
    return [TaskSpec.from_dict(entry) for entry in data]


def load_tasks(path: Union[str, Path]) -> List[TaskSpec]:
    return parse_tasks(Path(path).read_text(encoding="utf-8"))
