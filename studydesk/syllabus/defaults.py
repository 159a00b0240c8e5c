"""Built-in syllabus tree, habits and tasks used on first run and as migration fallback."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from studydesk.core.models import DashboardState, Habit, SyllabusTopic, Task

CONTENT_DIR = Path(__file__).resolve().parent.parent / "content"


@lru_cache(maxsize=1)
def _load_defaults() -> dict[str, Any]:
    return json.loads((CONTENT_DIR / "defaults.json").read_text(encoding="utf-8"))


def default_syllabus() -> list[SyllabusTopic]:
    return [SyllabusTopic.from_dict(t) for t in _load_defaults()["syllabus"]]


def default_habits() -> list[Habit]:
    return [Habit.from_dict(h) for h in _load_defaults()["habits"]]


def default_tasks() -> list[Task]:
    return [Task.from_dict(t) for t in _load_defaults()["tasks"]]


def default_state() -> DashboardState:
    """Fresh state: default tree, habits and tasks, every other collection empty."""
    return DashboardState(
        syllabus=default_syllabus(),
        habits=default_habits(),
        tasks=default_tasks(),
    )
