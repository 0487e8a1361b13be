"""Pytest configuration and fixtures for planviz tests."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest

from planviz import config as config_module
from planviz.loader import schedule_from_dict
from planviz.logger import reset_logger
from planviz.models import Schedule


@pytest.fixture(autouse=True)
def clean_global_state() -> Iterator[None]:
    """Reset the logger and the --config path around each test."""
    reset_logger()
    config_module.set_config_path(None)
    yield
    reset_logger()
    config_module.set_config_path(None)


def task(
    task_id: str,
    start: str | None,
    end: str | None,
    *depends_on: str,
    name: str | None = None,
    effort: str = "8h",
) -> dict[str, Any]:
    """Build a task object in the wire format.

    Example:
        task("task-1-2", "2024-01-15", "2024-01-20", "task-1-1")
    """
    return {
        "id": task_id,
        "name": name or f"Task {task_id}",
        "start": start,
        "end": end,
        "effort": effort,
        "dependsOn": list(depends_on),
    }


def group(
    group_id: str,
    tasks: list[dict[str, Any]],
    start: str | None = "2024-01-01",
    end: str | None = "2024-01-31",
    *,
    name: str | None = None,
) -> dict[str, Any]:
    """Build a group object in the wire format."""
    return {
        "id": group_id,
        "name": name or f"Phase {group_id}",
        "start": start,
        "end": end,
        "effort": "40h",
        "tasks": tasks,
    }


def schedule_data(
    groups: list[dict[str, Any]],
    start: str = "2024-01-01",
    end: str = "2024-01-31",
    name: str = "Test Project",
) -> dict[str, Any]:
    """Build a whole schedule document."""
    return {"project": {"name": name, "start": start, "end": end}, "groups": groups}


def make_schedule(
    groups: list[dict[str, Any]],
    start: str = "2024-01-01",
    end: str = "2024-01-31",
    name: str = "Test Project",
) -> Schedule:
    """Build a Schedule through the normal loading path."""
    return schedule_from_dict(schedule_data(groups, start, end, name))


@pytest.fixture
def january_schedule() -> Schedule:
    """31-day project with one phase and one task (2024-01-05..2024-01-10)."""
    return make_schedule(
        [group("phase-1", [task("task-1-1", "2024-01-05", "2024-01-10")], "2024-01-05", "2024-01-10")]
    )


@pytest.fixture
def chained_schedule() -> Schedule:
    """Two phases; task-1-2 follows task-1-1 with a clear gap, task-2-1 follows task-1-2."""
    return make_schedule(
        [
            group(
                "phase-1",
                [
                    task("task-1-1", "2024-01-01", "2024-01-10"),
                    task("task-1-2", "2024-01-15", "2024-01-20", "task-1-1"),
                ],
                "2024-01-01",
                "2024-01-20",
            ),
            group(
                "phase-2",
                [task("task-2-1", "2024-01-22", "2024-01-31", "task-1-2")],
                "2024-01-22",
                "2024-01-31",
            ),
        ]
    )
