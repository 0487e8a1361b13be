"""Flattening of the phase/task hierarchy into diagram rows."""

from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass, replace
from enum import Enum

from .models import Group, Schedule, Task


class RowKind(Enum):
    """Row variants."""

    PHASE = "phase"
    TASK = "task"


@dataclass(frozen=True)
class Row:
    """One horizontal line of the diagram.

    Rows are created fresh on every render pass. ``visible_index`` and ``y``
    stay ``None`` until ``layout_rows`` places the row, and remain ``None``
    for rows hidden by a collapsed phase.
    """

    kind: RowKind
    source: Group | Task
    index: int
    group_id: str
    visible: bool = True
    collapsed: bool = False  # Only meaningful for phase rows
    visible_index: int | None = None
    y: float | None = None

    @property
    def id(self) -> str:
        return self.source.id

    @property
    def is_phase(self) -> bool:
        return self.kind is RowKind.PHASE

    @property
    def is_task(self) -> bool:
        return self.kind is RowKind.TASK


def flatten(schedule: Schedule, collapsed: Collection[str]) -> list[Row]:
    """Flatten a schedule into rows in document order.

    Each group yields its phase row followed by one row per task. Phase rows
    are always visible; task rows are hidden exactly when their group id is
    in ``collapsed``.

    Args:
        schedule: The schedule to flatten
        collapsed: Ids of collapsed groups

    Returns:
        Rows in display order, indexed from 0
    """
    rows: list[Row] = []
    for group in schedule.groups:
        is_collapsed = group.id in collapsed
        rows.append(
            Row(
                kind=RowKind.PHASE,
                source=group,
                index=len(rows),
                group_id=group.id,
                visible=True,
                collapsed=is_collapsed,
            )
        )
        for task in group.tasks:
            rows.append(
                Row(
                    kind=RowKind.TASK,
                    source=task,
                    index=len(rows),
                    group_id=group.id,
                    visible=not is_collapsed,
                )
            )
    return rows


def build_task_index(rows: Sequence[Row]) -> dict[str, Row]:
    """Map task id to its row.

    Duplicate ids resolve last-write-wins: the later row replaces the
    earlier one.
    """
    index: dict[str, Row] = {}
    for row in rows:
        if row.is_task:
            index[row.id] = row
    return index


def layout_rows(rows: Sequence[Row], row_height: float) -> list[Row]:
    """Assign vertical positions to visible rows.

    Hidden rows consume no vertical space.

    Returns:
        New rows with ``visible_index`` and ``y`` filled in for visible rows
    """
    placed: list[Row] = []
    visible_index = 0
    for row in rows:
        if row.visible:
            placed.append(replace(row, visible_index=visible_index, y=visible_index * row_height))
            visible_index += 1
        else:
            placed.append(replace(row, visible_index=None, y=None))
    return placed


def visible_rows(rows: Sequence[Row]) -> list[Row]:
    """Rows that occupy vertical space."""
    return [row for row in rows if row.visible]


def display_task_id(task_id: str) -> str:
    """Short label for a task id: "task-1-2" -> "1.2"."""
    return task_id.replace("task-", "", 1).replace("-", ".", 1)
