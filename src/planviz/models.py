"""Data models for planviz schedules."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .schemas import GroupSchema, ScheduleSchema, TaskSchema

# Year, month and day; month and day may be unpadded ("2024-1-5")
DATE_PATTERN = re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})")

SHORT_MONTHS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


def parse_date(value: Any) -> date | None:
    """Parse a schedule date value.

    Args:
        value: A date, a datetime (its date part is used) or a YYYY-M-D string

    Returns:
        date object or None if the value cannot be interpreted
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    match = DATE_PATTERN.fullmatch(value.strip())
    if match is None:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def format_display_date(value: Any) -> str:
    """Format a date as "Jan 8, 2024".

    Unparseable strings are shown as given; anything else becomes "".
    """
    parsed = parse_date(value)
    if parsed is None:
        return value if isinstance(value, str) else ""
    return f"{SHORT_MONTHS[parsed.month - 1]} {parsed.day}, {parsed.year}"


def _empty_ids() -> tuple[str, ...]:
    return ()


@dataclass(frozen=True)
class Task:
    """An atomic unit of work."""

    id: str
    name: str
    start: date | None
    end: date | None
    effort: str = ""
    depends_on: tuple[str, ...] = field(default_factory=_empty_ids)
    # Original text of start/end, kept for display when parsing failed
    raw_start: str = ""
    raw_end: str = ""

    @property
    def has_dates(self) -> bool:
        """Whether both start and end parsed."""
        return self.start is not None and self.end is not None

    @classmethod
    def from_schema(cls, schema: TaskSchema) -> Task:
        """Build a task from its validated schema."""
        return cls(
            id=schema.id,
            name=schema.name,
            start=parse_date(schema.start),
            end=parse_date(schema.end),
            effort=schema.effort,
            depends_on=tuple(schema.depends_on),
            raw_start=_raw(schema.start),
            raw_end=_raw(schema.end),
        )


@dataclass(frozen=True)
class Group:
    """A phase: a named time span containing ordered tasks."""

    id: str
    name: str
    start: date | None
    end: date | None
    effort: str = ""
    tasks: tuple[Task, ...] = ()
    raw_start: str = ""
    raw_end: str = ""

    @property
    def has_dates(self) -> bool:
        """Whether both start and end parsed."""
        return self.start is not None and self.end is not None

    @classmethod
    def from_schema(cls, schema: GroupSchema) -> Group:
        """Build a group (and its tasks) from its validated schema."""
        return cls(
            id=schema.id,
            name=schema.name,
            start=parse_date(schema.start),
            end=parse_date(schema.end),
            effort=schema.effort,
            tasks=tuple(Task.from_schema(t) for t in schema.tasks),
            raw_start=_raw(schema.start),
            raw_end=_raw(schema.end),
        )


@dataclass(frozen=True)
class Project:
    """Project metadata: name and overall date span."""

    name: str
    start: date | None
    end: date | None


@dataclass(frozen=True)
class Schedule:
    """Complete schedule: project metadata plus ordered groups.

    Immutable once loaded; the renderer only reads it.
    """

    project: Project
    groups: tuple[Group, ...] = ()

    @classmethod
    def from_schema(cls, schema: ScheduleSchema) -> Schedule:
        """Build a schedule from a validated schema document."""
        return cls(
            project=Project(
                name=schema.project.name,
                start=parse_date(schema.project.start),
                end=parse_date(schema.project.end),
            ),
            groups=tuple(Group.from_schema(g) for g in schema.groups),
        )

    def tasks(self) -> Iterator[Task]:
        """Iterate all tasks in document order."""
        for group in self.groups:
            yield from group.tasks

    def get_task_by_id(self, task_id: str) -> Task | None:
        """Get a task by id (last one wins when ids repeat)."""
        found: Task | None = None
        for task in self.tasks():
            if task.id == task_id:
                found = task
        return found

    def duplicate_task_ids(self) -> list[str]:
        """Task ids that appear more than once, in first-seen order."""
        seen: set[str] = set()
        duplicates: list[str] = []
        for task in self.tasks():
            if task.id in seen and task.id not in duplicates:
                duplicates.append(task.id)
            seen.add(task.id)
        return duplicates

    def date_span(self) -> tuple[date, date]:
        """Resolve the project start/end used as the timeline extent.

        Project dates win. When one is missing it is inferred from the
        earliest/latest group and task dates; with no dates at all the
        span is a single day (today).
        """
        start = self.project.start
        end = self.project.end
        if start is None or end is None:
            known: list[date] = []
            for group in self.groups:
                known.extend(d for d in (group.start, group.end) if d is not None)
                for task in group.tasks:
                    known.extend(d for d in (task.start, task.end) if d is not None)
            if start is None:
                start = min(known) if known else (end or date.today())  # noqa: DTZ011
            if end is None:
                end = max(known) if known else start
        return start, end


def _raw(value: str | date | None) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return value
