"""Pydantic schemas for schedule JSON/YAML input.

The schemas only check structure. Field values are coerced where the
intent is obvious and otherwise left for the renderer to degrade on; no
date ordering, reference or cycle checks happen here.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .logger import get_logger


def _coerce_text(v: Any) -> str:
    if v is None:
        return ""
    return str(v)


def _coerce_date(v: Any) -> str | date | None:
    # Unusable values become None so the row degrades instead of failing the load
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, (str, date)):
        return v
    return None


def _keep_mappings(v: Any, what: str) -> list[Any]:
    if v is None:
        return []
    if not isinstance(v, list):
        v = [v]
    kept: list[Any] = []
    for item in v:  # type: ignore[union-attr]
        if isinstance(item, (dict, BaseModel)):
            kept.append(item)
        else:
            get_logger().checks(f"Ignoring {what} entry that is not an object: {item!r}")
    return kept


class TaskSchema(BaseModel):
    """Schema for a single task."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    name: str = ""
    start: str | date | None = None
    end: str | date | None = None
    effort: str = ""
    depends_on: list[str] = Field(default_factory=list, alias="dependsOn")

    @field_validator("id", "name", "effort", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        """Render ids, names and effort labels as text."""
        return _coerce_text(v)

    @field_validator("start", "end", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> str | date | None:
        """Keep date-like values, drop anything else."""
        return _coerce_date(v)

    @field_validator("depends_on", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Ensure dependsOn is a list of ids."""
        if v is None:
            return []
        if isinstance(v, (list, tuple, set)):
            return [str(item) for item in v if item is not None]  # type: ignore[misc]
        return [str(v)]


class GroupSchema(BaseModel):
    """Schema for a phase and its tasks."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    name: str = ""
    start: str | date | None = None
    end: str | date | None = None
    effort: str = ""
    tasks: list[TaskSchema] = Field(default_factory=list)

    @field_validator("id", "name", "effort", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        """Render ids, names and effort labels as text."""
        return _coerce_text(v)

    @field_validator("start", "end", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> str | date | None:
        """Keep date-like values, drop anything else."""
        return _coerce_date(v)

    @field_validator("tasks", mode="before")
    @classmethod
    def keep_task_objects(cls, v: Any) -> list[Any]:
        """Skip task entries that are not objects."""
        return _keep_mappings(v, "task")


class ProjectSchema(BaseModel):
    """Schema for project metadata."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    start: str | date | None = None
    end: str | date | None = None

    @field_validator("name", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        """Render the project name as text."""
        return _coerce_text(v)

    @field_validator("start", "end", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> str | date | None:
        """Keep date-like values, drop anything else."""
        return _coerce_date(v)


class ScheduleSchema(BaseModel):
    """Schema for the whole schedule document."""

    model_config = ConfigDict(extra="ignore")

    project: ProjectSchema = Field(default_factory=ProjectSchema)
    groups: list[GroupSchema] = Field(default_factory=list)

    @field_validator("project", mode="before")
    @classmethod
    def default_project(cls, v: Any) -> Any:
        """Treat a missing or null project as empty metadata."""
        if v is None:
            return {}
        return v

    @field_validator("groups", mode="before")
    @classmethod
    def keep_group_objects(cls, v: Any) -> list[Any]:
        """Skip group entries that are not objects."""
        return _keep_mappings(v, "group")
