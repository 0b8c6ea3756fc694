"""Core types and data models for the project tracker.

All models are frozen pydantic models. Use ``model_dump(mode="json")`` to get
the JSON-ready shape returned by the tools (timestamps as ISO-8601 strings).
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TaskPriority(StrEnum):
    """Task priority."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TaskStatus(StrEnum):
    """Task workflow status."""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    DEVELOPED = "developed"
    TESTED = "tested"
    DEPLOYED = "deployed"
    BLOCKED = "blocked"


PROJECT_UPDATE_FIELDS: frozenset[str] = frozenset({"name", "client", "description"})

TASK_UPDATE_FIELDS: frozenset[str] = frozenset(
    {"status", "notes", "priority", "category", "description", "assignee", "due_date"}
)


class FieldPatch(Mapping[str, Any]):
    """Partial update restricted to an allow-list of writable fields.

    Keys outside ``allowed`` are dropped silently. An empty patch is a valid
    object; it is up to the writer to reject it (see
    :class:`~project_tracker.core.exceptions.EmptyUpdateError`).

    Example
    -------
    .. code-block:: python

        patch = FieldPatch(TASK_UPDATE_FIELDS, {"status": "tested", "id": 4})
        dict(patch)  # {"status": "tested"}
    """

    def __init__(self, allowed: frozenset[str], updates: Mapping[str, Any]) -> None:
        self.allowed = allowed
        self._fields: dict[str, Any] = {k: v for k, v in updates.items() if k in allowed}

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"FieldPatch({self._fields!r})"

    @property
    def is_empty(self) -> bool:
        return not self._fields


class Project(BaseModel):
    """Project record."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., gt=0, description="Store-assigned identity")
    name: str = Field(..., min_length=1, description="Project name")
    client: str | None = Field(default=None, description="Client name")
    description: str | None = Field(default=None, description="Free-form description")
    created_at: datetime | None = Field(default=None, description="Creation timestamp")
    updated_at: datetime | None = Field(default=None, description="Last write timestamp")


class ProjectListing(Project):
    """Project row as returned by ``list_projects`` with per-status task counts."""

    total_tasks: int = Field(default=0, ge=0)
    pending_tasks: int = Field(default=0, ge=0)
    in_progress_tasks: int = Field(default=0, ge=0)
    developed_tasks: int = Field(default=0, ge=0)
    tested_tasks: int = Field(default=0, ge=0)
    deployed_tasks: int = Field(default=0, ge=0)
    blocked_tasks: int = Field(default=0, ge=0)


class Task(BaseModel):
    """Task record, owned by exactly one project."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., gt=0)
    project_id: int = Field(..., gt=0)
    description: str = Field(..., min_length=1)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    status: TaskStatus = Field(default=TaskStatus.PENDING)
    category: str | None = None
    assignee: str | None = None
    due_date: str | None = Field(default=None, description="Due date (YYYY-MM-DD)")
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TaskFilter(BaseModel):
    """Filter set for ``get_tasks``; unset fields do not constrain the result."""

    model_config = ConfigDict(frozen=True)

    project_id: int | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    category: str | None = None
    assignee: str | None = None
    search: str | None = Field(
        default=None, description="Substring matched against description or notes"
    )


def percentage(part: int, total: int) -> int:
    """Return ``part / total`` as a whole percentage, rounding halves up.

    Returns 0 when ``total`` is 0.
    """
    if total <= 0:
        return 0
    return (part * 200 + total) // (total * 2)


class ProjectSummary(BaseModel):
    """Aggregate task counts for one project."""

    model_config = ConfigDict(frozen=True)

    total: int = Field(default=0, ge=0)
    pending: int = Field(default=0, ge=0)
    in_progress: int = Field(default=0, ge=0)
    developed: int = Field(default=0, ge=0)
    tested: int = Field(default=0, ge=0)
    deployed: int = Field(default=0, ge=0)
    blocked: int = Field(default=0, ge=0)
    critical: int = Field(default=0, ge=0)
    high: int = Field(default=0, ge=0)
    medium: int = Field(default=0, ge=0)
    low: int = Field(default=0, ge=0)
    completion_percentage: int = Field(default=0, ge=0, le=100)
    progress_percentage: int = Field(default=0, ge=0, le=100)

    @classmethod
    def from_counts(cls, counts: Mapping[str, int | None]) -> ProjectSummary:
        """Build a summary from raw counts and derive both percentages."""
        values = {k: int(v or 0) for k, v in counts.items()}
        total = values.get("total", 0)
        done = values.get("deployed", 0)
        progressed = values.get("developed", 0) + values.get("tested", 0) + done
        return cls(
            **values,
            completion_percentage=percentage(done, total),
            progress_percentage=percentage(progressed, total),
        )


__all__ = [
    "PROJECT_UPDATE_FIELDS",
    "TASK_UPDATE_FIELDS",
    "FieldPatch",
    "Project",
    "ProjectListing",
    "ProjectSummary",
    "Task",
    "TaskFilter",
    "TaskPriority",
    "TaskStatus",
    "percentage",
]
