"""Abstract project/task storage interface.

Defines the repository contract the dispatcher depends on. The store is not
responsible for argument validation; it persists what it is given, enforces
referential integrity, and reports missing rows.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from project_tracker.core.types import (
        Project,
        ProjectListing,
        ProjectSummary,
        Task,
        TaskFilter,
        TaskPriority,
    )


class TrackerStore(ABC):
    """Abstract base class for project/task storage implementations.

    Example:
        ```python
        store = SQLAlchemyTrackerStore(database_url="sqlite+aiosqlite:///./tracker.db")
        await store.initialize()

        project_id = await store.create_project("Website", client="Acme")
        task_id = await store.add_task(project_id, "Draft landing page")
        await store.update_task(task_id, {"status": "in-progress"})

        tasks = await store.get_tasks(TaskFilter(project_id=project_id))
        await store.delete_project(project_id)  # cascades to tasks
        await store.close()
        ```
    """

    async def initialize(self) -> None:  # noqa: B027
        """Prepare the backing storage (create tables). Idempotent."""

    async def close(self) -> None:  # noqa: B027
        """Release connections held by the store."""

    # -- projects ---------------------------------------------------------

    @abstractmethod
    async def create_project(
        self,
        name: str,
        client: str | None = None,
        description: str | None = None,
    ) -> int:
        """Insert a project and return its store-assigned id."""

    @abstractmethod
    async def get_projects(self, client: str | None = None) -> list[ProjectListing]:
        """List projects with per-status task counts, newest ``updated_at`` first.

        Args:
            client: Only return projects for this client when given
        """

    @abstractmethod
    async def get_project(self, project_id: int) -> Project:
        """Get one project.

        Raises:
            ProjectNotFoundError: If the project does not exist
        """

    @abstractmethod
    async def update_project(self, project_id: int, updates: Mapping[str, Any]) -> bool:
        """Patch ``name``, ``client`` or ``description``.

        Returns:
            False when no row matched ``project_id``

        Raises:
            EmptyUpdateError: If ``updates`` holds no writable field
        """

    @abstractmethod
    async def delete_project(self, project_id: int) -> bool:
        """Delete a project and, through the foreign key, all its tasks.

        Returns:
            False when no row matched ``project_id``
        """

    # -- tasks ------------------------------------------------------------

    @abstractmethod
    async def add_task(
        self,
        project_id: int,
        description: str,
        priority: TaskPriority | str = "medium",
        category: str | None = None,
        assignee: str | None = None,
        due_date: str | None = None,
    ) -> int:
        """Insert a task, touch the owning project, and return the task id."""

    @abstractmethod
    async def get_task(self, task_id: int) -> Task:
        """Get one task.

        Raises:
            TaskNotFoundError: If the task does not exist
        """

    @abstractmethod
    async def update_task(self, task_id: int, updates: Mapping[str, Any]) -> bool:
        """Patch the allowed task fields and touch the owning project.

        Returns:
            False when no row matched ``task_id``

        Raises:
            EmptyUpdateError: If ``updates`` holds no writable field
        """

    @abstractmethod
    async def get_tasks(self, task_filter: TaskFilter | None = None) -> list[Task]:
        """List tasks matching every given filter, newest ``created_at`` first."""

    @abstractmethod
    async def delete_task(self, task_id: int) -> bool:
        """Delete one task; touches the owning project if a row was removed."""

    # -- aggregates -------------------------------------------------------

    @abstractmethod
    async def get_project_summary(self, project_id: int) -> ProjectSummary:
        """Count tasks of a project per status and per priority."""

    @abstractmethod
    async def get_assignees(self, project_id: int | None = None) -> list[str]:
        """Distinct non-empty assignee names, sorted."""


__all__ = ["TrackerStore"]
