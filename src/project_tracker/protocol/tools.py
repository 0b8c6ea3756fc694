"""Tool catalog and handlers.

Each handler validates its own arguments, talks to the
:class:`~project_tracker.storage.tracker_store.TrackerStore`, and returns a
small JSON-ready dict. Handlers raise
:class:`~project_tracker.core.exceptions.TrackerError` subclasses on failure;
turning those into error envelopes is the dispatcher's job.
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from project_tracker.core.exceptions import (
    ProjectNotFoundError,
    TaskNotFoundError,
    UnknownToolError,
)
from project_tracker.core.types import TaskFilter, TaskPriority, TaskStatus
from project_tracker.utils.validation import (
    optional_text,
    require_text,
    validate_choice,
    validate_due_date,
    validate_id,
)

if TYPE_CHECKING:
    from project_tracker.storage.tracker_store import TrackerStore

logger = logging.getLogger(__name__)

ToolHandler = Callable[["TrackerStore", dict[str, Any]], Awaitable[dict[str, Any]]]

_PRIORITIES = [p.value for p in TaskPriority]
_STATUSES = [s.value for s in TaskStatus]


@dataclass(frozen=True)
class ToolDefinition:
    """A named operation with its JSON-schema argument descriptor."""

    name: str
    description: str
    input_schema: dict[str, Any]
    handler: ToolHandler

    def describe(self) -> dict[str, Any]:
        """Catalog entry as returned by ``tools/list``."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


#################
# Tool handlers #
#################


async def create_project(store: TrackerStore, args: dict[str, Any]) -> dict[str, Any]:
    name = require_text(args.get("name"), "Name")
    client = optional_text(args.get("client"), "Client")
    description = optional_text(args.get("description"), "Description")

    project_id = await store.create_project(name, client, description)
    return {
        "success": True,
        "project_id": project_id,
        "message": f'Project "{name}" created with ID {project_id}',
    }


async def list_projects(store: TrackerStore, args: dict[str, Any]) -> dict[str, Any]:
    client = optional_text(args.get("client"), "Client")

    projects = await store.get_projects(client)
    return {"projects": [p.model_dump(mode="json") for p in projects]}


async def add_task(store: TrackerStore, args: dict[str, Any]) -> dict[str, Any]:
    project_id = validate_id(args.get("project_id"), "Project ID")
    description = require_text(args.get("description"), "Description")
    priority = validate_choice(args.get("priority"), TaskPriority, "priority") or TaskPriority.MEDIUM
    category = optional_text(args.get("category"), "Category")
    assignee = optional_text(args.get("assignee"), "Assignee")
    due_date = validate_due_date(args.get("due_date"))

    # missing project must report not-found, never a foreign key failure
    project = await store.get_project(project_id)

    task_id = await store.add_task(
        project_id,
        description,
        priority=priority,
        category=category,
        assignee=assignee,
        due_date=due_date,
    )
    return {
        "success": True,
        "task_id": task_id,
        "message": f'Task added with ID {task_id} to project "{project.name}"',
    }


async def update_task(store: TrackerStore, args: dict[str, Any]) -> dict[str, Any]:
    task_id = validate_id(args.get("id"), "Task ID")

    updates: dict[str, Any] = {}
    if "status" in args:
        updates["status"] = validate_choice(args["status"], TaskStatus, "status", required=True)
    if "priority" in args:
        updates["priority"] = validate_choice(
            args["priority"], TaskPriority, "priority", required=True
        )
    if "description" in args:
        updates["description"] = require_text(args["description"], "Description")
    for key, label in (("notes", "Notes"), ("category", "Category"), ("assignee", "Assignee")):
        if key in args:
            updates[key] = optional_text(args[key], label)
    if "due_date" in args:
        updates["due_date"] = validate_due_date(args["due_date"])

    if not await store.update_task(task_id, updates):
        raise TaskNotFoundError(task_id)
    return {"success": True, "message": f"Task {task_id} updated successfully"}


async def get_tasks(store: TrackerStore, args: dict[str, Any]) -> dict[str, Any]:
    project_id = args.get("project_id")
    if project_id is not None:
        project_id = validate_id(project_id, "Project ID")

    task_filter = TaskFilter(
        project_id=project_id,
        status=validate_choice(args.get("status"), TaskStatus, "status"),
        priority=validate_choice(args.get("priority"), TaskPriority, "priority"),
        category=optional_text(args.get("category"), "Category"),
        assignee=optional_text(args.get("assignee"), "Assignee"),
        search=optional_text(args.get("search"), "Search"),
    )
    tasks = await store.get_tasks(task_filter)
    return {"tasks": [t.model_dump(mode="json") for t in tasks]}


async def get_project_summary(store: TrackerStore, args: dict[str, Any]) -> dict[str, Any]:
    project_id = validate_id(args.get("project_id"), "Project ID")

    project = await store.get_project(project_id)
    summary = await store.get_project_summary(project_id)
    return {
        "project_name": project.name,
        "project_id": project_id,
        "summary": summary.model_dump(),
    }


async def delete_task(store: TrackerStore, args: dict[str, Any]) -> dict[str, Any]:
    task_id = validate_id(args.get("id"), "Task ID")

    if not await store.delete_task(task_id):
        raise TaskNotFoundError(task_id)
    return {"success": True, "message": f"Task {task_id} deleted successfully"}


async def delete_project(store: TrackerStore, args: dict[str, Any]) -> dict[str, Any]:
    project_id = validate_id(args.get("id"), "Project ID")

    project = await store.get_project(project_id)
    if not await store.delete_project(project_id):
        raise ProjectNotFoundError(project_id)
    return {
        "success": True,
        "message": f'Project "{project.name}" and all its tasks deleted successfully',
    }


###########
# Catalog #
###########


def _string(description: str) -> dict[str, Any]:
    return {"type": "string", "description": description}


def _integer(description: str) -> dict[str, Any]:
    return {"type": "integer", "minimum": 1, "description": description}


def _enum(values: list[str], description: str) -> dict[str, Any]:
    return {"type": "string", "enum": values, "description": description}


def _object(properties: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


TOOLS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="create_project",
        description="Create a new project",
        input_schema=_object(
            {
                "name": _string("Project name"),
                "client": _string("Client name (optional)"),
                "description": _string("Project description (optional)"),
            },
            required=["name"],
        ),
        handler=create_project,
    ),
    ToolDefinition(
        name="list_projects",
        description="List all projects with metadata and task counts",
        input_schema=_object({"client": _string("Filter by client name (optional)")}),
        handler=list_projects,
    ),
    ToolDefinition(
        name="add_task",
        description="Add a new task to a project",
        input_schema=_object(
            {
                "project_id": _integer("ID of the project"),
                "description": _string("Task description"),
                "priority": _enum(_PRIORITIES, "Task priority (default: medium)"),
                "category": _string("Task category (optional)"),
                "assignee": _string("Task assignee (optional)"),
                "due_date": _string("Due date (YYYY-MM-DD, optional)"),
            },
            required=["project_id", "description"],
        ),
        handler=add_task,
    ),
    ToolDefinition(
        name="update_task",
        description="Update an existing task",
        input_schema=_object(
            {
                "id": _integer("Task ID"),
                "status": _enum(_STATUSES, "Task status"),
                "notes": _string("Task notes (optional)"),
                "priority": _enum(_PRIORITIES, "Task priority (optional)"),
                "category": _string("Task category (optional)"),
                "description": _string("Task description (optional)"),
                "assignee": _string("Task assignee (optional)"),
                "due_date": _string("Due date (YYYY-MM-DD, optional)"),
            },
            required=["id"],
        ),
        handler=update_task,
    ),
    ToolDefinition(
        name="get_tasks",
        description="Get filtered tasks, newest first",
        input_schema=_object(
            {
                "project_id": _integer("Filter by project ID (optional)"),
                "status": _enum(_STATUSES, "Filter by status (optional)"),
                "priority": _enum(_PRIORITIES, "Filter by priority (optional)"),
                "category": _string("Filter by category (optional)"),
                "assignee": _string("Filter by assignee (optional)"),
                "search": _string("Search in description and notes (optional)"),
            }
        ),
        handler=get_tasks,
    ),
    ToolDefinition(
        name="get_project_summary",
        description="Get summary statistics for a project",
        input_schema=_object({"project_id": _integer("Project ID")}, required=["project_id"]),
        handler=get_project_summary,
    ),
    ToolDefinition(
        name="delete_task",
        description="Delete a task",
        input_schema=_object({"id": _integer("Task ID to delete")}, required=["id"]),
        handler=delete_task,
    ),
    ToolDefinition(
        name="delete_project",
        description="Delete a project and all its tasks",
        input_schema=_object({"id": _integer("Project ID to delete")}, required=["id"]),
        handler=delete_project,
    ),
)


class ToolRegistry:
    """Fixed lookup table from tool name to :class:`ToolDefinition`."""

    def __init__(self, tools: tuple[ToolDefinition, ...] = TOOLS) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: ToolDefinition) -> None:
        if tool.name in self._tools:
            logger.warning("Tool %s already registered, overwriting", tool.name)
        self._tools[tool.name] = tool
        logger.debug("Registered tool: %s", tool.name)

    def get(self, name: Any) -> ToolDefinition:
        """Return the tool called *name*.

        Raises:
            UnknownToolError: If no such tool is registered
        """
        if not isinstance(name, str) or name not in self._tools:
            raise UnknownToolError(name)
        return self._tools[name]

    def catalog(self) -> list[dict[str, Any]]:
        """Tool descriptors in registration order."""
        return [tool.describe() for tool in self._tools.values()]


__all__ = [
    "TOOLS",
    "ToolDefinition",
    "ToolHandler",
    "ToolRegistry",
    "add_task",
    "create_project",
    "delete_project",
    "delete_task",
    "get_project_summary",
    "get_tasks",
    "list_projects",
    "update_task",
]
