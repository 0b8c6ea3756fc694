"""mcp-project-tracker: project and task tracking tools over stdio JSON-RPC.

Quick start
-----------
.. code-block:: console

    $ TRACKER_DATABASE_URL=sqlite+aiosqlite:///./tracker.db mcp-project-tracker

Programmatic use
----------------
.. code-block:: python

    from project_tracker import SQLAlchemyTrackerStore, Dispatcher

    store = SQLAlchemyTrackerStore("sqlite+aiosqlite:///:memory:")
    await store.initialize()
    dispatcher = Dispatcher(store)
    response = await dispatcher.handle(
        {"jsonrpc": "2.0", "id": 1, "method": "tools/call",
         "params": {"name": "create_project", "arguments": {"name": "Website"}}}
    )

Public API
----------
Core types
    Project, ProjectListing, Task, TaskFilter, ProjectSummary, TaskPriority,
    TaskStatus, FieldPatch

Configuration
    TrackerConfig

Storage
    TrackerStore (ABC), SQLAlchemyTrackerStore

Protocol
    LineDecoder, encode_message, Dispatcher, ToolRegistry, TrackerClient

Server
    TrackerServer, run_stdio

Exceptions
    TrackerError and all its subclasses
"""
from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

try:
    __version__: str = _pkg_version("mcp-project-tracker")
except PackageNotFoundError:  # running from source without install
    __version__ = "0.0.0+dev"

from project_tracker.core.config import TrackerConfig
from project_tracker.core.exceptions import (
    ClientError,
    ConfigurationError,
    EmptyUpdateError,
    InvalidArgumentError,
    NotFoundError,
    ProjectNotFoundError,
    RequestTimeoutError,
    ServerExitedError,
    StoreError,
    TaskNotFoundError,
    ToolCallError,
    TrackerError,
    UnknownMethodError,
    UnknownToolError,
)
from project_tracker.core.types import (
    FieldPatch,
    Project,
    ProjectListing,
    ProjectSummary,
    Task,
    TaskFilter,
    TaskPriority,
    TaskStatus,
)
from project_tracker.protocol import (
    Dispatcher,
    LineDecoder,
    ToolRegistry,
    TrackerClient,
    encode_message,
)
from project_tracker.server import TrackerServer, run_stdio
from project_tracker.storage import SQLAlchemyTrackerStore, TrackerStore

__all__ = [
    "ClientError",
    "ConfigurationError",
    "Dispatcher",
    "EmptyUpdateError",
    "FieldPatch",
    "InvalidArgumentError",
    "LineDecoder",
    "NotFoundError",
    "Project",
    "ProjectListing",
    "ProjectNotFoundError",
    "ProjectSummary",
    "RequestTimeoutError",
    "SQLAlchemyTrackerStore",
    "ServerExitedError",
    "StoreError",
    "Task",
    "TaskFilter",
    "TaskNotFoundError",
    "TaskPriority",
    "TaskStatus",
    "ToolCallError",
    "ToolRegistry",
    "TrackerClient",
    "TrackerConfig",
    "TrackerError",
    "TrackerServer",
    "TrackerStore",
    "UnknownMethodError",
    "UnknownToolError",
    "__version__",
    "encode_message",
    "run_stdio",
]
