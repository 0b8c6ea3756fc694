"""Storage backends for projects and tasks.

Example:
    ```python
    from project_tracker.storage import SQLAlchemyTrackerStore

    store = SQLAlchemyTrackerStore("sqlite+aiosqlite:///./tracker.db")
    await store.initialize()
    ```
"""

from project_tracker.storage.database import ProjectModel, SQLAlchemyTrackerStore, TaskModel
from project_tracker.storage.tracker_store import TrackerStore

__all__ = [
    "ProjectModel",
    "SQLAlchemyTrackerStore",
    "TaskModel",
    "TrackerStore",
]
