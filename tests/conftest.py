"""Shared pytest fixtures for the mcp-project-tracker test suite.

Design philosophy
-----------------
- Fixtures that touch I/O use SQLite in-memory so the suite runs without any
  files left behind; the subprocess tests use ``tmp_path`` instead.
- Fixtures are async where the SUT is async.
- Scope is "function" everywhere so every test starts from an empty store.
"""
from __future__ import annotations

import json
from typing import Any

import pytest

from project_tracker.core.config import TrackerConfig
from project_tracker.protocol.dispatcher import Dispatcher
from project_tracker.storage.database import SQLAlchemyTrackerStore

MEMORY_URL = "sqlite+aiosqlite:///:memory:"


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def memory_config() -> TrackerConfig:
    return TrackerConfig(database_url=MEMORY_URL, _env_file=None)


# ---------------------------------------------------------------------------
# Storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
async def store():
    """Empty in-memory store with tables created."""
    s = SQLAlchemyTrackerStore(MEMORY_URL)
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
async def seeded_store(store: SQLAlchemyTrackerStore) -> SQLAlchemyTrackerStore:
    """Store with one project ("Website", client Acme) holding three tasks."""
    project_id = await store.create_project("Website", client="Acme", description="Landing")
    await store.add_task(project_id, "Draft copy", priority="low", assignee="ana")
    await store.add_task(project_id, "Build header", priority="high", category="frontend")
    await store.add_task(project_id, "Fix login bug", priority="critical", assignee="bo")
    return store


# ---------------------------------------------------------------------------
# Dispatcher fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def dispatcher(store: SQLAlchemyTrackerStore, memory_config: TrackerConfig) -> Dispatcher:
    return Dispatcher(store, memory_config)


def request(request_id: Any, method: str, params: dict | None = None) -> dict[str, Any]:
    message: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        message["params"] = params
    return message


async def call_tool(dispatcher: Dispatcher, name: str, arguments: dict | None = None) -> Any:
    """Run one tools/call and return the decoded payload, or the error envelope."""
    response = await dispatcher.handle(
        request(1, "tools/call", {"name": name, "arguments": arguments or {}})
    )
    assert response is not None
    if "error" in response:
        return response
    return json.loads(response["result"]["content"][0]["text"])
