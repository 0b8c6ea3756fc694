"""Custom exceptions for mcp-project-tracker.

All exceptions derive from :class:`TrackerError` so callers can catch the
entire family with a single ``except TrackerError`` clause.

Hierarchy::

    TrackerError
    ├── InvalidArgumentError
    ├── NotFoundError
    │   ├── ProjectNotFoundError
    │   └── TaskNotFoundError
    ├── EmptyUpdateError
    ├── UnknownMethodError
    ├── UnknownToolError
    ├── StoreError
    ├── ConfigurationError
    └── ClientError
        ├── RequestTimeoutError
        ├── ServerExitedError
        └── ToolCallError
"""

from __future__ import annotations

from typing import Any


class TrackerError(Exception):
    """Base exception for all mcp-project-tracker errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details: dict[str, Any] = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | details={self.details}"
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r})"


class InvalidArgumentError(TrackerError):
    """Raised when a tool argument fails validation before reaching the store."""

    def __init__(
        self,
        field: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(reason, details)
        self.field = field
        self.reason = reason


class NotFoundError(TrackerError):
    """Raised when a referenced project or task does not exist."""

    entity = "Record"

    def __init__(
        self,
        record_id: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        if record_id is None:
            message = f"{self.entity} not found"
        else:
            message = f"{self.entity} with ID {record_id} not found"
        super().__init__(message, details)
        self.record_id = record_id


class ProjectNotFoundError(NotFoundError):
    entity = "Project"


class TaskNotFoundError(NotFoundError):
    entity = "Task"


class EmptyUpdateError(TrackerError):
    """Raised when a partial update carries no writable field.

    No-op updates are rejected rather than silently accepted.
    """

    def __init__(self, entity: str, details: dict[str, Any] | None = None) -> None:
        super().__init__("No valid fields to update", details)
        self.entity = entity


class UnknownMethodError(TrackerError):
    """Raised when a JSON-RPC method name is not routed by the dispatcher."""

    def __init__(self, method: Any, details: dict[str, Any] | None = None) -> None:
        super().__init__(f"Unknown method: {method}", details)
        self.method = method


class UnknownToolError(TrackerError):
    """Raised when ``tools/call`` names a tool missing from the catalog."""

    def __init__(self, name: Any, details: dict[str, Any] | None = None) -> None:
        super().__init__(f"Unknown tool: {name}", details)
        self.name = name


class StoreError(TrackerError):
    """Raised when the persistence layer fails (constraint violation, I/O)."""

    def __init__(
        self,
        operation: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"Store operation {operation!r} failed: {reason}", details)
        self.operation = operation
        self.reason = reason


class ConfigurationError(TrackerError):
    """Raised when :class:`~project_tracker.core.config.TrackerConfig` contains an invalid value."""

    def __init__(
        self,
        parameter: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"Invalid configuration for {parameter!r}: {reason}", details)
        self.parameter = parameter
        self.reason = reason


class ClientError(TrackerError):
    """Base for failures observed by the request-issuing side."""


class RequestTimeoutError(ClientError):
    """Raised when no response arrives for a pending request in time."""

    def __init__(
        self,
        request_id: int,
        method: str,
        timeout: float,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            f"Timeout waiting response for id={request_id}, method={method} "
            f"after {timeout:g}s",
            details,
        )
        self.request_id = request_id
        self.method = method
        self.timeout = timeout


class ServerExitedError(ClientError):
    """Raised for every pending request when the server process terminates."""

    def __init__(
        self,
        request_id: int,
        returncode: int | None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            f"Server exited while waiting response for id={request_id}, code={returncode}",
            details,
        )
        self.request_id = request_id
        self.returncode = returncode


class ToolCallError(ClientError):
    """Raised by the client when a tool call comes back as an error envelope."""

    def __init__(
        self,
        tool: str,
        message: str,
        code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"Tool {tool} returned error: {message}", details)
        self.tool = tool
        self.error_message = message
        self.code = code


__all__ = [
    "ClientError",
    "ConfigurationError",
    "EmptyUpdateError",
    "InvalidArgumentError",
    "NotFoundError",
    "ProjectNotFoundError",
    "RequestTimeoutError",
    "ServerExitedError",
    "StoreError",
    "TaskNotFoundError",
    "ToolCallError",
    "TrackerError",
    "UnknownMethodError",
    "UnknownToolError",
]
