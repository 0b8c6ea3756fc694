"""JSON-RPC 2.0 request/response envelopes."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

JSONRPC_VERSION = "2.0"

# single code used for every application-level error
APPLICATION_ERROR = -32000


@dataclass(frozen=True)
class JsonRpcRequest:
    """Decoded request envelope."""

    method: Any
    id: int | str | None = None
    params: dict[str, Any] = field(default_factory=dict)
    has_id: bool = True

    @classmethod
    def from_message(cls, data: dict[str, Any]) -> JsonRpcRequest:
        params = data.get("params")
        return cls(
            method=data.get("method"),
            id=data.get("id"),
            params=params if isinstance(params, dict) else {},
            has_id="id" in data,
        )

    @property
    def is_notification(self) -> bool:
        return not self.has_id


def success_response(id: int | str | None, result: Any) -> dict[str, Any]:
    """Create a JSON-RPC success response."""
    return {"jsonrpc": JSONRPC_VERSION, "id": id, "result": result}


def error_response(
    id: int | str | None, message: str, code: int = APPLICATION_ERROR
) -> dict[str, Any]:
    """Create a JSON-RPC error response."""
    return {"jsonrpc": JSONRPC_VERSION, "id": id, "error": {"code": code, "message": message}}


def build_request(id: int, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    """Create a JSON-RPC request as sent by the client."""
    return {"jsonrpc": JSONRPC_VERSION, "id": id, "method": method, "params": params or {}}


__all__ = [
    "APPLICATION_ERROR",
    "JSONRPC_VERSION",
    "JsonRpcRequest",
    "build_request",
    "error_response",
    "success_response",
]
