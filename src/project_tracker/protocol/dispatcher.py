"""Request dispatcher: JSON-RPC method routing and response packaging.

The dispatcher is stateless across messages. It routes one decoded message,
runs the matching tool against the injected store, and returns exactly one
envelope carrying either ``result`` or ``error``. Notifications get no
response.

Routing::

    initialize  -> server identity and capabilities
    tools/list  -> static tool catalog
    tools/call  -> ToolRegistry lookup, handler(store, arguments)
    *           -> "Unknown method" error
"""
from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from project_tracker.core.config import TrackerConfig
from project_tracker.core.exceptions import (
    InvalidArgumentError,
    TrackerError,
    UnknownMethodError,
)
from project_tracker.protocol.envelope import (
    JsonRpcRequest,
    error_response,
    success_response,
)
from project_tracker.protocol.tools import ToolRegistry

if TYPE_CHECKING:
    from project_tracker.storage.tracker_store import TrackerStore

logger = logging.getLogger(__name__)


class Dispatcher:
    """Route decoded messages to tools and wrap the outcome in an envelope.

    Parameters
    ----------
    store:
        Store instance owned by the caller; the dispatcher never closes it.
    config:
        Supplies the identity reported by ``initialize``.
    registry:
        Override the default eight-tool catalog.
    """

    def __init__(
        self,
        store: TrackerStore,
        config: TrackerConfig | None = None,
        registry: ToolRegistry | None = None,
    ) -> None:
        self.store = store
        self.config = config or TrackerConfig()
        self.registry = registry or ToolRegistry()

    async def handle(self, message: Any) -> dict[str, Any] | None:
        """Process one decoded message and return its response envelope.

        Returns ``None`` for notifications. Never raises for application
        errors; they come back as error envelopes.
        """
        if not isinstance(message, dict):
            logger.warning("Rejecting non-object message of type %s", type(message).__name__)
            return error_response(None, "Invalid request: message must be a JSON object")

        request = JsonRpcRequest.from_message(message)
        if request.is_notification:
            logger.debug("Ignoring notification %s", request.method)
            return None

        logger.debug("-> id=%s method=%s", request.id, request.method)
        try:
            result = await self._route(request)
        except TrackerError as exc:
            logger.info("Request id=%s failed: %s", request.id, exc.message)
            return error_response(request.id, exc.message)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unhandled error while processing id=%s", request.id)
            return error_response(request.id, str(exc) or type(exc).__name__)
        return success_response(request.id, result)

    async def _route(self, request: JsonRpcRequest) -> dict[str, Any]:
        if request.method == "initialize":
            return self.initialize_result()
        if request.method == "tools/list":
            return {"tools": self.registry.catalog()}
        if request.method == "tools/call":
            return await self.call_tool(request.params)
        raise UnknownMethodError(request.method)

    def initialize_result(self) -> dict[str, Any]:
        return {
            "protocolVersion": self.config.protocol_version,
            "capabilities": {"tools": {}},
            "serverInfo": {
                "name": self.config.server_name,
                "version": self.config.server_version,
            },
        }

    async def call_tool(self, params: dict[str, Any]) -> dict[str, Any]:
        """Run the tool named in *params* and wrap its result as text content."""
        tool = self.registry.get(params.get("name"))
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidArgumentError("arguments", "arguments must be an object")

        result = await tool.handler(self.store, arguments)
        logger.debug("Tool %s succeeded", tool.name)
        return {"content": [{"type": "text", "text": json.dumps(result, indent=2)}]}


__all__ = ["Dispatcher"]
