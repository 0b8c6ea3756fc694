"""Wire protocol: framing, envelopes, tool catalog, dispatcher, client."""

from project_tracker.protocol.client import TrackerClient
from project_tracker.protocol.dispatcher import Dispatcher
from project_tracker.protocol.envelope import (
    APPLICATION_ERROR,
    JsonRpcRequest,
    error_response,
    success_response,
)
from project_tracker.protocol.framing import LineDecoder, encode_message
from project_tracker.protocol.tools import TOOLS, ToolDefinition, ToolRegistry

__all__ = [
    "APPLICATION_ERROR",
    "TOOLS",
    "Dispatcher",
    "JsonRpcRequest",
    "LineDecoder",
    "ToolDefinition",
    "ToolRegistry",
    "TrackerClient",
    "encode_message",
    "error_response",
    "success_response",
]
