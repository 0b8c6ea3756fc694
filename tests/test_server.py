"""Tests for the stdio server loop, driven with in-memory streams."""
from __future__ import annotations

import asyncio
import io
import json
import logging

import pytest

from project_tracker.core.config import TrackerConfig
from project_tracker.server import TrackerServer


def feed(*lines: bytes) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    for line in lines:
        reader.feed_data(line)
    reader.feed_eof()
    return reader


def responses(out: io.BytesIO) -> list[dict]:
    return [json.loads(line) for line in out.getvalue().splitlines()]


def call(request_id: int, name: str, arguments: dict) -> bytes:
    message = {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "tools/call",
        "params": {"name": name, "arguments": arguments},
    }
    return (json.dumps(message) + "\n").encode()


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_context_manager_initializes_and_closes(
        self, memory_config: TrackerConfig
    ) -> None:
        server = TrackerServer(memory_config)
        async with server:
            assert server._initialized
            await server.initialize()
        assert not server._initialized
        await server.shutdown()


class TestServe:

    @pytest.mark.asyncio
    async def test_responses_in_input_order(self, memory_config: TrackerConfig) -> None:
        out = io.BytesIO()
        reader = feed(
            b'{"jsonrpc":"2.0","id":1,"method":"initialize","params":{}}\n',
            call(2, "create_project", {"name": "Ordered"}),
            call(3, "add_task", {"project_id": 1, "description": "first"}),
            call(4, "get_tasks", {"project_id": 1}),
        )
        async with TrackerServer(memory_config) as server:
            await server.serve(reader, out)

        replies = responses(out)
        assert [r["id"] for r in replies] == [1, 2, 3, 4]
        tasks = json.loads(replies[3]["result"]["content"][0]["text"])["tasks"]
        assert [t["description"] for t in tasks] == ["first"]

    @pytest.mark.asyncio
    async def test_invalid_json_swallowed(self, memory_config: TrackerConfig, caplog) -> None:
        out = io.BytesIO()
        reader = feed(b"this is not json\n", b'{"jsonrpc":"2.0","id":9,"method":"tools/list"}\n')
        with caplog.at_level(logging.WARNING):
            async with TrackerServer(memory_config) as server:
                await server.serve(reader, out)

        replies = responses(out)
        assert [r["id"] for r in replies] == [9]
        assert "Dropping malformed line" in caplog.text

    @pytest.mark.asyncio
    async def test_message_split_across_reads(self, memory_config: TrackerConfig) -> None:
        out = io.BytesIO()
        reader = feed(b'{"jsonrpc":"2.0","id":5,', b'"method":"tools/list"}', b"\n")
        async with TrackerServer(memory_config) as server:
            await server.serve(reader, out)
        assert [r["id"] for r in responses(out)] == [5]

    @pytest.mark.asyncio
    async def test_notification_produces_no_output(self, memory_config: TrackerConfig) -> None:
        out = io.BytesIO()
        reader = feed(b'{"jsonrpc":"2.0","method":"notifications/initialized"}\n')
        async with TrackerServer(memory_config) as server:
            await server.serve(reader, out)
        assert out.getvalue() == b""

    @pytest.mark.asyncio
    async def test_unterminated_input_discarded(
        self, memory_config: TrackerConfig, caplog
    ) -> None:
        out = io.BytesIO()
        reader = feed(b'{"jsonrpc":"2.0","id":1,"method":"tools/list"}')
        with caplog.at_level(logging.WARNING, logger="project_tracker.server"):
            async with TrackerServer(memory_config) as server:
                await server.serve(reader, out)
        assert out.getvalue() == b""
        assert "unterminated" in caplog.text

    @pytest.mark.asyncio
    async def test_error_keeps_connection_alive(self, memory_config: TrackerConfig) -> None:
        out = io.BytesIO()
        reader = feed(
            call(1, "delete_project", {"id": 42}),
            call(2, "create_project", {"name": "Still here"}),
        )
        async with TrackerServer(memory_config) as server:
            await server.serve(reader, out)

        first, second = responses(out)
        assert first["error"]["message"] == "Project with ID 42 not found"
        assert "result" in second
