"""Client side of the stdio protocol: spawn a server and correlate responses.

Every outgoing request gets the next integer id (starting at 1) and a pending
future. Responses are matched back by id; unmatched ids are dropped. A
request that outlives ``timeout`` is removed from the pending table and fails
with :class:`~project_tracker.core.exceptions.RequestTimeoutError`; a late
response for it is then dropped like any other unmatched id. When the
server process exits, every pending request fails with
:class:`~project_tracker.core.exceptions.ServerExitedError`.

Example
-------
.. code-block:: python

    async with TrackerClient.for_server(TrackerConfig()) as client:
        created = await client.call_tool("create_project", {"name": "Smoke Project"})
        print(created["project_id"])
"""
from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import signal
import sys
from collections.abc import Mapping, Sequence
from typing import Any

from project_tracker.core.config import TrackerConfig
from project_tracker.core.exceptions import (
    ClientError,
    RequestTimeoutError,
    ServerExitedError,
    ToolCallError,
)
from project_tracker.protocol.envelope import build_request
from project_tracker.protocol.framing import LineDecoder, encode_message

logger = logging.getLogger(__name__)

_READ_CHUNK = 65536
_STOP_GRACE_SECONDS = 5.0


class TrackerClient:
    """Drive a server subprocess over newline-delimited JSON-RPC.

    Parameters
    ----------
    command:
        argv used to spawn the server.
    timeout:
        Seconds to wait for each response.
    env:
        Environment for the child process; inherits the current one when None.
    """

    def __init__(
        self,
        command: Sequence[str],
        *,
        timeout: float = 8.0,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.command = list(command)
        self.timeout = timeout
        self.env = dict(env) if env is not None else None

        self._next_id = 1
        self._pending: dict[int, asyncio.Future[dict[str, Any]]] = {}
        self._decoder = LineDecoder()
        self._process: asyncio.subprocess.Process | None = None
        self._exit_code: int | None = None
        self._exited = False
        self._tasks: list[asyncio.Task[None]] = []

    @classmethod
    def for_server(cls, config: TrackerConfig | None = None, **kwargs: Any) -> TrackerClient:
        """Client that spawns ``python -m project_tracker`` against *config*'s database."""
        config = config or TrackerConfig()
        env = dict(os.environ)
        env["TRACKER_DATABASE_URL"] = config.database_url
        env["TRACKER_LOG_LEVEL"] = config.log_level
        kwargs.setdefault("timeout", config.request_timeout)
        kwargs.setdefault("env", env)
        return cls([sys.executable, "-m", "project_tracker"], **kwargs)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def returncode(self) -> int | None:
        return self._process.returncode if self._process else None

    async def start(self) -> None:
        """Spawn the server and begin pumping its stdout and stderr."""
        self._process = await asyncio.create_subprocess_exec(
            *self.command,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=self.env,
        )
        logger.info("Started server pid=%s", self._process.pid)
        self._tasks = [
            asyncio.create_task(self._pump_stdout()),
            asyncio.create_task(self._pump_stderr()),
        ]

    async def stop(self) -> None:
        """Interrupt the server and wait for it to exit."""
        process = self._process
        if process is None:
            return
        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.send_signal(signal.SIGINT)
            try:
                await asyncio.wait_for(process.wait(), _STOP_GRACE_SECONDS)
            except TimeoutError:
                logger.warning("Server pid=%s ignored SIGINT, killing", process.pid)
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        logger.info("Server pid=%s exited code=%s", process.pid, process.returncode)

    async def __aenter__(self) -> TrackerClient:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def call(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Send one request and wait for the matching response envelope.

        Raises:
            RequestTimeoutError: If no response arrives within ``timeout``
            ServerExitedError: If the server exits before responding
        """
        process = self._process
        if process is None or process.stdin is None:
            raise ClientError("Client is not started")

        request_id = self._next_id
        self._next_id += 1
        if self._exited:
            raise ServerExitedError(request_id, self._exit_code)

        future: asyncio.Future[dict[str, Any]] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            process.stdin.write(encode_message(build_request(request_id, method, params)))
            await process.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as exc:
            self._pending.pop(request_id, None)
            raise ServerExitedError(request_id, process.returncode) from exc

        try:
            return await asyncio.wait_for(future, self.timeout)
        except TimeoutError:
            raise RequestTimeoutError(request_id, method, self.timeout) from None
        finally:
            # no-op once resolved; clears timed-out and cancelled requests
            self._pending.pop(request_id, None)

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> Any:
        """Call a tool and return its decoded JSON result.

        Raises:
            ToolCallError: If the server answers with an error envelope or
                with no text content
        """
        response = await self.call("tools/call", {"name": name, "arguments": arguments or {}})
        error = response.get("error")
        if error:
            raise ToolCallError(name, error.get("message", ""), error.get("code"))

        content = (response.get("result") or {}).get("content") or []
        if not content or not content[0].get("text"):
            raise ToolCallError(name, "empty content")
        return json.loads(content[0]["text"])

    def _resolve(self, message: Any) -> None:
        request_id = message.get("id") if isinstance(message, dict) else None
        future = self._pending.pop(request_id, None) if isinstance(request_id, int) else None
        if future is None:
            logger.warning("Dropping unmatched message id=%r", request_id)
            return
        if not future.done():
            future.set_result(message)

    def _fail_pending(self, returncode: int | None) -> None:
        for request_id, future in self._pending.items():
            if not future.done():
                future.set_exception(ServerExitedError(request_id, returncode))
        self._pending.clear()

    async def _pump_stdout(self) -> None:
        assert self._process is not None and self._process.stdout is not None
        stdout = self._process.stdout
        while True:
            chunk = await stdout.read(_READ_CHUNK)
            if not chunk:
                break
            for message in self._decoder.feed(chunk):
                self._resolve(message)
        self._exit_code = await self._process.wait()
        self._exited = True
        if self._pending:
            logger.warning(
                "Server exited code=%s with %d pending request(s)",
                self._exit_code, len(self._pending),
            )
        self._fail_pending(self._exit_code)

    async def _pump_stderr(self) -> None:
        assert self._process is not None and self._process.stderr is not None
        stderr = self._process.stderr
        while True:
            line = await stderr.readline()
            if not line:
                break
            logger.info("[server] %s", line.decode("utf-8", errors="replace").rstrip())


__all__ = ["TrackerClient"]
