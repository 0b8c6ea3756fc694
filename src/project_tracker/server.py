"""Stdio server: lifecycle, read loop and signal handling.

Lifecycle
---------
1. **Construct**: stores config, builds (or accepts) the store and the
   dispatcher. No I/O.
2. **initialize()**: creates tables.
3. **serve()**: one message at a time, each response written and flushed
   before the next message is dispatched, so responses keep input order.
4. **shutdown()**: disposes the store's engine.

``async with TrackerServer(config) as server`` runs 2 and 4 around the body,
including when the body is cancelled by SIGINT/SIGTERM.
"""
from __future__ import annotations

import asyncio
import logging
import signal
import sys
from typing import TYPE_CHECKING, Any, Protocol

from project_tracker.protocol.dispatcher import Dispatcher
from project_tracker.protocol.framing import LineDecoder, encode_message
from project_tracker.storage.database import SQLAlchemyTrackerStore

if TYPE_CHECKING:
    from project_tracker.core.config import TrackerConfig
    from project_tracker.storage.tracker_store import TrackerStore

logger = logging.getLogger(__name__)


class BinaryWriter(Protocol):
    def write(self, data: bytes, /) -> Any: ...

    def flush(self) -> Any: ...


class TrackerServer:
    """Owns the store and the dispatcher for one stdio session.

    Parameters
    ----------
    config:
        Validated :class:`~project_tracker.core.config.TrackerConfig`.
    store:
        Override the default :class:`~project_tracker.storage.database.SQLAlchemyTrackerStore`
        built from ``config.database_url``.
    """

    def __init__(self, config: TrackerConfig, *, store: TrackerStore | None = None) -> None:
        self.config = config
        self.store: TrackerStore = store or SQLAlchemyTrackerStore(
            config.database_url,
            echo=config.database_echo,
            enable_wal=config.enable_wal,
        )
        self.dispatcher = Dispatcher(self.store, config)
        self._initialized = False

    async def initialize(self) -> None:
        """Prepare the store. Safe to call multiple times."""
        if self._initialized:
            return
        await self.store.initialize()
        self._initialized = True
        logger.info("%s %s ready", self.config.server_name, self.config.server_version)

    async def shutdown(self) -> None:
        """Close the store connection."""
        if not self._initialized:
            return
        await self.store.close()
        self._initialized = False
        logger.info("Server shutdown complete")

    async def __aenter__(self) -> TrackerServer:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()

    async def serve(self, reader: asyncio.StreamReader, writer: BinaryWriter) -> None:
        """Answer every message read from *reader* until EOF."""
        decoder = LineDecoder()
        while True:
            chunk = await reader.read(self.config.read_chunk_size)
            if not chunk:
                break
            for message in decoder.feed(chunk):
                response = await self.dispatcher.handle(message)
                if response is None:
                    continue
                writer.write(encode_message(response))
                writer.flush()
        if decoder.pending.strip():
            logger.warning("Discarding unterminated input at EOF: %.200s", decoder.pending)
        logger.info("Input closed")


async def _stdin_reader() -> asyncio.StreamReader:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    return reader


async def run_stdio(config: TrackerConfig) -> None:
    """Serve stdin/stdout until EOF, SIGINT or SIGTERM; always close the store."""
    loop = asyncio.get_running_loop()
    serving = asyncio.current_task()

    def _interrupt(signame: str) -> None:
        logger.info("Received %s, shutting down", signame)
        if serving is not None:
            serving.cancel()

    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, _interrupt, signum.name)

    try:
        async with TrackerServer(config) as server:
            logger.info("MCP project tracker server started")
            try:
                await server.serve(await _stdin_reader(), sys.stdout.buffer)
            except asyncio.CancelledError:
                logger.info("Serving cancelled")
    finally:
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(signum)


__all__ = ["TrackerServer", "run_stdio"]
