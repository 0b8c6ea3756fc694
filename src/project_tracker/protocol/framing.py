"""Newline-delimited JSON framing over a byte stream.

Read side: bytes are decoded incrementally as UTF-8, split on ``\\n``, trimmed
and parsed one JSON document per line. A line that is not valid JSON is
logged and dropped; the stream keeps going.

Write side: one compact JSON document followed by a single ``\\n``.
"""
from __future__ import annotations

import codecs
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


class LineDecoder:
    """Accumulating decoder turning raw chunks into parsed messages.

    Example
    -------
    .. code-block:: python

        decoder = LineDecoder()
        decoder.feed(b'{"id": 1, "met')        # -> []
        decoder.feed(b'hod": "initialize"}\\n')  # -> [{"id": 1, "method": "initialize"}]
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text received after the last newline, not yet parsed."""
        return self._buffer

    def feed(self, chunk: bytes | str) -> list[Any]:
        """Append *chunk* and return every complete message it finished."""
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        self._buffer += chunk

        messages: list[Any] = []
        while True:
            line, sep, rest = self._buffer.partition("\n")
            if not sep:
                break
            self._buffer = rest
            line = line.strip()
            if not line:
                continue
            try:
                messages.append(json.loads(line))
            except json.JSONDecodeError as exc:
                logger.warning("Dropping malformed line (%s): %.200s", exc.msg, line)
        return messages


def encode_message(message: Any) -> bytes:
    """Serialise *message* as one newline-terminated JSON line."""
    return (json.dumps(message, ensure_ascii=False, separators=(",", ":")) + "\n").encode("utf-8")


__all__ = ["LineDecoder", "encode_message"]
