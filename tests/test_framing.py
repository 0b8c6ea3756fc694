"""Tests for newline-delimited JSON framing."""
from __future__ import annotations

import json
import logging

from project_tracker.protocol.framing import LineDecoder, encode_message


class TestLineDecoder:

    def test_single_line(self) -> None:
        assert LineDecoder().feed(b'{"id": 1}\n') == [{"id": 1}]

    def test_message_split_across_chunks(self) -> None:
        decoder = LineDecoder()
        assert decoder.feed(b'{"id": 1, "met') == []
        assert decoder.pending == '{"id": 1, "met'
        assert decoder.feed(b'hod": "initialize"}\n') == [{"id": 1, "method": "initialize"}]
        assert decoder.pending == ""

    def test_several_messages_in_one_chunk(self) -> None:
        messages = LineDecoder().feed(b'{"id": 1}\n{"id": 2}\n{"id": 3')
        assert messages == [{"id": 1}, {"id": 2}]

    def test_utf8_sequence_split_across_chunks(self) -> None:
        raw = encode_message({"name": "Café ☕"})
        cut = raw.index("☕".encode()) + 1
        decoder = LineDecoder()
        assert decoder.feed(raw[:cut]) == []
        assert decoder.feed(raw[cut:]) == [{"name": "Café ☕"}]

    def test_blank_lines_and_whitespace_skipped(self) -> None:
        assert LineDecoder().feed(b'\n   \n  {"id": 4}  \r\n') == [{"id": 4}]

    def test_malformed_line_dropped(self, caplog) -> None:
        decoder = LineDecoder()
        with caplog.at_level(logging.WARNING, logger="project_tracker.protocol.framing"):
            messages = decoder.feed(b'{not json}\n{"id": 5}\n')
        assert messages == [{"id": 5}]
        assert "Dropping malformed line" in caplog.text

    def test_accepts_text(self) -> None:
        assert LineDecoder().feed('[1, 2]\n') == [[1, 2]]


class TestEncodeMessage:

    def test_single_newline_terminated_line(self) -> None:
        raw = encode_message({"jsonrpc": "2.0", "id": 1, "result": {"a": "b\nc"}})
        assert raw.endswith(b"\n")
        assert raw.count(b"\n") == 1
        assert json.loads(raw) == {"jsonrpc": "2.0", "id": 1, "result": {"a": "b\nc"}}

    def test_non_ascii_kept_as_utf8(self) -> None:
        assert "Café".encode() in encode_message({"name": "Café"})
