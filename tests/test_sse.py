"""
Unit tests for the SSE stream decoder.

Tests line reassembly across chunk boundaries, the [DONE] sentinel,
tolerance of malformed events, end-of-stream handling and release of the
underlying chunk iterator.
"""

import logging
from typing import AsyncIterator, List

import pytest

from wireview.protocol import Response
from wireview.transport import (
    EmptyStreamError,
    SSEStreamDecoder,
    StreamParseError,
    decode_sse_stream,
)

MESSAGE = 'data: {"jsonrpc":"2.0","id":1,"result":{}}\n'


class ChunkSource:
    """Async iterator over fixed chunks that records whether it was closed."""

    def __init__(self, chunks: List[str]):
        self._chunks = list(chunks)
        self.closed = False

    def __aiter__(self) -> AsyncIterator[str]:
        return self

    async def __anext__(self) -> str:
        if not self._chunks:
            raise StopAsyncIteration
        return self._chunks.pop(0)

    async def aclose(self) -> None:
        self.closed = True


async def collect(chunks: List[str]) -> List[Response]:
    return [message async for message in decode_sse_stream(ChunkSource(chunks))]


def split_every(data: str, size: int) -> List[str]:
    return [data[i:i + size] for i in range(0, len(data), size)]


class TestDecoderFeed:
    """Tests for the synchronous feed/flush interface."""

    def test_single_line(self):
        """Test decoding one complete line."""
        decoder = SSEStreamDecoder()
        messages = decoder.feed(MESSAGE)
        assert [m.to_dict() for m in messages] == [{"jsonrpc": "2.0", "id": 1, "result": {}}]
        assert decoder.last is messages[0]
        assert decoder.count == 1

    def test_partial_line_is_held_back(self):
        """Test that an incomplete line waits for the next chunk."""
        decoder = SSEStreamDecoder()
        assert decoder.feed(MESSAGE[:20]) == []
        messages = decoder.feed(MESSAGE[20:])
        assert len(messages) == 1
        assert messages[0].id == 1

    def test_non_data_lines_are_ignored(self):
        """Test that event, id, comment and blank lines are skipped."""
        decoder = SSEStreamDecoder()
        messages = decoder.feed("event: message\nid: 5\n: keepalive\n\n" + MESSAGE + "\n")
        assert len(messages) == 1

    def test_data_without_space_is_ignored(self):
        """Test that only the exact 'data: ' prefix is recognized."""
        decoder = SSEStreamDecoder()
        assert decoder.feed('data:{"jsonrpc":"2.0","id":1,"result":{}}\n') == []

    def test_crlf_line_endings(self):
        """Test that a trailing carriage return is trimmed from the payload."""
        decoder = SSEStreamDecoder()
        messages = decoder.feed(MESSAGE.replace("\n", "\r\n"))
        assert len(messages) == 1

    def test_flush_processes_unterminated_last_line(self):
        """Test that the final buffered line is processed at end of stream."""
        decoder = SSEStreamDecoder()
        assert decoder.feed(MESSAGE.rstrip("\n")) == []
        messages = decoder.flush()
        assert len(messages) == 1
        assert decoder.flush() == []

    def test_flush_ignores_done_and_blank(self):
        """Test that leftover [DONE] or whitespace produces nothing."""
        decoder = SSEStreamDecoder()
        decoder.feed("data: [DONE]")
        assert decoder.flush() == []

        decoder = SSEStreamDecoder()
        decoder.feed("   ")
        assert decoder.flush() == []

    def test_malformed_line_is_logged_and_skipped(self, caplog):
        """Test that a bad event does not abort the stream."""
        decoder = SSEStreamDecoder()
        with caplog.at_level(logging.ERROR, logger="wireview.transport.sse"):
            messages = decoder.feed("data: {broken\n" + MESSAGE)

        assert len(messages) == 1
        assert "Failed to parse SSE data" in caplog.text

    def test_non_object_payload_is_skipped(self):
        """Test that JSON which is not an object is treated as a bad event."""
        decoder = SSEStreamDecoder()
        assert decoder.feed("data: 42\n") == []
        assert decoder.last is None

    def test_stream_parse_error_message(self):
        """Test the per-line parse error."""
        error = StreamParseError("{broken", "Invalid JSON")
        assert error.data == "{broken"
        assert "Failed to parse SSE data" in str(error)


@pytest.mark.asyncio
class TestDecodeStream:
    """Tests for the async stream interface."""

    @pytest.mark.parametrize("size", [1, 7, 16, len(MESSAGE), 1000])
    async def test_chunking_does_not_matter(self, size):
        """Test that any chunk boundaries yield exactly one message."""
        messages = await collect(split_every(MESSAGE, size))
        assert len(messages) == 1
        assert messages[0].to_dict() == {"jsonrpc": "2.0", "id": 1, "result": {}}

    async def test_events_in_arrival_order(self):
        """Test that messages come out in stream order."""
        stream = (
            'data: {"jsonrpc":"2.0","id":1,"result":{"n":1}}\n\n'
            'data: {"jsonrpc":"2.0","id":1,"result":{"n":2}}\n\n'
            "data: [DONE]\n"
        )
        messages = await collect(split_every(stream, 13))
        assert [m.result["n"] for m in messages] == [1, 2]

    async def test_malformed_then_valid(self):
        """Test that one malformed line followed by a good one yields one message."""
        messages = await collect(["data: {not json}\n", MESSAGE])
        assert len(messages) == 1

    async def test_only_done_raises_empty_stream(self):
        """Test that a stream with only [DONE] fails."""
        with pytest.raises(EmptyStreamError):
            await collect(["data: [DONE]\n"])

    async def test_empty_body_raises_empty_stream(self):
        """Test that a stream with no data at all fails."""
        with pytest.raises(EmptyStreamError):
            await collect([])

    async def test_only_malformed_raises_empty_stream(self):
        """Test that a stream of only bad events fails."""
        with pytest.raises(EmptyStreamError):
            await collect(["data: nope\n", "data: {\n"])

    async def test_final_message_may_be_an_error(self):
        """Test that a trailing error message is still the final message."""
        messages = await collect(
            ['data: {"jsonrpc":"2.0","id":1,"error":{"code":-32000,"message":"boom"}}\n']
        )
        assert messages[-1].has_error
        assert messages[-1].error.message == "boom"

    async def test_source_closed_on_success(self):
        """Test that the chunk source is released after a full read."""
        source = ChunkSource([MESSAGE])
        async for _ in SSEStreamDecoder().decode(source):
            pass
        assert source.closed is True

    async def test_source_closed_on_empty_stream(self):
        """Test that the chunk source is released when the stream is empty."""
        source = ChunkSource(["data: [DONE]\n"])
        with pytest.raises(EmptyStreamError):
            async for _ in SSEStreamDecoder().decode(source):
                pass
        assert source.closed is True

    async def test_source_closed_on_error(self):
        """Test that the chunk source is released when reading fails."""

        class FailingSource(ChunkSource):
            async def __anext__(self) -> str:
                raise RuntimeError("connection reset")

        source = FailingSource([])
        with pytest.raises(RuntimeError):
            async for _ in SSEStreamDecoder().decode(source):
                pass
        assert source.closed is True
