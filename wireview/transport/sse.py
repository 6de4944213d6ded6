"""
Incremental Server-Sent Events decoder for JSON-RPC responses.

An MCP server that answers with ``text/event-stream`` sends one JSON-RPC
message per ``data: `` line. Network reads do not respect line boundaries,
so the decoder keeps the trailing partial line between reads and only
parses complete lines.
"""

import logging
from typing import AsyncIterator, List, Optional

from wireview.protocol import MCPValidationError, Response, parse_response
from wireview.transport.base import EmptyStreamError, StreamParseError

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"

class SSEStreamDecoder:
    """
    Turns a chunked SSE text stream into JSON-RPC responses.

    Use ``feed`` for each chunk and ``flush`` at end of stream, or hand an
    async iterator of chunks to ``decode``. A decoder instance holds the
    buffer for a single stream and is not meant to be reused.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._logger = logging.getLogger("wireview.transport.sse")
        self.last: Optional[Response] = None
        self.count = 0

    def feed(self, chunk: str) -> List[Response]:
        """
        Add a chunk to the buffer and parse every line it completes.

        Args:
            chunk: Decoded text read from the stream

        Returns:
            Responses parsed from the completed lines, in stream order
        """
        self._buffer += chunk

        lines = self._buffer.split("\n")
        # The last piece may be an incomplete line
        self._buffer = lines.pop()

        return [message for message in map(self._process_line, lines) if message is not None]

    def flush(self) -> List[Response]:
        """
        Process whatever remains in the buffer once the stream has ended.

        Returns:
            The final response, if the leftover text held one
        """
        remaining, self._buffer = self._buffer, ""

        if not remaining.strip():
            return []

        message = self._process_line(remaining)
        return [message] if message is not None else []

    async def decode(self, chunks: AsyncIterator[str]) -> AsyncIterator[Response]:
        """
        Decode a whole stream, yielding each response as soon as it completes.

        The chunk iterator is closed on every exit path.

        Args:
            chunks: Async iterator over the decoded response body

        Yields:
            Parsed responses in arrival order

        Raises:
            EmptyStreamError: If the stream ended without any parseable message
        """
        try:
            async for chunk in chunks:
                for message in self.feed(chunk):
                    yield message

            for message in self.flush():
                yield message
        finally:
            aclose = getattr(chunks, "aclose", None)
            if aclose is not None:
                await aclose()

        if self.last is None:
            raise EmptyStreamError()

    def _process_line(self, line: str) -> Optional[Response]:
        if not line.startswith(DATA_PREFIX):
            return None

        data = line[len(DATA_PREFIX):].strip()
        if data == DONE_SENTINEL:
            return None

        try:
            message = self._parse_data(data)
        except StreamParseError as e:
            # A bad event must not abort an otherwise good stream
            self._logger.error(str(e))
            return None

        self.last = message
        self.count += 1
        return message

    @staticmethod
    def _parse_data(data: str) -> Response:
        try:
            return parse_response(data)
        except MCPValidationError as e:
            raise StreamParseError(data, e.message) from e


async def decode_sse_stream(chunks: AsyncIterator[str]) -> AsyncIterator[Response]:
    """
    Decode an SSE body into JSON-RPC responses.

    Convenience wrapper creating a fresh ``SSEStreamDecoder`` for the stream.

    Args:
        chunks: Async iterator over the decoded response body

    Yields:
        Parsed responses in arrival order
    """
    async for message in SSEStreamDecoder().decode(chunks):
        yield message
