"""
Transport-level definitions for talking to MCP servers over HTTP.

This module holds the wire constants (content types and MCP header names)
and the exceptions raised while moving bytes to and from a server.
"""

from typing import Optional

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_EVENT_STREAM = "text/event-stream"
ACCEPT_HEADER_VALUE = f"{CONTENT_TYPE_JSON}, {CONTENT_TYPE_EVENT_STREAM}"

PROTOCOL_VERSION_HEADER = "MCP-Protocol-Version"
SESSION_ID_HEADER = "Mcp-Session-Id"


def is_event_stream(content_type: Optional[str]) -> bool:
    """Check whether a Content-Type header value announces an SSE body."""
    return bool(content_type) and CONTENT_TYPE_EVENT_STREAM in content_type


class TransportError(Exception):
    """
    Exception raised when the server answers with a non-success HTTP status.

    The response body is read on a best-effort basis; when it could not be
    read ``body`` is the empty string.
    """

    def __init__(
        self,
        status_code: int,
        reason_phrase: str = "",
        body: str = "",
    ) -> None:
        """
        Initialize a transport error.

        Args:
            status_code: HTTP status code
            reason_phrase: HTTP status text
            body: Response body text, if it could be read
        """
        self.status_code = status_code
        self.reason_phrase = reason_phrase
        self.body = body

        message = f"HTTP error {status_code} {reason_phrase}".rstrip()
        if body:
            message += f"\nResponse body: {body}"
        self.message = message
        super().__init__(message)


class StreamParseError(Exception):
    """Exception raised when a single SSE data line is not a usable message."""

    def __init__(self, data: str, reason: str) -> None:
        self.data = data
        self.reason = reason
        super().__init__(f"Failed to parse SSE data: {data!r} ({reason})")


class EmptyStreamError(Exception):
    """Exception raised when an SSE stream ends without a single message."""

    def __init__(self, message: str = "No valid response received from SSE stream") -> None:
        self.message = message
        super().__init__(message)
