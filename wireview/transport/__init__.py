"""
Transport layer for WireView.

This package provides the HTTP wire constants, the transport exceptions and
the incremental SSE decoder used to read streamed JSON-RPC responses.
"""

from wireview.transport.base import (
    ACCEPT_HEADER_VALUE,
    CONTENT_TYPE_EVENT_STREAM,
    CONTENT_TYPE_JSON,
    PROTOCOL_VERSION_HEADER,
    SESSION_ID_HEADER,
    EmptyStreamError,
    StreamParseError,
    TransportError,
    is_event_stream,
)

from wireview.transport.sse import (
    DATA_PREFIX,
    DONE_SENTINEL,
    SSEStreamDecoder,
    decode_sse_stream,
)

__all__ = [
    # Wire constants
    "ACCEPT_HEADER_VALUE",
    "CONTENT_TYPE_EVENT_STREAM",
    "CONTENT_TYPE_JSON",
    "PROTOCOL_VERSION_HEADER",
    "SESSION_ID_HEADER",
    "is_event_stream",

    # Errors
    "EmptyStreamError",
    "StreamParseError",
    "TransportError",

    # SSE decoding
    "DATA_PREFIX",
    "DONE_SENTINEL",
    "SSEStreamDecoder",
    "decode_sse_stream",
]
