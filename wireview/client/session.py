"""
Client-side session state.

A ``Session`` holds everything negotiated with one MCP server: the target
URL, the custom headers, and the values captured from the initialize
handshake. It is owned by exactly one ``SessionClient``; several clients
with their own sessions can coexist in one process.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field

from wireview.protocol import RequestId


class Session(BaseModel):
    """
    Mutable state of one logical MCP session.

    Connected means ``server_url`` is set; initialized means
    ``protocol_version`` is set. A session id is only ever present on an
    initialized session.
    """

    server_url: Optional[str] = Field(None, description="Target MCP endpoint")
    protocol_version: Optional[str] = Field(
        None, description="Protocol revision negotiated by initialize"
    )
    session_id: Optional[str] = Field(
        None, description="Session ID issued by the server on initialize"
    )
    initialize_request_id: Optional[RequestId] = Field(
        None, description="ID of the initialize request, reused by later requests"
    )
    custom_headers: Dict[str, str] = Field(
        default_factory=dict, description="Headers added to every outgoing request"
    )

    @property
    def is_connected(self) -> bool:
        """Check if a server URL is configured."""
        return bool(self.server_url)

    @property
    def is_initialized(self) -> bool:
        """Check if the initialize handshake has completed."""
        return self.protocol_version is not None

    def clear_initialization(self) -> None:
        """Forget everything learned from the initialize handshake."""
        self.initialize_request_id = None
        self.protocol_version = None
        self.session_id = None

    def clear(self) -> None:
        """Forget the server URL along with the handshake state."""
        self.server_url = None
        self.clear_initialization()
