"""
Client package for WireView.

This package provides the MCP session client and the session state it owns.
"""

from wireview.client.session import Session
from wireview.client.client import (
    ClientError,
    NotConnectedError,
    SendError,
    SessionClient,
)

__all__ = [
    "Session",
    "SessionClient",
    "ClientError",
    "NotConnectedError",
    "SendError",
]
