"""
Base JSON-RPC 2.0 protocol models.

This module defines the message shapes exchanged with an MCP server,
implementing the JSON-RPC 2.0 envelope with Pydantic models. Outgoing
models are strict; the incoming ``Response`` model is deliberately
permissive because it has to carry whatever a server streams back.
"""

from enum import IntEnum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

JSONRPC_VERSION = "2.0"

RequestId = Union[str, int]
Params = Union[Dict[str, Any], List[Any]]


class ErrorCode(IntEnum):
    """Standard JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class Error(BaseModel):
    """JSON-RPC 2.0 error object."""

    model_config = ConfigDict(extra="allow")

    code: int = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    data: Optional[Any] = Field(None, description="Additional error data")

    def __str__(self) -> str:
        """String representation of the error."""
        if self.data:
            return f"code: {self.code}, message: {self.message}, data: {self.data}"
        return f"code: {self.code}, message: {self.message}"


def _has_params(params: Optional[Params]) -> bool:
    return params is not None and len(params) > 0


class Request(BaseModel):
    """JSON-RPC 2.0 request."""

    jsonrpc: Literal["2.0"] = Field(JSONRPC_VERSION, description="JSON-RPC version")
    id: RequestId = Field(..., description="Request ID")
    method: str = Field(..., description="Method name")
    params: Optional[Params] = Field(None, description="Method parameters")

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the request to its wire form.

        Empty parameters are left out entirely rather than sent as ``{}``.

        Returns:
            Dictionary ready for JSON serialization
        """
        data = self.model_dump(mode="json")
        if not _has_params(self.params):
            data.pop("params")
        return data


class Notification(BaseModel):
    """JSON-RPC 2.0 notification (request without ID)."""

    jsonrpc: Literal["2.0"] = Field(JSONRPC_VERSION, description="JSON-RPC version")
    method: str = Field(..., description="Method name")
    params: Optional[Params] = Field(None, description="Method parameters")

    def to_dict(self) -> Dict[str, Any]:
        """Convert the notification to its wire form."""
        data = self.model_dump(mode="json")
        if not _has_params(self.params):
            data.pop("params")
        return data


class Response(BaseModel):
    """
    JSON-RPC 2.0 response as received from a server.

    Servers may put both ``result`` and ``error`` on a message, or stream
    notifications that carry neither, so no either/or rule is enforced
    here. ``error`` wins whenever success is checked.
    """

    model_config = ConfigDict(extra="allow")

    jsonrpc: str = Field(JSONRPC_VERSION, description="JSON-RPC version")
    id: Optional[RequestId] = Field(None, description="Request ID")
    result: Optional[Any] = Field(None, description="Result data")
    error: Optional[Error] = Field(None, description="Error information")

    @property
    def has_error(self) -> bool:
        """Check if the response carries an error."""
        return self.error is not None

    @property
    def is_success(self) -> bool:
        """Check if the response is a success (no error present)."""
        return not self.has_error

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the response back to a plain dictionary.

        Only fields present in the original message are included, so the
        result compares equal to the body the server sent.

        Returns:
            Dictionary of the received fields
        """
        data = self.model_dump(mode="json", exclude_unset=True)
        for key, value in (self.model_extra or {}).items():
            data.setdefault(key, value)
        return data
