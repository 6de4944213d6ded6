"""
Validation utilities for JSON-RPC messages.

This module turns raw JSON text and decoded objects into protocol models,
applying only the basic shape checks a wire inspector needs: a message must
be a JSON object, and an ``error`` member must look like a JSON-RPC error.
"""

import json
import uuid
from typing import Any, Dict, Union

from pydantic import ValidationError

from wireview.protocol.base import JSONRPC_VERSION, ErrorCode, Response


class MCPValidationError(Exception):
    """Exception raised for JSON-RPC message validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_REQUEST):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class MalformedInputError(MCPValidationError):
    """Exception raised when caller-supplied JSON text cannot be parsed."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.PARSE_ERROR)


def generate_request_id() -> str:
    """Generate a fresh, unique request ID."""
    return str(uuid.uuid4())


def parse_response_object(data: Any) -> Response:
    """
    Build a Response from an already-decoded JSON value.

    Args:
        data: Decoded JSON value

    Returns:
        Parsed Response

    Raises:
        MCPValidationError: If the value is not a JSON-RPC shaped object
    """
    if not isinstance(data, dict):
        raise MCPValidationError(
            f"JSON-RPC message must be an object, got {type(data).__name__}"
        )

    try:
        return Response.model_validate(data)
    except ValidationError as e:
        raise MCPValidationError(f"Invalid response: {str(e)}")


def parse_response(text: Union[str, bytes]) -> Response:
    """
    Parse a JSON-RPC response from JSON text.

    Args:
        text: JSON document

    Returns:
        Parsed Response

    Raises:
        MCPValidationError: If the text is not valid JSON or not a response object
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MCPValidationError(f"Invalid JSON: {str(e)}", ErrorCode.PARSE_ERROR)

    return parse_response_object(data)


def parse_custom_request(text: str) -> Dict[str, Any]:
    """
    Parse a hand-written JSON-RPC request and fill in missing envelope fields.

    The ``jsonrpc`` tag is added when absent. An ID is generated when the
    ``id`` member is absent, null or an empty string; ``0`` is kept. Any
    other member the caller typed is passed through untouched.

    Args:
        text: Raw JSON text typed by the caller

    Returns:
        Request object as a dictionary, ready to send

    Raises:
        MalformedInputError: If the text is not valid JSON or not an object
    """
    try:
        request = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"Invalid JSON: {str(e)}")

    if not isinstance(request, dict):
        raise MalformedInputError("Invalid JSON: request must be a JSON object")

    if not request.get("jsonrpc"):
        request["jsonrpc"] = JSONRPC_VERSION

    if request.get("id") is None or request.get("id") == "":
        request["id"] = generate_request_id()

    return request
