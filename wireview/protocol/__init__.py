"""
WireView Protocol Package

This package provides the JSON-RPC 2.0 message types, the MCP method and
payload definitions, and validation utilities used by the client.
"""

from wireview.protocol.base import (
    JSONRPC_VERSION,
    Error,
    ErrorCode,
    Notification,
    Params,
    Request,
    RequestId,
    Response,
)

from wireview.protocol.methods import (
    CLIENT_NAME,
    LATEST_PROTOCOL_VERSION,
    MCPMethod,

    # Initialize
    ClientInfo,
    ClientCapabilities,
    InitializeParams,
    InitializeResult,
    ServerInfo,

    # Tools
    Tool,
    ListToolsResult,
    CallToolParams,
    CallToolResult,

    # Prompts
    Prompt,
    PromptArgument,
    ListPromptsResult,

    # Resources
    Resource,
    ListResourcesResult,
)

from wireview.protocol.validation import (
    MCPValidationError,
    MalformedInputError,
    generate_request_id,
    parse_custom_request,
    parse_response,
    parse_response_object,
)

__all__ = [
    # Base types
    "JSONRPC_VERSION",
    "Error",
    "ErrorCode",
    "Notification",
    "Params",
    "Request",
    "RequestId",
    "Response",

    # Methods
    "CLIENT_NAME",
    "LATEST_PROTOCOL_VERSION",
    "MCPMethod",
    "ClientInfo",
    "ClientCapabilities",
    "InitializeParams",
    "InitializeResult",
    "ServerInfo",
    "Tool",
    "ListToolsResult",
    "CallToolParams",
    "CallToolResult",
    "Prompt",
    "PromptArgument",
    "ListPromptsResult",
    "Resource",
    "ListResourcesResult",

    # Validation utilities
    "MCPValidationError",
    "MalformedInputError",
    "generate_request_id",
    "parse_custom_request",
    "parse_response",
    "parse_response_object",
]
