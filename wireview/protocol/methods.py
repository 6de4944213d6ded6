"""
MCP-specific method definitions and message types.

This module defines the method names and payload shapes of the Model Context
Protocol methods the client exercises. Field names follow the MCP wire
format (camelCase) through aliases; models accept either spelling.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

LATEST_PROTOCOL_VERSION = "2025-06-18"

CLIENT_NAME = "mcp-wireview"


class MCPMethod(str, Enum):
    """Standard MCP method names."""

    # Lifecycle
    INITIALIZE = "initialize"
    INITIALIZED = "notifications/initialized"

    # Tools
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"

    # Prompts
    PROMPTS_LIST = "prompts/list"

    # Resources
    RESOURCES_LIST = "resources/list"


class MCPModel(BaseModel):
    """Base for MCP payloads: camelCase aliases, unknown fields kept."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_params(self) -> Dict[str, Any]:
        """Dump the model as request parameters in wire format."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---- Initialize Method ----

class ClientInfo(MCPModel):
    """Client information sent during initialization."""

    name: str = Field(CLIENT_NAME, description="Name of the client implementation")
    version: str = Field(..., description="Version of the client implementation")


class ClientCapabilities(MCPModel):
    """Capabilities advertised by the client."""

    roots: Optional[Dict[str, Any]] = Field(default_factory=dict)
    sampling: Optional[Dict[str, Any]] = Field(default_factory=dict)
    elicitation: Optional[Dict[str, Any]] = Field(default_factory=dict)


class InitializeParams(MCPModel):
    """Parameters for the initialize method."""

    protocol_version: str = Field(
        LATEST_PROTOCOL_VERSION,
        alias="protocolVersion",
        description="Protocol revision the client wants to speak",
    )
    capabilities: ClientCapabilities = Field(default_factory=ClientCapabilities)
    client_info: ClientInfo = Field(..., alias="clientInfo")


class ServerInfo(MCPModel):
    """Server information returned during initialization."""

    name: str
    version: str


class InitializeResult(MCPModel):
    """Result of the initialize method."""

    protocol_version: str = Field(..., alias="protocolVersion")
    capabilities: Dict[str, Any] = Field(default_factory=dict)
    server_info: Optional[ServerInfo] = Field(None, alias="serverInfo")
    instructions: Optional[str] = None


# ---- Tools Methods ----

class Tool(MCPModel):
    """A tool advertised by the server."""

    name: str
    description: Optional[str] = None
    input_schema: Dict[str, Any] = Field(
        default_factory=lambda: {"type": "object"}, alias="inputSchema"
    )

    @property
    def parameter_names(self) -> List[str]:
        """Names of the properties in the tool's input schema."""
        return list((self.input_schema.get("properties") or {}).keys())


class ListToolsResult(MCPModel):
    """Result of the tools/list method."""

    tools: List[Tool] = Field(default_factory=list)
    next_cursor: Optional[str] = Field(None, alias="nextCursor")


class CallToolParams(MCPModel):
    """Parameters for the tools/call method."""

    name: str = Field(..., description="Name of the tool to call")
    arguments: Dict[str, Any] = Field(
        default_factory=dict, description="Arguments to pass to the tool"
    )

    def to_params(self) -> Dict[str, Any]:
        # An empty arguments object is still meaningful for tools/call
        return self.model_dump(mode="json", by_alias=True)


class CallToolResult(MCPModel):
    """Result of the tools/call method."""

    content: List[Dict[str, Any]] = Field(default_factory=list)
    is_error: Optional[bool] = Field(None, alias="isError")


# ---- Prompts Methods ----

class PromptArgument(MCPModel):
    """An argument accepted by a prompt template."""

    name: str
    description: Optional[str] = None
    required: Optional[bool] = None


class Prompt(MCPModel):
    """A prompt advertised by the server."""

    name: str
    description: Optional[str] = None
    arguments: Optional[List[PromptArgument]] = None


class ListPromptsResult(MCPModel):
    """Result of the prompts/list method."""

    prompts: List[Prompt] = Field(default_factory=list)
    next_cursor: Optional[str] = Field(None, alias="nextCursor")


# ---- Resources Methods ----

class Resource(MCPModel):
    """A resource advertised by the server."""

    uri: str
    name: str
    description: Optional[str] = None
    mime_type: Optional[str] = Field(None, alias="mimeType")


class ListResourcesResult(MCPModel):
    """Result of the resources/list method."""

    resources: List[Resource] = Field(default_factory=list)
    next_cursor: Optional[str] = Field(None, alias="nextCursor")
