"""
Unit tests for the protocol models.

Tests JSON-RPC message construction and wire form, response parsing and
basic shape checks, custom request parsing, and the MCP payload models.
"""

import json

import pytest

from wireview.protocol import (
    # Base types
    Error,
    ErrorCode,
    Notification,
    Request,
    Response,

    # Method enum and models
    MCPMethod,
    ClientInfo,
    InitializeParams,
    InitializeResult,
    CallToolParams,
    ListToolsResult,
    ListPromptsResult,
    ListResourcesResult,

    # Validation utilities
    MCPValidationError,
    MalformedInputError,
    parse_custom_request,
    parse_response,
    parse_response_object,
)


class TestBaseProtocol:
    """Tests for the base JSON-RPC 2.0 message types."""

    def test_request_creation(self):
        """Test creating a valid Request object."""
        request = Request(id="test-1", method="test/method", params={"foo": "bar"})
        assert request.jsonrpc == "2.0"
        assert request.to_dict() == {
            "jsonrpc": "2.0",
            "id": "test-1",
            "method": "test/method",
            "params": {"foo": "bar"},
        }

    def test_request_validation(self):
        """Test validation of Request objects."""
        # Missing ID should raise error
        with pytest.raises(ValueError):
            Request(method="test/method")

        # Invalid jsonrpc version should raise error
        with pytest.raises(ValueError):
            Request(jsonrpc="1.0", id="test-1", method="test/method")

    def test_request_omits_empty_params(self):
        """Test that absent or empty params are left out of the wire form."""
        assert "params" not in Request(id=1, method="tools/list").to_dict()
        assert "params" not in Request(id=1, method="tools/list", params={}).to_dict()
        assert "params" not in Request(id=1, method="tools/list", params=[]).to_dict()

    def test_request_keeps_null_values_inside_params(self):
        """Test that null values nested in params survive serialization."""
        request = Request(id=1, method="tools/call", params={"name": "x", "arguments": {"a": None}})
        assert request.to_dict()["params"]["arguments"] == {"a": None}

    def test_notification_has_no_id(self):
        """Test that notifications serialize without an id."""
        notification = Notification(method=MCPMethod.INITIALIZED.value)
        assert notification.to_dict() == {
            "jsonrpc": "2.0",
            "method": "notifications/initialized",
        }

    def test_response_round_trip(self):
        """Test that a parsed response converts back to exactly what was received."""
        body = {"jsonrpc": "2.0", "id": 7, "result": {"tools": []}}
        assert Response.model_validate(body).to_dict() == body

        error_body = {"jsonrpc": "2.0", "id": 7, "error": {"code": -32601, "message": "nope"}}
        assert Response.model_validate(error_body).to_dict() == error_body

    def test_response_error_takes_precedence(self):
        """Test that a response carrying both result and error counts as an error."""
        response = Response.model_validate(
            {"jsonrpc": "2.0", "id": 1, "result": {}, "error": {"code": 1, "message": "bad"}}
        )
        assert response.has_error is True
        assert response.is_success is False

    def test_response_keeps_extra_fields(self):
        """Test that streamed notifications (method, params) are kept."""
        body = {"jsonrpc": "2.0", "method": "notifications/progress", "params": {"progress": 1}}
        response = Response.model_validate(body)
        assert response.id is None
        assert response.is_success is True
        assert response.to_dict() == body

    def test_error_str(self):
        """Test the string representation of errors."""
        assert str(Error(code=-32600, message="Invalid")) == "code: -32600, message: Invalid"
        assert "data: x" in str(Error(code=1, message="m", data="x"))


class TestValidation:
    """Tests for response parsing and custom request parsing."""

    def test_parse_response(self):
        """Test parsing a response from JSON text and bytes."""
        text = '{"jsonrpc": "2.0", "id": "a", "result": {"ok": true}}'
        assert parse_response(text).result == {"ok": True}
        assert parse_response(text.encode("utf-8")).id == "a"

    def test_parse_response_invalid_json(self):
        """Test that invalid JSON is reported as a parse error."""
        with pytest.raises(MCPValidationError) as exc_info:
            parse_response("{not json")
        assert exc_info.value.error_code == ErrorCode.PARSE_ERROR

    def test_parse_response_requires_object(self):
        """Test the basic shape check on non-object messages."""
        with pytest.raises(MCPValidationError):
            parse_response_object([1, 2, 3])
        with pytest.raises(MCPValidationError):
            parse_response("42")

    def test_parse_response_rejects_malformed_error(self):
        """Test that an error member must carry code and message."""
        with pytest.raises(MCPValidationError):
            parse_response_object({"jsonrpc": "2.0", "id": 1, "error": {"message": "no code"}})

    def test_parse_custom_request_fills_envelope(self):
        """Test that jsonrpc and id are added when missing."""
        request = parse_custom_request('{"method": "tools/list", "params": {}}')
        assert request["jsonrpc"] == "2.0"
        assert isinstance(request["id"], str) and request["id"]
        assert request["method"] == "tools/list"
        assert request["params"] == {}

    def test_parse_custom_request_keeps_given_values(self):
        """Test that existing jsonrpc, id and extra members are preserved."""
        request = parse_custom_request('{"jsonrpc": "2.0", "id": 0, "method": "m", "extra": 1}')
        assert request == {"jsonrpc": "2.0", "id": 0, "method": "m", "extra": 1}

    def test_parse_custom_request_replaces_empty_id(self):
        """Test that null and empty-string ids are treated as missing."""
        assert parse_custom_request('{"id": null, "method": "m"}')["id"]
        assert parse_custom_request('{"id": "", "method": "m"}')["id"]

    def test_parse_custom_request_malformed(self):
        """Test that malformed input raises MalformedInputError."""
        with pytest.raises(MalformedInputError) as exc_info:
            parse_custom_request("{method: tools/list}")
        assert exc_info.value.message.startswith("Invalid JSON")
        assert exc_info.value.error_code == ErrorCode.PARSE_ERROR

        with pytest.raises(MalformedInputError):
            parse_custom_request('["not", "an", "object"]')


class TestMCPMethods:
    """Tests for the MCP payload models."""

    def test_method_values(self):
        """Test the MCP method names."""
        assert MCPMethod.INITIALIZE == "initialize"
        assert MCPMethod.INITIALIZED == "notifications/initialized"
        assert MCPMethod.TOOLS_CALL == "tools/call"

    def test_initialize_params_wire_form(self):
        """Test that initialize params use MCP's camelCase names."""
        params = InitializeParams(client_info=ClientInfo(version="1.2.3")).to_params()
        assert params == {
            "protocolVersion": "2025-06-18",
            "capabilities": {"roots": {}, "sampling": {}, "elicitation": {}},
            "clientInfo": {"name": "mcp-wireview", "version": "1.2.3"},
        }
        # The params must be JSON serializable as-is
        json.dumps(params)

    def test_initialize_result_parsing(self):
        """Test parsing an initialize result with aliases."""
        result = InitializeResult.model_validate(
            {
                "protocolVersion": "2025-06-18",
                "capabilities": {"tools": {}},
                "serverInfo": {"name": "srv", "version": "0.1"},
            }
        )
        assert result.protocol_version == "2025-06-18"
        assert result.server_info.name == "srv"

    def test_call_tool_params_keep_empty_arguments(self):
        """Test that tools/call always sends an arguments object."""
        assert CallToolParams(name="echo").to_params() == {"name": "echo", "arguments": {}}

    def test_list_results(self):
        """Test parsing the list results."""
        tools = ListToolsResult.model_validate(
            {
                "tools": [
                    {
                        "name": "echo",
                        "inputSchema": {"type": "object", "properties": {"text": {"type": "string"}}},
                    }
                ]
            }
        )
        assert tools.tools[0].parameter_names == ["text"]

        prompts = ListPromptsResult.model_validate(
            {"prompts": [{"name": "p", "arguments": [{"name": "a", "required": True}]}]}
        )
        assert prompts.prompts[0].arguments[0].required is True

        resources = ListResourcesResult.model_validate(
            {"resources": [{"uri": "file:///x", "name": "x", "mimeType": "text/plain"}]}
        )
        assert resources.resources[0].mime_type == "text/plain"
