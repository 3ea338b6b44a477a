"""Tests for the MCP server surface."""

import json

import pytest
from mcp import types

from mnemo.mcp.converters import tool_to_mcp, tool_to_mcp_input_schema
from mnemo.mcp.server import call_registry_tool, create_mcp_server, list_mcp_tools
from mnemo.tools.handlers import build_registry
from mnemo.tools.registry import ToolCallError

PROJECT = "/work/project"


@pytest.fixture
def registry(engine):
    return build_registry(engine)


class TestConverters:
    def test_input_schema_uses_camel_case(self, registry):
        schema = tool_to_mcp_input_schema(registry.get("remember"))

        assert schema["type"] == "object"
        assert schema["additionalProperties"] is False
        assert "projectPath" in schema["properties"]
        assert "project_path" not in schema["properties"]
        assert set(schema["required"]) == {"key", "value", "projectPath"}

    def test_optional_only_schema_has_no_required(self, registry):
        schema = tool_to_mcp_input_schema(registry.get("compact_memory"))

        assert "required" not in schema

    def test_enum_arguments_keep_definitions(self, registry):
        schema = tool_to_mcp_input_schema(registry.get("prepare_handoff"))

        assert "$defs" in schema
        assert "include" in schema["properties"]

    def test_tool_to_mcp(self, registry):
        mcp_tool = tool_to_mcp(registry.get("recall"))

        assert mcp_tool.name == "recall"
        assert mcp_tool.description
        assert mcp_tool.inputSchema["properties"]["key"]["type"] == "string"


class TestServerHelpers:
    def test_list_mcp_tools(self, registry):
        names = {tool.name for tool in list_mcp_tools(registry)}

        assert names == set(registry.names)

    def test_call_registry_tool_returns_text(self, registry):
        content = call_registry_tool(
            registry, "remember", {"key": "k", "value": "v", "projectPath": PROJECT}
        )

        assert len(content) == 1
        assert content[0].type == "text"
        assert json.loads(content[0].text)["key"] == "k"

    def test_call_registry_tool_raises_with_payload(self, registry):
        with pytest.raises(ToolCallError) as exc_info:
            call_registry_tool(registry, "nope", {})

        assert json.loads(str(exc_info.value)) == {"error": "Unknown tool: nope"}


class TestCreateMCPServer:
    def test_creates_server(self, registry):
        server = create_mcp_server(registry)
        assert server is not None
        assert server.name == "mnemo"

    def test_creates_server_with_custom_name(self, registry):
        server = create_mcp_server(registry, server_name="test-server")
        assert server.name == "test-server"

    def test_registers_handlers(self, registry):
        server = create_mcp_server(registry)

        assert types.ListToolsRequest in server.request_handlers
        assert types.CallToolRequest in server.request_handlers

    @pytest.mark.asyncio
    async def test_call_tool_error_result(self, registry):
        """Test that a failed call comes back as an error result with JSON text."""
        server = create_mcp_server(registry)
        handler = server.request_handlers[types.CallToolRequest]
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(
                name="remember", arguments={"key": "k", "projectPath": PROJECT}
            ),
        )

        result = (await handler(request)).root

        assert result.isError is True
        payload = json.loads(result.content[0].text)
        assert payload["error"].startswith("Invalid arguments:")

    @pytest.mark.asyncio
    async def test_call_tool_success_result(self, registry):
        server = create_mcp_server(registry)
        handler = server.request_handlers[types.CallToolRequest]
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(
                name="remember", arguments={"key": "k", "value": "v", "projectPath": PROJECT}
            ),
        )

        result = (await handler(request)).root

        assert not result.isError
        assert json.loads(result.content[0].text)["value"] == "v"
