"""MCP server exposing the mnemo tool registry."""

from __future__ import annotations

import logging
from typing import Any

from mcp.server import Server
from mcp.types import TextContent
from mcp.types import Tool as MCPTool

from mnemo.mcp.converters import tool_to_mcp
from mnemo.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


def list_mcp_tools(registry: ToolRegistry) -> list[MCPTool]:
    """Return all registered tools in MCP format."""
    return [tool_to_mcp(tool) for tool in registry]


def call_registry_tool(
    registry: ToolRegistry,
    name: str,
    arguments: dict[str, Any] | None,
) -> list[TextContent]:
    """Execute a tool and wrap its JSON result as MCP text content.

    Raises:
        ToolCallError: On failure. The SDK turns the exception into an
            ``isError`` result whose text is the ``{"error": ...}`` payload.
    """
    text = registry.dispatch(name, arguments)
    return [TextContent(type="text", text=text)]


def create_mcp_server(registry: ToolRegistry, server_name: str = "mnemo") -> Server:
    """Create an MCP Server that exposes the registry.

    Args:
        registry: Validated tool registry
        server_name: Name for the MCP server

    Returns:
        Configured MCP Server instance
    """
    server = Server(server_name)

    @server.list_tools()
    async def list_tools() -> list[MCPTool]:
        return list_mcp_tools(registry)

    # Arguments are validated by the registry so errors keep one format
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
        logger.info("Executing tool: %s", name)
        return call_registry_tool(registry, name, arguments)

    return server
