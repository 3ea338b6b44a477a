"""Schema conversion between mnemo tools and MCP format."""

from __future__ import annotations

from typing import Any

from mcp.types import Tool as MCPTool

from mnemo.tools.base import Tool


def tool_to_mcp_input_schema(tool: Tool) -> dict[str, Any]:
    """Convert a tool's argument model to an MCP input schema.

    Args:
        tool: mnemo Tool instance

    Returns:
        JSON Schema dict for MCP Tool.inputSchema, using camelCase names
    """
    model_schema = tool.arguments.model_json_schema(by_alias=True)

    schema: dict[str, Any] = {
        "type": "object",
        "properties": model_schema.get("properties", {}),
        "additionalProperties": False,
    }
    if model_schema.get("required"):
        schema["required"] = model_schema["required"]
    if "$defs" in model_schema:
        schema["$defs"] = model_schema["$defs"]

    return schema


def tool_to_mcp(tool: Tool) -> MCPTool:
    """Describe a tool in MCP format."""
    return MCPTool(
        name=tool.name,
        description=tool.description,
        inputSchema=tool_to_mcp_input_schema(tool),
    )
