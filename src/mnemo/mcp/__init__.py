"""Model Context Protocol (MCP) server for mnemo.

Exposes the tool registry to MCP clients (Claude Desktop, coding assistants)
over stdio or streamable HTTP.
"""

from mnemo.mcp.server import create_mcp_server

__all__ = ["create_mcp_server"]
