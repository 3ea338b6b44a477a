"""Tool registry exposing mnemo operations to tool-calling clients."""

from mnemo.tools.base import Tool, ToolArguments
from mnemo.tools.handlers import build_registry
from mnemo.tools.registry import ToolCallError, ToolRegistry

__all__ = ["Tool", "ToolArguments", "ToolCallError", "ToolRegistry", "build_registry"]
