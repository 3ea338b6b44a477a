"""Tool registration and dispatch.

The registry is the single table mapping tool names to operations. Adding a
tool is a ``register`` call; nothing else branches on tool names.
"""

import logging
from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ValidationError

from mnemo.errors import InvalidArgumentsError, sanitize_error_message
from mnemo.tools.base import Tool
from mnemo.utils import compact_json

logger = logging.getLogger(__name__)


class ToolCallError(Exception):
    """A failed tool call.

    ``payload`` is the compact JSON body sent to the client:
    ``{"error": <sanitized message>}``.
    """

    def __init__(self, message: str):
        self.message = message
        self.payload = compact_json({"error": message})
        super().__init__(self.payload)


def to_jsonable(value: Any) -> Any:
    """Convert a tool result to JSON-compatible types.

    Pydantic models are dumped with camelCase keys.
    """
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list | tuple):
        return [to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    return value


def format_validation_error(error: ValidationError) -> str:
    """Describe a pydantic validation error in one line."""
    problems = []
    for err in error.errors(include_url=False):
        location = ".".join(str(part) for part in err["loc"]) or "arguments"
        problems.append(f"{location}: {err['msg']}")
    return "Invalid arguments: " + "; ".join(problems)


class ToolRegistry:
    """Name → tool table with validated dispatch."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> Tool:
        """Add a tool.

        Raises:
            ValueError: If a tool with the same name is already registered
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool
        return tool

    def validate(self) -> None:
        """Check every registration once, before serving.

        Raises:
            ValueError: If a tool is misconfigured
        """
        for name, tool in self._tools.items():
            if not name or not name.replace("_", "").isalnum():
                raise ValueError(f"Invalid tool name: {name!r}")
            if not tool.description:
                raise ValueError(f"Tool {name} has no description")
            if not (isinstance(tool.arguments, type) and issubclass(tool.arguments, BaseModel)):
                raise ValueError(f"Tool {name} arguments must be a pydantic model")
            if not callable(tool.fn):
                raise ValueError(f"Tool {name} handler is not callable")
            tool.arguments.model_json_schema(by_alias=True)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def dispatch(self, name: str, arguments: dict[str, Any] | None) -> str:
        """Run a tool and serialize its result as compact JSON.

        Full error details go to the log; the client only sees a sanitized
        message.

        Args:
            name: Tool name
            arguments: JSON object of arguments

        Returns:
            Compact JSON result

        Raises:
            ToolCallError: If the tool is unknown, the arguments are invalid or
                           the operation fails
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolCallError(f"Unknown tool: {name}")

        logger.debug("Executing tool: %s", name)
        try:
            result = tool.execute(arguments)
        except ValidationError as e:
            logger.info("Rejected arguments for %s: %s", name, e)
            raise ToolCallError(format_validation_error(e)) from e
        except InvalidArgumentsError as e:
            logger.info("Rejected arguments for %s: %s", name, e)
            raise ToolCallError(sanitize_error_message(e)) from e
        except Exception as e:
            logger.error("Error executing tool %s: %s", name, e, exc_info=True)
            raise ToolCallError(sanitize_error_message(e)) from e

        return compact_json(to_jsonable(result))
