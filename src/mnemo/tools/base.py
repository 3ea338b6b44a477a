"""Base types for the tool system."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict

from mnemo.models import CamelModel


class ToolArguments(CamelModel):
    """Arguments of one tool call.

    Field names are accepted in camelCase or snake_case. Unknown keys are
    rejected so a misspelled option is never silently ignored.
    """

    model_config = ConfigDict(extra="forbid")


# Tool function signature: takes the validated arguments, returns a
# JSON-serializable value, a pydantic model, a list of models, or None
ToolFunction = Callable[[Any], Any]


@dataclass
class Tool:
    """An operation exposed to tool-calling clients."""

    name: str
    description: str
    arguments: type[BaseModel]
    fn: ToolFunction

    def parse_arguments(self, raw: dict[str, Any] | None) -> BaseModel:
        """Validate raw JSON arguments.

        Raises:
            pydantic.ValidationError: If the arguments don't match
        """
        return self.arguments.model_validate(raw or {})

    def execute(self, raw: dict[str, Any] | None) -> Any:
        """Validate the arguments and run the tool.

        Args:
            raw: Arguments as received from the client

        Returns:
            Tool result, not yet serialized
        """
        return self.fn(self.parse_arguments(raw))
