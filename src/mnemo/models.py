"""Base model for records exposed through the tool surface."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Record with snake_case attributes and camelCase JSON names.

    Accepts either spelling on input; tool responses dump ``by_alias``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self, **kwargs) -> dict:
        """Dump to JSON-compatible types using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, **kwargs)
