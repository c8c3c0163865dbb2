from typing import Any

from pydantic import BaseModel, field_validator


class ToolDescriptor(BaseModel):
    """A tool as advertised to the LLM.

    The name is unique across providers once the registry has de-duplicated it.
    input_schema is always an object-typed JSON schema.
    """

    name: str
    description: str = ""
    input_schema: dict[str, Any] = {"type": "object", "properties": {}}

    @field_validator("input_schema")
    @classmethod
    def _must_be_object_schema(cls, value: dict[str, Any]) -> dict[str, Any]:
        if value.get("type") != "object":
            raise ValueError("input_schema must be an object-typed JSON schema")
        return value
