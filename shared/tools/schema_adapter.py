"""Translate MCP tool listings into the descriptors sent to the LLM."""

from typing import Any

from shared.models.tool import ToolDescriptor

EMPTY_OBJECT_SCHEMA = {"type": "object", "properties": {}}


def _field(tool: Any, name: str) -> Any:
    if isinstance(tool, dict):
        return tool.get(name)
    return getattr(tool, name, None)


def adapt_mcp_tool(tool: Any) -> ToolDescriptor:
    """Map one MCP tool (model or dict) to a ToolDescriptor.

    inputSchema becomes input_schema; a missing or non-object schema is replaced by
    an empty object schema and a missing description by "".
    """
    schema = _field(tool, "inputSchema")
    if not isinstance(schema, dict) or schema.get("type") != "object":
        schema = dict(EMPTY_OBJECT_SCHEMA)
    return ToolDescriptor(
        name=_field(tool, "name"),
        description=_field(tool, "description") or "",
        input_schema=schema,
    )


def adapt_mcp_tools(tools: list[Any]) -> list[ToolDescriptor]:
    return [adapt_mcp_tool(tool) for tool in tools]
