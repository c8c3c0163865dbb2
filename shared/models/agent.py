"""Conversation and round models used by the agent loop."""

from typing import Any, Literal

from pydantic import BaseModel


class HistoryMessage(BaseModel):
    """One turn of the trailing history supplied by the client."""

    role: Literal["user", "assistant"]
    content: str


class ToolCall(BaseModel):
    id: str
    name: str
    input: Any = {}


class RoundResult(BaseModel):
    """Outcome of one model call: either final text or a batch of tool calls.

    Attributes:
        final_text: Concatenated text blocks when the model did not ask for tools.
        tool_calls: The tool_use blocks of the response, in order.
        content:    The raw content blocks, replayed as the assistant message.
    """

    final_text: str | None = None
    tool_calls: list[ToolCall] = []
    content: list[dict[str, Any]] = []

    @classmethod
    def from_content(cls, blocks: list[dict[str, Any]]) -> "RoundResult":
        tool_calls = [
            ToolCall(id=block.get("id", ""), name=block.get("name", ""), input=block.get("input", {}))
            for block in blocks
            if block.get("type") == "tool_use"
        ]
        if tool_calls:
            return cls(tool_calls=tool_calls, content=blocks)
        text = "".join(block.get("text", "") for block in blocks if block.get("type") == "text")
        return cls(final_text=text, content=blocks)

    @property
    def wants_tools(self) -> bool:
        return bool(self.tool_calls)
