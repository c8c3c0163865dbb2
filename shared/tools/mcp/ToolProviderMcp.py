import asyncio
import json
from typing import Any

from shared.clients.mcp.MCPClient import MCPClient
from shared.helper.HelperConfig import HelperConfig
from shared.models.tool import ToolDescriptor
from shared.tools.ToolProviderInterface import ProviderState, ToolProviderInterface
from shared.tools.schema_adapter import adapt_mcp_tools


class ToolProviderMcp(ToolProviderInterface):
    """Tools discovered on a remote MCP endpoint (Microsoft Learn by default).

    Any failure during initialize() leaves the provider unavailable with no tools,
    so an unreachable endpoint never breaks a chat turn.
    """

    def __init__(self, helper_config: HelperConfig, client: MCPClient | None = None):
        super().__init__(helper_config=helper_config)
        self._name = helper_config.get_string_val("TOOLS_MCP_NAME", default="mslearn")
        endpoint = helper_config.get_string_val("TOOLS_MCP_ENDPOINT", default="https://learn.microsoft.com/api/mcp")
        self._client = client or MCPClient(
            helper_config=helper_config,
            endpoint=endpoint,
            connect_timeout=helper_config.get_number_val("TOOLS_MCP_CONNECT_TIMEOUT", default=5.0),
            call_timeout=helper_config.get_number_val("TOOLS_MCP_CALL_TIMEOUT", default=8.0),
        )
        self._tools: list[ToolDescriptor] = []
        self._tool_names: set[str] = set()

    @property
    def name(self) -> str:
        return self._name

    async def initialize(self) -> None:
        if self.state in (ProviderState.READY, ProviderState.DISPOSED):
            return
        try:
            await self._client.connect()
            self._tools = adapt_mcp_tools(await self._client.list_tools())
            self._tool_names = {tool.name for tool in self._tools}
            self.state = ProviderState.READY
            self.logging.debug("MCP provider '%s' ready with %d tools", self._name, len(self._tools))
        except Exception as e:
            self.logging.warning("MCP provider '%s' unavailable: %s", self._name, e)
            self._tools = []
            self._tool_names = set()
            self.state = ProviderState.FAILED
            await self._client.disconnect()

    async def get_tools(self) -> list[ToolDescriptor]:
        return list(self._tools) if self.is_available() else []

    async def execute_tool(self, name: str, tool_input: dict[str, Any]) -> str:
        if not self.is_available() or name not in self._tool_names:
            return json.dumps({"error": f"MCP tool unavailable: {name}"})
        try:
            result = await self._client.call_tool(name, tool_input)
        except asyncio.TimeoutError:
            self.logging.error("MCP tool call timed out: %s", name)
            return json.dumps({"error": "MCP tool call failed: timeout"})
        except Exception as e:
            self.logging.error("MCP tool call failed: %s %s", name, e)
            return json.dumps({"error": f"MCP tool call failed: {e}"})

        content = getattr(result, "content", None)
        if content:
            text = "\n".join(part.text for part in content if getattr(part, "type", None) == "text")
            return text or json.dumps([part.model_dump(mode="json") for part in content])
        return json.dumps(result.model_dump(mode="json") if hasattr(result, "model_dump") else result)

    def validate_tool_input(self, name: str, tool_input: Any) -> bool:
        return name in self._tool_names and isinstance(tool_input, dict)

    async def dispose(self) -> None:
        await super().dispose()
        try:
            await self._client.disconnect()
        except Exception as e:
            self.logging.debug("MCP provider '%s' dispose error: %s", self._name, e)
