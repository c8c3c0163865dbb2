import asyncio
import json
from typing import Any

from shared.helper.HelperConfig import HelperConfig
from shared.models.tool import ToolDescriptor
from shared.tools.ToolProviderInterface import assert_tool_provider


class ToolRegistry:
    """Routes tool calls to the provider that owns each tool name.

    Providers keep registration order; when two providers advertise the same tool
    name, the first one registered owns it and the duplicate is hidden.
    """

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._providers: list[Any] = []
        self._owners: dict[str, Any] = {}

    def register(self, provider: Any) -> None:
        """
        Raises:
            ValueError: If the provider does not satisfy the provider contract.
        """
        self._providers.append(assert_tool_provider(provider))

    @property
    def providers(self) -> list[Any]:
        return list(self._providers)

    async def initialize(self) -> None:
        """Initialize all providers concurrently, then map tool names to available providers."""
        results = await asyncio.gather(*(provider.initialize() for provider in self._providers), return_exceptions=True)
        for provider, result in zip(self._providers, results):
            if isinstance(result, Exception):
                self.logging.warning("Tool provider '%s' failed to initialize: %s", provider.name, result)

        self._owners.clear()
        for provider in self._providers:
            if not provider.is_available():
                continue
            for tool in await provider.get_tools():
                if tool.name in self._owners:
                    self.logging.debug("Tool '%s' of provider '%s' shadowed by '%s'", tool.name, provider.name, self._owners[tool.name].name)
                    continue
                self._owners[tool.name] = provider

    async def get_all_tools(self) -> list[ToolDescriptor]:
        """Tools of all available providers in registration order, one entry per name."""
        tools: list[ToolDescriptor] = []
        for provider in self._providers:
            if not provider.is_available():
                continue
            for tool in await provider.get_tools():
                if self._owners.get(tool.name) is provider:
                    tools.append(tool)
        return tools

    def validate_tool_input(self, name: str, tool_input: Any) -> bool:
        provider = self._owners.get(name)
        if provider is None:
            return False
        return provider.validate_tool_input(name, tool_input)

    async def execute_tool(self, name: str, tool_input: dict[str, Any]) -> str:
        provider = self._owners.get(name)
        if provider is None:
            return json.dumps({"error": f"Unknown tool: {name}"})
        return await provider.execute_tool(name, tool_input)

    async def dispose(self) -> None:
        """Dispose every provider concurrently; errors are logged and swallowed."""
        results = await asyncio.gather(*(provider.dispose() for provider in self._providers), return_exceptions=True)
        for provider, result in zip(self._providers, results):
            if isinstance(result, Exception):
                self.logging.debug("Tool provider '%s' dispose error: %s", provider.name, result)
