from typing import Any

from shared.helper.HelperConfig import HelperConfig
from shared.helper.engine_loader import load_engine_class
from shared.tools.ToolRegistry import ToolRegistry


class ToolProviderManager:
    """Builds a fresh ToolRegistry per chat turn from TOOL_PROVIDERS (default "[local,mcp]").

    Provider classes are resolved once; instances are per turn because remote
    sessions must not outlive the turn that opened them.
    """

    def __init__(self, helper_config: HelperConfig, rag_pipeline: Any):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.engines = helper_config.get_list_val("TOOL_PROVIDERS", default=["local", "mcp"])
        self._provider_kwargs: dict[str, dict[str, Any]] = {"local": {"rag_pipeline": rag_pipeline}}
        self._provider_classes = [
            (engine.lower(), load_engine_class("shared.tools", "ToolProvider", engine)) for engine in self.engines
        ]
        self.logging.info("Tool providers configured: %s", ", ".join(self.engines) or "none")

    def create_registry(self) -> ToolRegistry:
        registry = ToolRegistry(helper_config=self.helper_config)
        for engine, provider_class in self._provider_classes:
            kwargs = self._provider_kwargs.get(engine, {})
            registry.register(provider_class(helper_config=self.helper_config, **kwargs))
        return registry
