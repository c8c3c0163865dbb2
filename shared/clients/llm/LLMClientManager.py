from shared.helper.HelperConfig import HelperConfig
from shared.helper.engine_loader import load_engine_class
from shared.clients.llm.LLMClientInterface import LLMClientInterface


class LLMClientManager:
    """Instantiates the LLM client selected by LLM_ENGINE (default "anthropic")."""

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _initialize_client(self) -> LLMClientInterface:
        """
        Raises:
            ValueError: If the engine is unsupported or its configuration is invalid.
        """
        engine = self.helper_config.get_string_val("LLM_ENGINE", default="anthropic")
        client_class = load_engine_class("shared.clients.llm", "LLMClient", engine)
        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated LLM client for engine: %s (model %s)", client.get_engine_name(), client.chat_model)
        return client

    def get_client(self) -> LLMClientInterface:
        return self.client
