from shared.helper.HelperConfig import HelperConfig
from shared.helper.engine_loader import load_engine_class
from shared.clients.store.StoreClientInterface import StoreClientInterface


class StoreClientManager:
    """Instantiates the keyed store selected by STORE_ENGINE ("memory" or "sqlite")."""

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _initialize_client(self) -> StoreClientInterface:
        """
        Raises:
            ValueError: If the engine is unsupported.
        """
        engine = self.helper_config.get_string_val("STORE_ENGINE", default="memory")
        client_class = load_engine_class("shared.clients.store", "StoreClient", engine)
        client = client_class(helper_config=self.helper_config)
        if client.get_engine_name() == "memory":
            self.logging.warning("Using the in-memory session store; state is lost on restart and not shared between workers.")
        return client

    def get_client(self) -> StoreClientInterface:
        return self.client
