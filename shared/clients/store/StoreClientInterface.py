from abc import ABC, abstractmethod
from typing import Any

from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class StoreClientInterface(ABC):
    """Keyed JSON document store with logical namespaces.

    Implementations must give read-your-writes per key: a get() issued after a
    completed put() or delete() observes it, from any process sharing the store.
    """

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.validate_full_configuration()

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def validate_full_configuration(self) -> None:
        """
        Raises:
            ValueError: If a required setting is missing.
        """
        for config in self._get_required_config():
            self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_engine_name(self) -> str:
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        """Returns the engine of the store. E.g. "Sqlite" """
        pass

    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        pass

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """Read "STORE_<ENGINE>_<KEY>"."""
        key = f"STORE_{self.get_engine_name().upper()}_{raw_key.upper()}"
        if val_type == "number":
            return self._helper_config.get_number_val(key, default=default)
        if val_type == "bool":
            return self._helper_config.get_bool_val(key, default=default)
        return self._helper_config.get_string_val(key, default=default)

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    async def boot(self) -> None:
        """Open connections or files. Default: nothing to open."""

    async def close(self) -> None:
        """Release connections or files. Default: nothing to release."""

    ##########################################
    ############### REQUESTS #################
    ##########################################

    @abstractmethod
    async def do_get(self, namespace: str, key: str) -> dict | None:
        """Return the document stored under the key, or None."""
        pass

    @abstractmethod
    async def do_put(self, namespace: str, key: str, value: dict) -> None:
        """Create or replace the document under the key."""
        pass

    @abstractmethod
    async def do_delete(self, namespace: str, key: str) -> bool:
        """Delete the key. Returns whether it existed."""
        pass

    @abstractmethod
    async def do_list(self, namespace: str) -> list[str]:
        """Return all keys of the namespace in insertion order."""
        pass
