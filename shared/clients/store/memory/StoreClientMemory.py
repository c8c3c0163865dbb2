import copy

from shared.clients.store.StoreClientInterface import StoreClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class StoreClientMemory(StoreClientInterface):
    """Process-local store for a single worker and for tests.

    Documents are deep-copied on the way in and out so callers never share state
    with the store.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._data: dict[str, dict[str, dict]] = {}

    def _get_engine_name(self) -> str:
        return "Memory"

    def _get_required_config(self) -> list[EnvConfig]:
        return []

    async def do_get(self, namespace: str, key: str) -> dict | None:
        value = self._data.get(namespace, {}).get(key)
        return copy.deepcopy(value) if value is not None else None

    async def do_put(self, namespace: str, key: str, value: dict) -> None:
        self._data.setdefault(namespace, {})[key] = copy.deepcopy(value)

    async def do_delete(self, namespace: str, key: str) -> bool:
        return self._data.get(namespace, {}).pop(key, None) is not None

    async def do_list(self, namespace: str) -> list[str]:
        return list(self._data.get(namespace, {}).keys())
