from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from shared.helper.HelperConfig import HelperConfig
from shared.models.tool import ToolDescriptor


class ProviderState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"
    DISPOSED = "disposed"


REQUIRED_MEMBERS = (
    "name",
    "initialize",
    "get_tools",
    "execute_tool",
    "validate_tool_input",
    "dispose",
    "is_available",
)


def assert_tool_provider(provider: Any) -> Any:
    """Check that an object satisfies the provider contract.

    Duck-typed on purpose so that providers need not inherit ToolProviderInterface.

    Raises:
        ValueError: Naming the first missing member.
    """
    for member in REQUIRED_MEMBERS:
        value = getattr(provider, member, None)
        if member == "name":
            if not isinstance(value, str) or not value:
                raise ValueError(f'ToolProvider "{getattr(provider, "name", None) or "unknown"}" missing required member: name')
        elif not callable(value):
            raise ValueError(f'ToolProvider "{getattr(provider, "name", None) or "unknown"}" missing required member: {member}')
    return provider


class ToolProviderInterface(ABC):
    """A source of tools the agent can call.

    Lifecycle: uninitialized -> ready | failed -> disposed. A provider that is not
    ready advertises no tools and never executes.

    Tool results are always JSON strings; failures are reported as {"error": ...}
    instead of raised.
    """

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.state = ProviderState.UNINITIALIZED

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique provider name, e.g. "local"."""
        pass

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the provider. Idempotent; failures leave it unavailable instead of raising."""
        pass

    @abstractmethod
    async def get_tools(self) -> list[ToolDescriptor]:
        pass

    @abstractmethod
    async def execute_tool(self, name: str, tool_input: dict[str, Any]) -> str:
        pass

    @abstractmethod
    def validate_tool_input(self, name: str, tool_input: Any) -> bool:
        pass

    async def dispose(self) -> None:
        self.state = ProviderState.DISPOSED

    def is_available(self) -> bool:
        return self.state == ProviderState.READY
