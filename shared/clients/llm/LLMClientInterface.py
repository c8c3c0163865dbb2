from abc import abstractmethod
from typing import Any

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig


class LLMClientInterface(ClientInterface):
    """Chat-completion client with tool use.

    Messages and content blocks use the Messages API shape: a block is a dict with
    "type" in {"text", "tool_use", "tool_result"}.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        prefix = self.get_client_type().upper()
        self.chat_model = helper_config.get_string_val(f"{prefix}_CHAT_MODEL", default="claude-haiku-4-5-20251001")
        self.max_tokens = int(helper_config.get_number_val(f"{prefix}_MAX_TOKENS", default=1024))

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "llm"

    def has_api_key(self) -> bool:
        """Whether the engine has the credentials it needs to call the backend."""
        return True

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_messages(self) -> str:
        """Returns the endpoint path for message requests (e.g. "/v1/messages")."""
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_messages_payload(
        self,
        system: str,
        messages: list[dict],
        tools: list[dict] | None,
        allow_tools: bool,
        max_tokens: int,
    ) -> dict:
        """Build the backend request body for one model call.

        Args:
            system (str): System directive.
            messages (list[dict]): Conversation so far, oldest first.
            tools (list[dict] | None): Tool descriptors ({"name", "description", "input_schema"}).
            allow_tools (bool): False forces a text-only answer even when tools are listed.
            max_tokens (int): Completion budget.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    @abstractmethod
    def extract_content_blocks(self, response_data: dict) -> list[dict[str, Any]]:
        """Extract the content blocks of a model response.

        Raises:
            ValueError: If the response carries no content list.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_messages(
        self,
        system: str,
        messages: list[dict],
        tools: list[dict] | None = None,
        allow_tools: bool = True,
        max_tokens: int | None = None,
        timeout: float | None = None,
    ) -> list[dict[str, Any]]:
        """Run one model call and return its content blocks.

        Raises:
            ClientRequestError: On a non-2xx answer.
            ValueError: If the answer has no content blocks.
        """
        payload = self.get_messages_payload(
            system=system,
            messages=messages,
            tools=tools,
            allow_tools=allow_tools,
            max_tokens=max_tokens or self.max_tokens,
        )
        response = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_messages(),
            json=payload,
            raise_on_error=True,
            timeout=timeout,
        )
        return self.extract_content_blocks(response.json())

    async def do_complete_text(self, system: str, prompt: str, max_tokens: int | None = None, timeout: float | None = None) -> str:
        """Single-turn completion without tools; returns the concatenated text blocks."""
        blocks = await self.do_messages(
            system=system,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
            timeout=timeout,
        )
        return "".join(block.get("text", "") for block in blocks if block.get("type") == "text")
