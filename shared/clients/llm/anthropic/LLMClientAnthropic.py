from typing import Any

from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig

ANTHROPIC_VERSION = "2023-06-01"


class LLMClientAnthropic(LLMClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default="https://api.anthropic.com", val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Anthropic"

    def has_api_key(self) -> bool:
        return bool(self._api_key)

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        # API_KEY is optional here; the server reports its absence as a misconfiguration
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default="https://api.anthropic.com"),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        headers = {"anthropic-version": ANTHROPIC_VERSION}
        if self._api_key:
            headers["x-api-key"] = self._api_key
        return headers

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/v1/models"

    def _get_endpoint_messages(self) -> str:
        return "/v1/messages"

    ################ PAYLOAD BUILDER ##################
    def get_messages_payload(
        self,
        system: str,
        messages: list[dict],
        tools: list[dict] | None,
        allow_tools: bool,
        max_tokens: int,
    ) -> dict:
        """Build the Messages API request body.

        Tools stay listed on a text-only call because earlier turns may contain
        tool_use/tool_result blocks; tool_choice "none" then forbids new calls.

        Returns:
            dict: {"model", "max_tokens", "system", "messages"[, "tools", "tool_choice"]}
        """
        payload: dict[str, Any] = {
            "model": self.chat_model,
            "max_tokens": max_tokens,
            "system": system,
            "messages": messages,
        }
        if tools:
            payload["tools"] = tools
            if not allow_tools:
                payload["tool_choice"] = {"type": "none"}
        return payload

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_content_blocks(self, response_data: dict) -> list[dict[str, Any]]:
        """Extract content blocks from a /v1/messages response.

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            list[dict[str, Any]]: Blocks in response order.

        Raises:
            ValueError: If the response does not contain a content list.
        """
        content = response_data.get("content")
        if not isinstance(content, list):
            raise ValueError(
                "Anthropic response does not contain a content list. "
                "Response keys: %s" % list(response_data.keys())
            )
        return content
