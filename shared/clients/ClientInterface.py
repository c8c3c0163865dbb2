from abc import ABC, abstractmethod

import httpx
from httpx._types import QueryParamTypes, RequestContent, RequestData
from typing import Any
from shared.models.config import EnvConfig

from shared.helper.HelperConfig import HelperConfig


class ClientRequestError(Exception):
    """Raised by do_request(raise_on_error=True) when the backend answers with a non-2xx status."""

    def __init__(self, url: str, status_code: int):
        super().__init__(f"Request to {url} failed with status {status_code}")
        self.url = url
        self.status_code = status_code


class ClientInterface(ABC):
    """Base of every HTTP backed client (LLM, mail).

    Subclasses name their family via _get_client_type() and their engine via
    _get_engine_name(); engine settings are read from "<TYPE>_<ENGINE>_<KEY>".
    """

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.timeout = helper_config.get_number_val(f"{self.get_client_type().upper()}_TIMEOUT", default=30.0)

        self._client: httpx.AsyncClient | None = None
        self.validate_full_configuration()

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def validate_full_configuration(self) -> None:
        """
        Reads every required engine setting once so that a missing value fails at construction.

        Raises:
            ValueError: If a required setting is missing or has the wrong type.
        """
        for config in self._get_required_config():
            self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)

    def is_booted(self) -> bool:
        return self._client is not None

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def get_client_type(self) -> str:
        """
        Returns the client family in lowercase. E.g. "llm"
        """
        return self._get_client_type().lower()

    @abstractmethod
    def _get_client_type(self) -> str:
        """
        Returns the client family. E.g. "llm"
        """
        pass

    def get_engine_name(self) -> str:
        """
        Returns the engine in lowercase. E.g. "anthropic"
        """
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        """
        Returns the engine behind the client. E.g. "Anthropic"
        """
        pass

    ################ CONFIG ##################
    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        """
        Returns the engine settings the client needs.

        Returns:
            list[EnvConfig]: One entry per "<TYPE>_<ENGINE>_<KEY>" variable.
        """
        pass

    def _get_config_key_name(self, raw_key: str) -> str:
        """
        Returns:
            str: The full variable name. E.g. "LLM_ANTHROPIC_API_KEY"
        """
        return f"{self.get_client_type().upper()}_{self.get_engine_name().upper()}_{raw_key.upper()}"

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """
        Reads one engine setting.

        Args:
            raw_key (str): Setting name without the "<TYPE>_<ENGINE>_" prefix
            default (Any): Value used when the variable is unset; None makes it required
            val_type (str): "string", "number", "bool" or "list"

        Raises:
            ValueError: If the type is unknown or a required value is missing.
        """
        key = self._get_config_key_name(raw_key)
        readers = {
            "string": self._helper_config.get_string_val,
            "number": self._helper_config.get_number_val,
            "bool": self._helper_config.get_bool_val,
            "list": self._helper_config.get_list_val,
        }
        reader = readers.get(val_type)
        if reader is None:
            raise ValueError(f"Unsupported config value type '{val_type}' for env key '{key}'.")
        return reader(key, default=default)

    ################ AUTH ##################
    @abstractmethod
    def _get_auth_header(self) -> dict:
        """
        Returns the headers that authenticate against the backend.

        Returns:
            dict: Header name to value, empty if the backend needs no auth
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_base_url(self) -> str:
        """
        Returns the base URL of the backend. E.g. "https://api.anthropic.com"
        """
        pass

    @abstractmethod
    def _get_endpoint_healthcheck(self) -> str:
        """
        Returns the path probed by do_healthcheck(). E.g. "/v1/models"
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_healthcheck(self) -> httpx.Response:
        """Probe the backend with a cheap authenticated GET.

        Returns:
            httpx.Response: The raw response; callers judge the status code.
        """
        return await self.do_request(method="GET", endpoint=self._get_endpoint_healthcheck())

    ##########################################
    ############ CORE REQUESTS ###############
    ##########################################

    async def boot(self) -> None:
        """Open the pooled HTTP client."""
        self._client = httpx.AsyncClient(timeout=self.timeout)

    async def close(self) -> None:
        """Close the pooled HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def do_request(
        self,
        method: str = "GET",
        content: RequestContent | None = None,
        data: RequestData | None = None,
        json: dict | None = None,
        params: QueryParamTypes | None = None,
        endpoint: str = "",
        additional_headers: dict | None = None,
        raise_on_error: bool = False,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send one request to the backend.

        Args:
            method: HTTP method.
            content: Raw body; the caller sets Content-Type via additional_headers.
            data: Form-encoded body.
            json: JSON body.
            params: URL query parameters.
            endpoint: Path appended to the base URL (leading slash optional).
            additional_headers: Extra headers that override the defaults.
            raise_on_error: Raise ClientRequestError on a non-2xx status.
            timeout: Per-request timeout overriding the client default.

        Returns:
            httpx.Response: The raw response.

        Raises:
            RuntimeError: If boot() has not been called.
            ClientRequestError: On a non-2xx status when raise_on_error is set.
            httpx.HTTPError: On transport failures.
        """
        if self._client is None:
            raise RuntimeError("HTTP client not initialised. Call boot() before making requests.")

        endpoint = "/" + endpoint.strip().lstrip("/") if endpoint.strip() else ""
        headers: dict = {}
        headers.update(self._get_auth_header())
        if additional_headers:
            headers.update(additional_headers)

        url = f"{self._get_base_url().rstrip('/')}{endpoint}"
        kwargs: dict = {
            "url": url,
            "headers": headers,
            "timeout": timeout if timeout is not None else self.timeout,
            "params": params,
        }
        # exactly one body argument
        if content is not None:
            kwargs["content"] = content
        elif data is not None:
            kwargs["data"] = data
        elif json is not None:
            kwargs["json"] = json

        response = await self._client.request(method, **kwargs)

        if raise_on_error and not response.is_success:
            # body may echo the request, keep it out of non-debug logs
            self.logging.error("Request to %s failed with status %d", url, response.status_code)
            self.logging.debug("Failed response body: %s", response.text)
            raise ClientRequestError(url, response.status_code)

        return response
