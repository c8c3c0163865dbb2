import asyncio
import contextlib
from typing import Any

from mcp import ClientSession, types
from mcp.client.streamable_http import streamablehttp_client

from shared.helper.HelperConfig import HelperConfig

CLIENT_NAME = "portfolio-chatbot"
CLIENT_VERSION = "1.0.0"


class MCPConnectionError(Exception):
    """The MCP endpoint could not be reached or did not finish the handshake in time."""


class MCPClient:
    """Session against one streamable-HTTP MCP endpoint.

    The transport and session context managers live in a dedicated runner task,
    because their cancel scopes must be entered and exited by the same task.
    connect(), call_tool() and disconnect() may then be awaited from any task.
    """

    def __init__(
        self,
        helper_config: HelperConfig,
        endpoint: str,
        connect_timeout: float = 5.0,
        call_timeout: float = 8.0,
    ):
        self.logging = helper_config.get_logger()
        self.endpoint = endpoint
        self.connect_timeout = connect_timeout
        self.call_timeout = call_timeout

        self._session: ClientSession | None = None
        self._runner: asyncio.Task | None = None
        self._ready = asyncio.Event()
        self._closing = asyncio.Event()
        self._error: BaseException | None = None

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def is_connected(self) -> bool:
        return self._session is not None

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    async def _run(self) -> None:
        try:
            async with streamablehttp_client(self.endpoint) as (read_stream, write_stream, _):
                client_info = types.Implementation(name=CLIENT_NAME, version=CLIENT_VERSION)
                async with ClientSession(read_stream, write_stream, client_info=client_info) as session:
                    await session.initialize()
                    self._session = session
                    self._ready.set()
                    await self._closing.wait()
        except Exception as e:
            self._error = e
        finally:
            self._session = None
            self._ready.set()

    async def connect(self) -> None:
        """Open the transport and run the MCP handshake.

        Raises:
            MCPConnectionError: If the endpoint fails or the handshake exceeds connect_timeout.
        """
        if self._runner is not None:
            return
        self._runner = asyncio.create_task(self._run(), name=f"mcp-session:{self.endpoint}")
        try:
            await asyncio.wait_for(self._ready.wait(), timeout=self.connect_timeout)
        except asyncio.TimeoutError:
            # the runner can still be inside transport setup, where _closing is never awaited
            await self._cancel_runner()
            raise MCPConnectionError(f"MCP connection timeout after {self.connect_timeout}s")
        if self._session is None:
            error = self._error
            await self.disconnect()
            raise MCPConnectionError(f"MCP connection failed: {error}")

    async def _cancel_runner(self) -> None:
        runner, self._runner = self._runner, None
        self._closing.set()
        if runner is None:
            return
        runner.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await runner

    async def disconnect(self) -> None:
        """Close the session best-effort. Safe to call more than once."""
        runner, self._runner = self._runner, None
        self._closing.set()
        if runner is None:
            return
        try:
            await asyncio.wait_for(runner, timeout=self.connect_timeout)
        except asyncio.TimeoutError:
            self.logging.warning("MCP session for %s did not close in time, cancelled.", self.endpoint)
        except Exception as e:
            self.logging.debug("MCP disconnect error for %s: %s", self.endpoint, e)

    ##########################################
    ############### REQUESTS #################
    ##########################################

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise MCPConnectionError("MCP client not connected")
        return self._session

    async def list_tools(self) -> list[types.Tool]:
        result = await asyncio.wait_for(self._require_session().list_tools(), timeout=self.call_timeout)
        return list(result.tools or [])

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        """Call one remote tool.

        Raises:
            MCPConnectionError: If the client is not connected.
            asyncio.TimeoutError: If the call exceeds call_timeout.
        """
        session = self._require_session()
        return await asyncio.wait_for(session.call_tool(name, arguments=arguments), timeout=self.call_timeout)
