"""The chat turn: admission checks, the bounded tool-use loop and the event stream.

Checks that can fail with an HTTP status (token, message, demo limit) run in
prepare_turn() before the stream opens; everything after that is reported in-band.
"""

import asyncio
import json
import time
from typing import Any, Callable

from services.agent.EventStream import EventStream
from services.agent.guardrails import MAX_INPUT_CHARS, build_messages, filter_output, find_leak
from services.agent.prompts import EMPTY_RESPONSE, SYSTEM_PROMPT
from services.session.SessionStore import SessionStore
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.agent import HistoryMessage, RoundResult
from shared.models.errors import (
    AccessRequiredError,
    DemoLimitError,
    InputRejectedError,
    TokenExpiredError,
    TokenRevokedError,
)
from shared.models.session import TokenPayload
from shared.security.token_signer import verify_token_payload
from shared.tools.ToolProviderManager import ToolProviderManager
from shared.tools.ToolRegistry import ToolRegistry

MAX_ROUNDS = 3
DEMO_MESSAGE_LIMIT = 25
DELTA_CHARS = 20
STREAM_ERROR_MESSAGE = "The assistant ran into a problem. Please try again."
INVALID_TOOL_INPUT = json.dumps({"error": "Invalid tool input"})


class AgentService:
    def __init__(
        self,
        helper_config: HelperConfig,
        llm_client: LLMClientInterface,
        tool_manager: ToolProviderManager,
        session_store: SessionStore,
        signing_secret: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._llm_client = llm_client
        self._tool_manager = tool_manager
        self._store = session_store
        self._signing_secret = signing_secret
        self._clock = clock
        self._turns: set[asyncio.Task] = set()

    ##########################################
    ############### ADMISSION ################
    ##########################################

    async def authorize(self, token: str) -> TokenPayload:
        """Verify signature, expiry and revocation of a bearer token.

        Raises:
            AccessRequiredError: No token supplied.
            TokenExpiredError: Bad signature or past expiry (indistinguishable to the client).
            TokenRevokedError: Valid token whose record was deleted.
        """
        if not token:
            raise AccessRequiredError()
        payload = verify_token_payload(token, self._signing_secret)
        if payload is None or int(self._clock() * 1000) > payload.exp:
            raise TokenExpiredError()
        if await self._store.get_token(payload.jti) is None:
            raise TokenRevokedError()
        return payload

    async def enforce_limit(self, jti: str) -> int:
        """Refuse at the demo limit, otherwise count this message before any LLM call.

        Returns:
            int: The count including this message.

        Raises:
            DemoLimitError: If the token already used DEMO_MESSAGE_LIMIT messages.
        """
        count = await self._store.get_count(jti)
        if count >= DEMO_MESSAGE_LIMIT:
            raise DemoLimitError()
        return await self._store.increment_count(jti)

    async def prepare_turn(self, token: str, message: str) -> TokenPayload:
        """Run every check that answers with an HTTP status instead of a stream.

        Raises:
            AgentError: The first failing check.
        """
        payload = await self.authorize(token)
        message = message.strip()
        if not message or len(message) > MAX_INPUT_CHARS:
            raise InputRejectedError("Message required (max 2000 chars)")
        count = await self.enforce_limit(payload.jti)
        self.logging.debug("Token %s message %d/%d", payload.jti, count, DEMO_MESSAGE_LIMIT)
        return payload

    ##########################################
    ############### TURN #####################
    ##########################################

    def start_turn(self, message: str, history: list[HistoryMessage] | None = None) -> EventStream:
        """Run the turn in a background task and return its event stream.

        The task outlives a disconnected client; its later events are discarded.
        """
        stream = EventStream()
        task = asyncio.create_task(self.run_turn(stream, message.strip(), history or []))
        self._turns.add(task)
        task.add_done_callback(self._turns.discard)
        return stream

    async def run_turn(self, stream: EventStream, message: str, history: list[HistoryMessage]) -> None:
        """Produce tool, delta and done events (or one error event) and close the stream."""
        registry = self._tool_manager.create_registry()
        try:
            await registry.initialize()
            messages = build_messages(message, history)
            text = await self.run_rounds(registry, messages, stream)

            leak = find_leak(text)
            if leak:
                self.logging.warning("Assistant output matched leakage pattern '%s', replaced.", leak)
            text = filter_output(text) if text.strip() else EMPTY_RESPONSE

            for start in range(0, len(text), DELTA_CHARS):
                stream.emit({"type": "delta", "text": text[start:start + DELTA_CHARS]})
            stream.emit({"type": "done"})
        except Exception:
            self.logging.exception("Chat turn failed")
            stream.emit({"type": "error", "message": STREAM_ERROR_MESSAGE})
        finally:
            await registry.dispose()
            stream.close()

    async def run_rounds(self, registry: ToolRegistry, messages: list[dict], stream: EventStream) -> str:
        """Call the model until it answers without tools, at most MAX_ROUNDS tool rounds.

        Appends assistant and tool-result messages to `messages` in place.

        Returns:
            str: The model's final text, unfiltered.
        """
        tools = [tool.model_dump() for tool in await registry.get_all_tools()]

        for round_no in range(1, MAX_ROUNDS + 1):
            blocks = await self._llm_client.do_messages(system=SYSTEM_PROMPT, messages=messages, tools=tools or None)
            result = RoundResult.from_content(blocks)
            if not result.wants_tools:
                return result.final_text or ""

            self.logging.debug("Round %d: %d tool call(s)", round_no, len(result.tool_calls))
            for call in result.tool_calls:
                stream.emit({"type": "tool", "name": call.name})
            messages.append({"role": "assistant", "content": result.content})

            tool_results = []
            for call in result.tool_calls:
                tool_results.append({
                    "type": "tool_result",
                    "tool_use_id": call.id,
                    "content": await self._execute(registry, call.name, call.input),
                })
            messages.append({"role": "user", "content": tool_results})

        # round cap reached with tool calls still pending: ask for text only
        self.logging.info("Tool round cap (%d) reached, requesting a text-only answer.", MAX_ROUNDS)
        blocks = await self._llm_client.do_messages(
            system=SYSTEM_PROMPT, messages=messages, tools=tools or None, allow_tools=False
        )
        return "".join(block.get("text", "") for block in blocks if block.get("type") == "text")

    async def _execute(self, registry: ToolRegistry, name: str, tool_input: Any) -> str:
        if not registry.validate_tool_input(name, tool_input):
            self.logging.warning("Rejected input for tool '%s'", name)
            return INVALID_TOOL_INPUT
        try:
            return await registry.execute_tool(name, tool_input)
        except Exception as e:
            self.logging.error("Tool '%s' failed: %s", name, e)
            return json.dumps({"error": f"Tool execution failed: {name}"})

    async def drain(self) -> None:
        """Wait for running turns; used at shutdown."""
        if self._turns:
            await asyncio.gather(*self._turns, return_exceptions=True)
