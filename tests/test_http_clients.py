"""Tests for the Anthropic and Resend HTTP clients against an httpx mock transport."""

import json

import httpx
import pytest

from shared.clients.ClientInterface import ClientRequestError
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.clients.llm.anthropic.LLMClientAnthropic import LLMClientAnthropic
from shared.clients.mail.MailClientManager import MailClientManager
from shared.clients.mail.resend.MailClientResend import MailClientResend


def _mount(client, handler) -> list[httpx.Request]:
    """Replace the pooled client with one backed by a handler; returns the captured requests."""
    seen: list[httpx.Request] = []

    def _capture(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client._client = httpx.AsyncClient(transport=httpx.MockTransport(_capture))
    return seen


@pytest.fixture()
def anthropic(helper_config, monkeypatch) -> LLMClientAnthropic:
    monkeypatch.setenv("LLM_ANTHROPIC_API_KEY", "sk-test")
    monkeypatch.delenv("LLM_ANTHROPIC_BASE_URL", raising=False)
    return LLMClientAnthropic(helper_config=helper_config)


class TestAnthropic:
    def test_payload_forbids_tools_on_text_only_call(self, anthropic):
        tools = [{"name": "t", "description": "", "input_schema": {"type": "object", "properties": {}}}]
        payload = anthropic.get_messages_payload("sys", [], tools, allow_tools=False, max_tokens=10)
        assert payload["tool_choice"] == {"type": "none"}
        assert payload["tools"] == tools

        payload = anthropic.get_messages_payload("sys", [], None, allow_tools=False, max_tokens=10)
        assert "tools" not in payload and "tool_choice" not in payload

    async def test_do_messages(self, anthropic):
        blocks = [{"type": "text", "text": "hi"}]
        seen = _mount(anthropic, lambda request: httpx.Response(200, json={"content": blocks}))

        assert await anthropic.do_messages(system="sys", messages=[{"role": "user", "content": "q"}]) == blocks
        request = seen[0]
        assert str(request.url) == "https://api.anthropic.com/v1/messages"
        assert request.headers["x-api-key"] == "sk-test"
        assert request.headers["anthropic-version"] == "2023-06-01"
        body = json.loads(request.content)
        assert body["model"] == anthropic.chat_model
        assert body["max_tokens"] == anthropic.max_tokens

    async def test_complete_text_joins_text_blocks(self, anthropic):
        content = [{"type": "text", "text": "a"}, {"type": "tool_use", "id": "x"}, {"type": "text", "text": "b"}]
        _mount(anthropic, lambda request: httpx.Response(200, json={"content": content}))
        assert await anthropic.do_complete_text(system="s", prompt="p") == "ab"

    async def test_error_status_raises(self, anthropic):
        _mount(anthropic, lambda request: httpx.Response(529, json={"error": "overloaded"}))
        with pytest.raises(ClientRequestError) as exc:
            await anthropic.do_messages(system="s", messages=[])
        assert exc.value.status_code == 529

    async def test_requires_boot(self, anthropic):
        with pytest.raises(RuntimeError):
            await anthropic.do_healthcheck()

    def test_missing_key_is_reported_not_raised(self, helper_config, monkeypatch):
        monkeypatch.delenv("LLM_ANTHROPIC_API_KEY", raising=False)
        assert LLMClientAnthropic(helper_config=helper_config).has_api_key() is False

    def test_manager_rejects_unknown_engine(self, helper_config, monkeypatch):
        monkeypatch.setenv("LLM_ENGINE", "nonexistent")
        with pytest.raises(ValueError):
            LLMClientManager(helper_config)


class TestResend:
    async def test_send(self, helper_config, monkeypatch):
        monkeypatch.setenv("MAIL_RESEND_API_KEY", "re-test")
        monkeypatch.setenv("MAIL_RESEND_TO", "owner@example.com")
        client = MailClientResend(helper_config=helper_config)
        seen = _mount(client, lambda request: httpx.Response(200, json={"id": "m1"}))

        await client.do_send(to=[client.get_owner_address()], subject="Subject", text="Body")
        request = seen[0]
        assert str(request.url) == "https://api.resend.com/emails"
        assert request.headers["authorization"] == "Bearer re-test"
        assert json.loads(request.content)["to"] == ["owner@example.com"]

    def test_manager_without_engine(self, helper_config, monkeypatch):
        monkeypatch.delenv("MAIL_ENGINE", raising=False)
        assert MailClientManager(helper_config).get_client() is None

    def test_manager_with_missing_key(self, helper_config, monkeypatch):
        monkeypatch.setenv("MAIL_ENGINE", "resend")
        monkeypatch.delenv("MAIL_RESEND_API_KEY", raising=False)
        assert MailClientManager(helper_config).get_client() is None
