"""Tests for access requests, approvals and token administration."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from services.admission.AdmissionService import MAX_TIMEOUT_MINUTES, PENDING_TTL_MS, AdmissionService
from shared.helper.RateLimiter import RateLimiter
from shared.models.errors import AdmissionRequestError, RateLimitError
from shared.security.token_signer import verify_token_payload
from tests.fakes import ADMIN_KEY, SIGNING_SECRET

IP = "203.0.113.7"
UA = "pytest-agent"


def _admin(action: str, **fields) -> dict:
    return {"action": action, "admin_key": ADMIN_KEY, **fields}


@pytest.fixture()
def mail_client():
    client = MagicMock()
    client.do_send = AsyncMock()
    client.get_owner_address.return_value = "owner@example.com"
    return client


@pytest.fixture()
def service(helper_config, session_store, clock, mail_client) -> AdmissionService:
    return AdmissionService(
        helper_config=helper_config,
        session_store=session_store,
        signing_secret=SIGNING_SECRET,
        admin_key=ADMIN_KEY,
        mail_client=mail_client,
        rate_limiter=RateLimiter(max_requests=100, window_seconds=600, clock=clock),
        clock=clock,
    )


async def _use_auto_approvals(service, ip=IP, device_id=None, times=3):
    body = {"action": "request"}
    if device_id:
        body["device_id"] = device_id
    for _ in range(times):
        assert "token" in await service.do_action(body, ip, UA)


class TestRequest:
    async def test_first_requests_are_auto_approved(self, service, clock):
        result = await service.do_action({"action": "request"}, IP, UA)

        payload = verify_token_payload(result["token"], SIGNING_SECRET)
        assert payload.sub == result["request_id"]
        assert payload.exp == int(clock() * 1000) + 5 * 60 * 1000
        assert result["expires"] == payload.exp

    async def test_fourth_request_from_same_ip_is_queued(self, service):
        await _use_auto_approvals(service)
        result = await service.do_action({"action": "request"}, IP, UA)

        assert set(result) == {"request_id"}
        assert (await service.do_action({"action": "poll", "request_id": result["request_id"]}, IP, UA)) == {
            "status": "pending"
        }

    async def test_device_quota_follows_the_device_across_ips(self, service):
        await _use_auto_approvals(service, ip="10.0.0.1", device_id="device-1")
        result = await service.do_action({"action": "request", "device_id": "device-1"}, "10.0.0.2", UA)
        assert "token" not in result

    async def test_owner_is_notified(self, service, mail_client):
        await service.do_action({"action": "request"}, IP, UA)
        await service.drain()

        mail_client.do_send.assert_awaited_once()
        kwargs = mail_client.do_send.await_args.kwargs
        assert kwargs["to"] == ["owner@example.com"]
        assert kwargs["subject"] == "New Chatbot Token Request"
        assert "Auto-approved for 5 minutes." in kwargs["text"]

    async def test_mail_failure_does_not_fail_the_request(self, service, mail_client):
        mail_client.do_send.side_effect = RuntimeError("smtp down")
        result = await service.do_action({"action": "request"}, IP, UA)
        await service.drain()
        assert "token" in result


class TestPoll:
    async def test_unknown_without_id(self, service):
        assert await service.do_action({"action": "poll"}, IP, UA) == {"status": "unknown"}

    async def test_denied_when_nothing_known(self, service):
        assert await service.do_action({"action": "poll", "request_id": "nope"}, IP, UA) == {"status": "denied"}

    async def test_pending_request_expires_after_a_week(self, service, session_store, clock):
        await _use_auto_approvals(service)
        request_id = (await service.do_action({"action": "request"}, IP, UA))["request_id"]

        clock.advance(PENDING_TTL_MS / 1000 + 1)
        assert await service.do_action({"action": "poll", "request_id": request_id}, IP, UA) == {"status": "expired"}
        assert await session_store.get_pending(request_id) is None

    async def test_approved_then_expired(self, service, clock):
        result = await service.do_action({"action": "request"}, IP, UA)
        polled = await service.do_action({"action": "poll", "request_id": result["request_id"]}, IP, UA)
        assert polled == {"status": "approved", "token": result["token"]}

        clock.advance(5 * 60 + 1)
        polled = await service.do_action({"action": "poll", "request_id": result["request_id"]}, IP, UA)
        assert polled == {"status": "expired"}


class TestSubmitEmail:
    async def test_email_is_stored_on_pending_request(self, service, session_store):
        await _use_auto_approvals(service)
        request_id = (await service.do_action({"action": "request"}, IP, UA))["request_id"]

        result = await service.do_action({"action": "submit_email", "request_id": request_id, "email": "v@example.com"}, IP, UA)
        assert result == {"ok": True}
        assert (await session_store.get_pending(request_id)).email == "v@example.com"

    @pytest.mark.parametrize(
        "body, status, error",
        [
            ({}, 400, "request_id required"),
            ({"request_id": "r"}, 400, "valid email required"),
            ({"request_id": "r", "email": "not-an-email"}, 400, "valid email required"),
            ({"request_id": "r", "email": "v@example.com"}, 404, "Request not found"),
        ],
    )
    async def test_rejections(self, service, body, status, error):
        with pytest.raises(AdmissionRequestError) as exc:
            await service.do_action({"action": "submit_email", **body}, IP, UA)
        assert (exc.value.status_code, exc.value.error) == (status, error)


class TestValidate:
    async def test_lifecycle(self, service, clock):
        token = (await service.do_action({"action": "request"}, IP, UA))["token"]
        jti = verify_token_payload(token, SIGNING_SECRET).jti

        valid = await service.do_action({"action": "validate", "token": token}, IP, UA)
        assert valid["valid"] is True

        assert await service.do_action({"action": "validate", "token": "garbage"}, IP, UA) == {
            "valid": False, "reason": "invalid_signature",
        }
        await service.do_action(_admin("revoke", jti=jti), IP, UA)
        assert await service.do_action({"action": "validate", "token": token}, IP, UA) == {
            "valid": False, "reason": "revoked",
        }

        clock.advance(10 * 60)
        assert (await service.do_action({"action": "validate", "token": token}, IP, UA))["reason"] == "expired"

    async def test_missing_token(self, service):
        assert await service.do_action({"action": "validate"}, IP, UA) == {"valid": False}


class TestAdmin:
    async def test_wrong_key(self, service):
        with pytest.raises(AdmissionRequestError) as exc:
            await service.do_action({"action": "pending", "admin_key": "wrong"}, IP, UA)
        assert exc.value.status_code == 401

    async def test_admin_not_configured(self, helper_config, session_store):
        service = AdmissionService(helper_config, session_store, SIGNING_SECRET, admin_key=None)
        with pytest.raises(AdmissionRequestError) as exc:
            await service.do_action(_admin("tokens"), IP, UA)
        assert (exc.value.status_code, exc.value.error) == (500, "Admin not configured")

    async def test_unknown_action(self, service):
        with pytest.raises(AdmissionRequestError) as exc:
            await service.do_action({"action": "explode"}, IP, UA)
        assert (exc.value.status_code, exc.value.error) == (400, "Unknown action")

    async def test_approve_clamps_timeout_and_notifies_requester(self, service, session_store, mail_client, clock):
        await _use_auto_approvals(service)
        request_id = (await service.do_action({"action": "request"}, IP, UA))["request_id"]
        await service.do_action({"action": "submit_email", "request_id": request_id, "email": "v@example.com"}, IP, UA)

        result = await service.do_action(_admin("approve", request_id=request_id, timeout_minutes=999999), IP, UA)
        await service.drain()

        assert result["ok"] is True
        assert result["expires"] == int(clock() * 1000) + MAX_TIMEOUT_MINUTES * 60 * 1000
        assert await session_store.get_pending(request_id) is None
        recipients = [call.kwargs["to"] for call in mail_client.do_send.await_args_list]
        assert ["v@example.com"] in recipients

    async def test_approve_defaults_to_an_hour(self, service, clock):
        await _use_auto_approvals(service)
        request_id = (await service.do_action({"action": "request"}, IP, UA))["request_id"]
        result = await service.do_action(_admin("approve", request_id=request_id), IP, UA)
        assert result["expires"] == int(clock() * 1000) + 60 * 60 * 1000

    async def test_approve_unknown_request(self, service):
        with pytest.raises(AdmissionRequestError) as exc:
            await service.do_action(_admin("approve", request_id="missing"), IP, UA)
        assert exc.value.status_code == 404

    async def test_deny(self, service):
        await _use_auto_approvals(service)
        request_id = (await service.do_action({"action": "request"}, IP, UA))["request_id"]
        assert await service.do_action(_admin("deny", request_id=request_id), IP, UA) == {"ok": True}
        assert await service.do_action({"action": "poll", "request_id": request_id}, IP, UA) == {"status": "denied"}

    async def test_listings(self, service, session_store, clock):
        await _use_auto_approvals(service)
        clock.advance(1)
        request_id = (await service.do_action({"action": "request"}, IP, UA))["request_id"]

        pending = (await service.do_action(_admin("pending"), IP, UA))["pending"]
        assert [item["id"] for item in pending] == [request_id]

        tokens = (await service.do_action(_admin("tokens"), IP, UA))["tokens"]
        assert len(tokens) == 3
        await session_store.put_count(tokens[0]["jti"], 4)
        tokens = (await service.do_action(_admin("tokens"), IP, UA))["tokens"]
        assert tokens[0]["msg_count"] == 4
        assert tokens[0]["is_expired"] is False

    async def test_reset_limit(self, service, session_store):
        await session_store.put_count("j1", 25)
        assert await service.do_action(_admin("reset_limit", jti="j1"), IP, UA) == {"ok": True}
        assert await session_store.get_count("j1") == 0

    async def test_clear(self, service):
        await _use_auto_approvals(service)
        await service.do_action({"action": "request"}, IP, UA)
        assert await service.do_action(_admin("clear"), IP, UA) == {"ok": True, "cleared": 4}
        assert (await service.do_action(_admin("tokens"), IP, UA))["tokens"] == []


async def test_visitor_rate_limit(helper_config, session_store, clock):
    service = AdmissionService(
        helper_config, session_store, SIGNING_SECRET, ADMIN_KEY,
        rate_limiter=RateLimiter(max_requests=2, window_seconds=600, clock=clock), clock=clock,
    )
    await service.do_action({"action": "request"}, IP, UA)
    await service.do_action({"action": "request"}, IP, UA)
    with pytest.raises(RateLimitError):
        await service.do_action({"action": "request"}, IP, UA)

    # polling is not rate limited
    assert await service.do_action({"action": "poll"}, IP, UA) == {"status": "unknown"}

    clock.advance(601)
    assert "request_id" in await service.do_action({"action": "request"}, IP, UA)
