"""Access admission for the chat demo.

Visitors request access and are either auto-approved with a short token or queued
for an admin. Admins approve, deny, revoke and inspect. Every action is a dict in,
dict out; failures raise AgentError subclasses that carry their HTTP status.
"""

import asyncio
import hmac
import re
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from services.session.SessionStore import SessionStore, device_key, ip_key
from shared.clients.mail.MailClientInterface import MailClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.helper.RateLimiter import RateLimiter
from shared.models.errors import AdmissionRequestError, RateLimitError
from shared.models.session import PendingRequest, TokenPayload, TokenRecord
from shared.security.token_signer import sign_token, verify_token_payload

PENDING_TTL_MS = 7 * 24 * 60 * 60 * 1000
AUTO_APPROVAL_MINUTES = 5
AUTO_APPROVAL_LIMIT = 3
DEFAULT_TIMEOUT_MINUTES = 60
MAX_TIMEOUT_MINUTES = 7 * 24 * 60
UA_MAX_CHARS = 120
DEVICE_ID_MAX_CHARS = 128
EMAIL_MAX_CHARS = 254

ADMIN_ACTIONS = ("pending", "tokens", "reset_limit", "approve", "deny", "revoke", "clear")
RATE_LIMITED_ACTIONS = ("request", "submit_email")

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _text(body: dict, field: str) -> str:
    value = body.get(field)
    return value.strip() if isinstance(value, str) else ""


class AdmissionService:
    def __init__(
        self,
        helper_config: HelperConfig,
        session_store: SessionStore,
        signing_secret: str,
        admin_key: str | None,
        mail_client: MailClientInterface | None = None,
        rate_limiter: RateLimiter | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._store = session_store
        self._signing_secret = signing_secret
        self._admin_key = admin_key
        self._mail_client = mail_client
        self._clock = clock
        self._rate_limiter = rate_limiter or RateLimiter(
            max_requests=helper_config.get_number_val("TOKEN_RATE_LIMIT_MAX", default=5),
            window_seconds=helper_config.get_number_val("TOKEN_RATE_LIMIT_WINDOW", default=600),
            clock=clock,
        )
        self._background: set[asyncio.Task] = set()

        self._handlers: dict[str, Callable[[dict, str, str], Any]] = {
            "request": self._request,
            "submit_email": self._submit_email,
            "poll": self._poll,
            "validate": self._validate,
            "pending": self._list_pending,
            "tokens": self._list_tokens,
            "reset_limit": self._reset_limit,
            "approve": self._approve,
            "deny": self._deny,
            "revoke": self._revoke,
            "clear": self._clear,
        }

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    ##########################################
    ############### DISPATCH #################
    ##########################################

    async def do_action(self, body: dict, ip: str, ua: str) -> dict:
        """Run one admission action.

        Args:
            body (dict): Parsed request body; "action" selects the handler.
            ip (str): Caller IP.
            ua (str): Caller user agent.

        Returns:
            dict: The JSON response body.

        Raises:
            RateLimitError: Visitor rate limit exhausted.
            AdmissionRequestError: Bad input (400), bad admin key (401), unknown
                request (404) or admin not configured (500).
        """
        action = _text(body, "action")
        handler = self._handlers.get(action)
        if handler is None:
            raise AdmissionRequestError(400, "Unknown action")

        if action in RATE_LIMITED_ACTIONS and not self._rate_limiter.is_allowed(ip):
            self.logging.warning("Token rate limit hit for %s (%s)", ip, action)
            raise RateLimitError()

        if action in ADMIN_ACTIONS:
            self._authorize_admin(body)

        return await handler(body, ip, ua)

    def _authorize_admin(self, body: dict) -> None:
        if not self._admin_key:
            raise AdmissionRequestError(500, "Admin not configured")
        supplied = body.get("admin_key")
        if not isinstance(supplied, str) or not hmac.compare_digest(supplied.encode("utf-8"), self._admin_key.encode("utf-8")):
            self.logging.warning("Rejected admin action with a wrong admin key")
            raise AdmissionRequestError(401, "Unauthorized")

    ##########################################
    ################ TOKENS ##################
    ##########################################

    async def _issue_token(self, request_id: str, ip: str, timeout_minutes: int) -> TokenRecord:
        now = self._now_ms()
        payload = TokenPayload(jti=str(uuid.uuid4()), sub=request_id, iat=now, exp=now + timeout_minutes * 60 * 1000)
        record = TokenRecord(
            jti=payload.jti,
            request_id=request_id,
            ip=ip,
            created=now,
            expires=payload.exp,
            timeout_minutes=timeout_minutes,
            signed_token=sign_token(payload.model_dump(), self._signing_secret),
        )
        await self._store.put_token(record)
        return record

    ##########################################
    ############### VISITOR ##################
    ##########################################

    async def _request(self, body: dict, ip: str, ua: str) -> dict:
        request_id = str(uuid.uuid4())
        device_id = _text(body, "device_id")[:DEVICE_ID_MAX_CHARS] or None
        counter_keys = [ip_key(ip)] + ([device_key(device_id)] if device_id else [])
        counts = [await self._store.get_auto_approvals(key) for key in counter_keys]

        if all(count < AUTO_APPROVAL_LIMIT for count in counts):
            record = await self._issue_token(request_id, ip, AUTO_APPROVAL_MINUTES)
            for key in counter_keys:
                await self._store.increment_auto_approvals(key)
            self.logging.info("Auto-approved access request %s for %s", request_id, ip)
            self._notify_owner(request_id, ip, ua, record.created, auto_approved=True)
            return {"request_id": request_id, "token": record.signed_token, "expires": record.expires}

        pending = PendingRequest(id=request_id, ip=ip, ua=(ua or "unknown")[:UA_MAX_CHARS], ts=self._now_ms(), device_id=device_id)
        await self._store.put_pending(pending)
        self.logging.info("Queued access request %s for %s (auto-approval quota used)", request_id, ip)
        self._notify_owner(request_id, ip, pending.ua, pending.ts, auto_approved=False)
        return {"request_id": request_id}

    async def _submit_email(self, body: dict, ip: str, ua: str) -> dict:
        request_id = _text(body, "request_id")
        email = _text(body, "email")
        if not request_id:
            raise AdmissionRequestError(400, "request_id required")
        if not email or len(email) > EMAIL_MAX_CHARS or not _EMAIL_RE.match(email):
            raise AdmissionRequestError(400, "valid email required")
        pending = await self._store.get_pending(request_id)
        if pending is None:
            raise AdmissionRequestError(404, "Request not found")
        await self._store.put_pending(pending.model_copy(update={"email": email}))
        return {"ok": True}

    async def _poll(self, body: dict, ip: str, ua: str) -> dict:
        request_id = _text(body, "request_id")
        if not request_id:
            return {"status": "unknown"}

        now = self._now_ms()
        pending = await self._store.get_pending(request_id)
        if pending is not None:
            if now - pending.ts > PENDING_TTL_MS:
                await self._store.delete_pending(request_id)
                return {"status": "expired"}
            return {"status": "pending"}

        record = await self._store.find_token_by_request(request_id)
        if record is None:
            return {"status": "denied"}
        if now > record.expires:
            await self._store.delete_token(record.jti)
            return {"status": "expired"}
        return {"status": "approved", "token": record.signed_token}

    async def _validate(self, body: dict, ip: str, ua: str) -> dict:
        token = _text(body, "token")
        if not token:
            return {"valid": False}
        payload = verify_token_payload(token, self._signing_secret)
        if payload is None:
            return {"valid": False, "reason": "invalid_signature"}
        if self._now_ms() > payload.exp:
            return {"valid": False, "reason": "expired"}
        if await self._store.get_token(payload.jti) is None:
            return {"valid": False, "reason": "revoked"}
        return {"valid": True, "expires": payload.exp}

    ##########################################
    ################ ADMIN ###################
    ##########################################

    async def _list_pending(self, body: dict, ip: str, ua: str) -> dict:
        now = self._now_ms()
        items = []
        for request in await self._store.list_pending():
            if now - request.ts > PENDING_TTL_MS:
                await self._store.delete_pending(request.id)
                continue
            items.append(request.model_dump())
        items.sort(key=lambda item: item["ts"], reverse=True)
        return {"pending": items}

    async def _list_tokens(self, body: dict, ip: str, ua: str) -> dict:
        now = self._now_ms()
        items = []
        for record in await self._store.list_tokens():
            item = record.model_dump()
            item["is_expired"] = now > record.expires
            item["msg_count"] = await self._store.get_count(record.jti)
            items.append(item)
        items.sort(key=lambda item: item["created"], reverse=True)
        return {"tokens": items}

    async def _reset_limit(self, body: dict, ip: str, ua: str) -> dict:
        jti = _text(body, "jti")
        if not jti:
            raise AdmissionRequestError(400, "jti required")
        await self._store.put_count(jti, 0)
        return {"ok": True}

    async def _approve(self, body: dict, ip: str, ua: str) -> dict:
        request_id = _text(body, "request_id")
        if not request_id:
            raise AdmissionRequestError(400, "request_id required")
        try:
            timeout_minutes = int(body.get("timeout_minutes") or DEFAULT_TIMEOUT_MINUTES)
        except (TypeError, ValueError):
            timeout_minutes = DEFAULT_TIMEOUT_MINUTES
        if timeout_minutes <= 0:
            timeout_minutes = DEFAULT_TIMEOUT_MINUTES
        timeout_minutes = min(timeout_minutes, MAX_TIMEOUT_MINUTES)

        pending = await self._store.get_pending(request_id)
        if pending is None:
            raise AdmissionRequestError(404, "Request not found")

        record = await self._issue_token(request_id, pending.ip, timeout_minutes)
        await self._store.delete_pending(request_id)
        self.logging.info("Approved access request %s for %d minute(s)", request_id, timeout_minutes)
        if pending.email:
            self._notify_requester(pending.email, timeout_minutes)
        return {"ok": True, "token": record.signed_token, "expires": record.expires}

    async def _deny(self, body: dict, ip: str, ua: str) -> dict:
        request_id = _text(body, "request_id")
        if not request_id:
            raise AdmissionRequestError(400, "request_id required")
        await self._store.delete_pending(request_id)
        self.logging.info("Denied access request %s", request_id)
        return {"ok": True}

    async def _revoke(self, body: dict, ip: str, ua: str) -> dict:
        jti = _text(body, "jti")
        if not jti:
            raise AdmissionRequestError(400, "jti required")
        await self._store.delete_token(jti)
        self.logging.info("Revoked token %s", jti)
        return {"ok": True}

    async def _clear(self, body: dict, ip: str, ua: str) -> dict:
        cleared = 0
        for request in await self._store.list_pending():
            await self._store.delete_pending(request.id)
            cleared += 1
        for record in await self._store.list_tokens():
            await self._store.delete_token(record.jti)
            cleared += 1
        self.logging.warning("Cleared %d pending request(s) and token(s)", cleared)
        return {"ok": True, "cleared": cleared}

    ##########################################
    ############### NOTIFY ###################
    ##########################################

    def _fire_and_forget(self, to: list[str], subject: str, text: str) -> None:
        if self._mail_client is None:
            return

        async def _send() -> None:
            try:
                await self._mail_client.do_send(to=to, subject=subject, text=text)
            except Exception as e:
                self.logging.error("Email notification failed: %s", e)

        task = asyncio.create_task(_send())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _notify_owner(self, request_id: str, ip: str, ua: str, ts: int, auto_approved: bool) -> None:
        if self._mail_client is None:
            return
        when = datetime.fromtimestamp(ts / 1000, tz=timezone.utc).isoformat()
        text = "\n".join([
            "New chatbot token request:",
            "",
            f"IP: {ip}",
            f"User Agent: {ua}",
            f"Time: {when}",
            f"Request ID: {request_id}",
            "",
            "Auto-approved for 5 minutes." if auto_approved else "Go to your admin portal to approve or deny.",
        ])
        self._fire_and_forget([self._mail_client.get_owner_address()], "New Chatbot Token Request", text)

    def _notify_requester(self, email: str, timeout_minutes: int) -> None:
        text = "\n".join([
            "Your request to chat with the portfolio assistant was approved.",
            "",
            f"Your access lasts {timeout_minutes} minute(s). Return to the site to start chatting.",
        ])
        self._fire_and_forget([email], "Your chatbot access was approved", text)

    async def drain(self) -> None:
        """Wait for outstanding notifications; used at shutdown."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
