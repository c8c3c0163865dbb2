"""Records persisted in the session store, one JSON document per key."""

from typing import Literal

from pydantic import BaseModel


class PendingRequest(BaseModel):
    """An access request waiting for an admin decision. Evicted after 7 days."""

    id: str
    ip: str
    ua: str
    ts: int
    status: Literal["pending"] = "pending"
    email: str | None = None
    device_id: str | None = None


class TokenRecord(BaseModel):
    """An issued bearer token. Its presence under `jti` is what keeps the token valid."""

    jti: str
    request_id: str
    ip: str
    created: int
    expires: int
    timeout_minutes: int
    signed_token: str


class TokenPayload(BaseModel):
    """The signed part of a bearer token. Timestamps are epoch milliseconds."""

    jti: str
    sub: str
    iat: int
    exp: int


class MessageCount(BaseModel):
    count: int = 0


class AutoApprovalCounter(BaseModel):
    count: int = 0
