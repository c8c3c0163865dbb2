"""Typed failures of the front door and the admission service.

Every error carries the HTTP status and the machine-readable code the client
branches on; routers render them as {"error": code}.
"""


class AgentError(Exception):
    """Base exception for request-level failures."""

    status_code = 500
    error = "internal_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.error)


class InputRejectedError(AgentError):
    """Malformed JSON, missing or oversize message."""

    status_code = 400
    error = "invalid_input"


class AccessRequiredError(AgentError):
    status_code = 403
    error = "access_required"


class TokenExpiredError(AgentError):
    """Bad signature or past expiry. Clients cannot tell the two apart."""

    status_code = 403
    error = "token_expired"


class TokenRevokedError(AgentError):
    status_code = 403
    error = "token_revoked"


class DemoLimitError(AgentError):
    status_code = 429
    error = "demo_limit"


class RateLimitError(AgentError):
    status_code = 429
    error = "rate_limited"


class ServerMisconfiguredError(AgentError):
    """A required secret is missing."""

    status_code = 500
    error = "server_misconfigured"


class AdmissionRequestError(AgentError):
    """An admission action failed with its own status and message."""

    def __init__(self, status_code: int, error: str):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
