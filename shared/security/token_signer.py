"""HMAC-signed opaque bearer tokens.

Wire format: base64( {"d": <payload json>, "s": <hex hmac-sha256 of d>} ).
The payload is serialised exactly once; "d" is the signed byte string.
"""

import base64
import binascii
import hashlib
import hmac
import json
from typing import Any

from shared.models.session import TokenPayload


def _mac(data: str, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), data.encode("utf-8"), hashlib.sha256).digest()


def sign_token(payload: dict[str, Any], secret: str) -> str:
    """Sign a payload and return the opaque token.

    Args:
        payload (dict[str, Any]): JSON-serialisable claims, e.g. {"jti", "sub", "iat", "exp"}.
        secret (str): Signing secret.

    Returns:
        str: The base64 token.
    """
    data = json.dumps(payload, separators=(",", ":"))
    envelope = json.dumps({"d": data, "s": _mac(data, secret).hex()}, separators=(",", ":"))
    return base64.b64encode(envelope.encode("utf-8")).decode("ascii")


def verify_token(token: str, secret: str) -> dict[str, Any] | None:
    """Check a token's MAC in constant time and return its payload.

    Every failure (bad base64, bad JSON, bad hex, wrong MAC, non-object payload)
    yields None, so callers cannot tell which step failed.

    Args:
        token (str): The opaque token.
        secret (str): Signing secret.

    Returns:
        dict[str, Any] | None: The payload, or None.
    """
    try:
        envelope = json.loads(base64.b64decode(token, validate=True).decode("utf-8"))
        data = envelope["d"]
        signature = bytes.fromhex(envelope["s"])
        if not isinstance(data, str):
            return None
        if not hmac.compare_digest(signature, _mac(data, secret)):
            return None
        payload = json.loads(data)
    except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError):
        return None
    return payload if isinstance(payload, dict) else None


def verify_token_payload(token: str, secret: str) -> TokenPayload | None:
    """verify_token() narrowed to well-formed access-token claims.

    Returns:
        TokenPayload | None: The claims, or None if the MAC or the claim shape is wrong.
    """
    data = verify_token(token, secret)
    if data is None:
        return None
    try:
        return TokenPayload.model_validate(data)
    except ValueError:
        return None
