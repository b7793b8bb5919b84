"""Session token encode/decode.

Session tokens are HS256 JWTs carrying the user id (``sub``) and the global
role (``role``). They travel either in an ``Authorization: Bearer`` header or
in the session cookie; this module does not care which.
"""

import base64
import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

ISSUER = "dms"
_HEADER = {"alg": "HS256", "typ": "JWT"}


@dataclass(frozen=True)
class TokenPayload:
    """Decoded session claims."""
    sub: str
    role: str
    issued_at: datetime
    expires_at: datetime


def create_token(
    subject: str,
    role: str,
    secret: str,
    algorithm: str = "HS256",
    expires_hours: int = 24,
) -> str:
    """Create a signed session token.

    Args:
        subject: User id.
        role: ``"system_admin"`` or ``"user"``.
        secret: HMAC signing key.
        algorithm: Only HS256 supported.
        expires_hours: Hours until expiry. Negative values produce an
            already-expired token.
    """
    if algorithm != "HS256":
        raise ValueError(f"Unsupported algorithm: {algorithm}")

    issued = int(time.time())
    claims = {
        "sub": subject,
        "role": role,
        "iat": issued,
        "exp": issued + expires_hours * 3600,
        "iss": ISSUER,
    }
    head = _encode_segment(_HEADER)
    body = _encode_segment(claims)
    signature = _b64encode(_sign(head + b"." + body, secret))
    return b".".join((head, body, signature)).decode()


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> Optional[TokenPayload]:
    """Verify a session token and return its claims.

    Any defect (bad signature, expiry, foreign issuer, no subject, garbage)
    yields ``None``; the caller decides whether absence means 401.
    """
    if algorithm != "HS256":
        return None

    try:
        head, body, signature = token.encode().split(b".")
    except ValueError:
        return None

    try:
        if not hmac.compare_digest(_sign(head + b"." + body, secret), _b64decode(signature)):
            return None
        claims = json.loads(_b64decode(body))
        expires = int(claims["exp"])
        issued = int(claims.get("iat", 0))
    except (json.JSONDecodeError, KeyError, ValueError, TypeError):
        return None

    if claims.get("iss") != ISSUER or not claims.get("sub"):
        return None
    if time.time() > expires:
        return None

    return TokenPayload(
        sub=claims["sub"],
        role=claims.get("role", ""),
        issued_at=datetime.fromtimestamp(issued, tz=timezone.utc),
        expires_at=datetime.fromtimestamp(expires, tz=timezone.utc),
    )


def _sign(signing_input: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()


def _encode_segment(obj: dict) -> bytes:
    return _b64encode(json.dumps(obj, separators=(",", ":")).encode())


def _b64encode(data: bytes) -> bytes:
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64decode(data: bytes) -> bytes:
    return base64.urlsafe_b64decode(data + b"=" * (-len(data) % 4))
