"""Pure functions for issuing and decoding HS256 bearer tokens.

No state, just encode/decode. The auth dependency decodes; tests and
operator tooling issue tokens for human users (``actor="user"``) and AI
assistants (``actor="ai"``).
"""

import base64
import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

TOKEN_ISSUER = "docledger"


@dataclass(frozen=True)
class TokenPayload:
    """Decoded token claims. ``role`` carries the actor type."""
    sub: str
    role: str
    exp: datetime


def create_token(
    subject: str,
    secret: str,
    role: str = "user",
    algorithm: str = "HS256",
    expires_hours: int = 24,
) -> str:
    """Issue a signed token for *subject*.

    Args:
        subject: User id, or the id an AI assistant acts under.
        secret: HMAC signing key.
        role: ``"user"`` or ``"ai"``.
        algorithm: Only HS256 is supported.
        expires_hours: Lifetime; negative values produce an expired token.
    """
    if algorithm != "HS256":
        raise ValueError(f"Unsupported algorithm: {algorithm}")

    issued_at = int(time.time())
    claims = {
        "sub": subject,
        "role": role,
        "iat": issued_at,
        "exp": issued_at + expires_hours * 3600,
        "iss": TOKEN_ISSUER,
    }
    header = _encode_segment({"alg": "HS256", "typ": "JWT"})
    body = _encode_segment(claims)
    signing_input = header + b"." + body
    return (signing_input + b"." + _b64encode(_sign(signing_input, secret))).decode()


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> Optional[TokenPayload]:
    """Verify and decode a token.

    Returns ``None`` for anything invalid (bad signature, expired, wrong
    issuer, malformed) so the caller decides how to treat absence.
    """
    if algorithm != "HS256":
        return None
    try:
        header, body, signature = token.encode().split(b".")
    except ValueError:
        return None

    try:
        if not hmac.compare_digest(_sign(header + b"." + body, secret), _b64decode(signature)):
            return None
        claims = json.loads(_b64decode(body))
    except (ValueError, TypeError):
        return None

    if claims.get("iss") != TOKEN_ISSUER:
        return None
    exp = claims.get("exp", 0)
    if time.time() > exp:
        return None

    return TokenPayload(
        sub=claims.get("sub", ""),
        role=claims.get("role", "user"),
        exp=datetime.fromtimestamp(exp, tz=timezone.utc),
    )


def _sign(signing_input: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()


def _encode_segment(data: dict) -> bytes:
    return _b64encode(json.dumps(data, separators=(",", ":")).encode())


# base64url without padding
def _b64encode(data: bytes) -> bytes:
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64decode(data: bytes) -> bytes:
    return base64.urlsafe_b64decode(data + b"=" * (-len(data) % 4))
