"""
Core security helpers — session ids, bearer parsing and platform token claims.

The console never signs tokens itself. Platform JWTs are only read (without
signature verification) to learn when they expire, so an admin session is
never kept alive past the token it wraps.
"""

import logging
import secrets
from datetime import datetime, timezone

import jwt

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def new_session_id() -> str:
    """Opaque, URL-safe session identifier."""
    return secrets.token_urlsafe(32)


def parse_bearer(authorization: str | None) -> str | None:
    """Return the credential of an ``Authorization: Bearer <x>`` header."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    value = authorization[len(BEARER_PREFIX):].strip()
    return value or None


def decode_token_claims(token: str) -> dict:
    """
    Read the claims of a platform JWT without verifying it.

    Returns ``{}`` for anything that is not a decodable JWT.
    """
    try:
        return jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False},
            algorithms=["HS256", "RS256"],
        )
    except jwt.PyJWTError as exc:
        logger.debug("Could not decode platform token claims: %s", exc)
        return {}


def token_expiry(token: str) -> datetime | None:
    """The token's ``exp`` claim as an aware UTC datetime, if present."""
    exp = decode_token_claims(token).get("exp")
    if exp is None:
        return None
    try:
        return datetime.fromtimestamp(int(exp), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        return None


def is_token_expired(token: str, now: datetime | None = None) -> bool:
    expires_at = token_expiry(token)
    if expires_at is None:
        return False
    now = now or datetime.now(timezone.utc)
    return expires_at <= now
