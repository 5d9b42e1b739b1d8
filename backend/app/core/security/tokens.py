"""Signed, time-limited bearer tokens (JWT)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from app.config import settings
from app.core.exceptions import TokenError


@dataclass(frozen=True)
class TokenPayload:
    """Claims of an accepted access token."""

    user_id: str
    expires_at: datetime


def create_access_token(
    user_id: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token for ``user_id``."""
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {"sub": str(user_id), "iat": now, "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> TokenPayload:
    """Verify ``token`` and return its claims.

    Raises:
        TokenError: with reason ``MALFORMED`` when the token cannot be parsed
            or carries no subject, ``SIGNATURE_INVALID`` when the signature
            does not match, and ``EXPIRED`` when ``exp`` is in the past.
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError as exc:
        raise TokenError(TokenError.MALFORMED, str(exc)) from exc
    if not isinstance(claims.get("sub"), str) or not claims["sub"]:
        raise TokenError(TokenError.MALFORMED, "Token has no subject")

    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError as exc:
        raise TokenError(TokenError.EXPIRED, str(exc)) from exc
    except JWTError as exc:
        raise TokenError(TokenError.SIGNATURE_INVALID, str(exc)) from exc

    exp = payload.get("exp")
    if not isinstance(exp, (int, float)):
        raise TokenError(TokenError.MALFORMED, "Token has no expiry")
    return TokenPayload(
        user_id=payload["sub"],
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
    )
