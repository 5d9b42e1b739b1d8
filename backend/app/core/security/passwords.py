"""Password hashing with bcrypt."""

from __future__ import annotations

import secrets
from functools import lru_cache

import bcrypt

from app.config import settings

# bcrypt only ever looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password using bcrypt with a fresh salt."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(_encode(password), salt).decode()


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Verify a plaintext password against a hashed one.

    A missing or malformed hash never matches.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_encode(plain_password), hashed_password.encode())
    except ValueError:
        return False


@lru_cache
def dummy_hash() -> str:
    """A hash no submitted password is checked against for real.

    Login verifies against it when the email is unknown so both failure
    paths spend the same bcrypt work.
    """
    return hash_password(secrets.token_urlsafe(32))
