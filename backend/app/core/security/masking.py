"""Masking utilities that keep secrets and personal data out of log lines."""

from __future__ import annotations

import re
from urllib.parse import urlparse, urlunparse


def mask_email(email: str | None) -> str:
    """Hide the local part of an email address except its first character.

    Examples
    --------
    >>> mask_email("alice@example.org")
    'a****@example.org'
    >>> mask_email(None)
    ''
    """
    if not email:
        return ""
    local, sep, domain = email.partition("@")
    if not sep:
        return "****"
    return f"{local[:1]}****@{domain}"


def mask_url(url: str | None) -> str:
    """Strip the password from a connection-string URL.

    Examples
    --------
    >>> mask_url("postgresql+asyncpg://admin:s3cret@db:5432/users")
    'postgresql+asyncpg://admin:****@db:5432/users'
    >>> mask_url(None)
    ''
    """
    if not url:
        return ""

    try:
        parsed = urlparse(url)
        if parsed.password:
            user_part = parsed.username or ""
            host_part = parsed.hostname or ""
            port_part = f":{parsed.port}" if parsed.port else ""
            netloc = f"{user_part}:****@{host_part}{port_part}"
            return urlunparse(parsed._replace(netloc=netloc))
        return url
    except ValueError:
        # Non-standard URLs (e.g. an invalid port) fall back to a regex
        return re.sub(r"://([^:/]+):([^@]+)@", r"://\1:****@", url)
