"""Application exceptions.

Every error a request can end in is an ``AppError`` subclass carrying the
HTTP status it maps to. The handlers registered in ``app.main`` turn them
into ``{"success": false, "message": ...}`` bodies.
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base exception for all recoverable request errors."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Raised when request data is malformed or out of range."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message: str | None = None, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []


class DuplicateEmailError(AppError):
    """Raised when a write would give two users the same email."""

    status_code = 400
    default_message = "Email already in use"


class InvalidCredentialsError(AppError):
    """Raised on login with an unknown email or a wrong password.

    The two cases share one message so the response does not reveal which
    half of the credentials was wrong.
    """

    status_code = 401
    default_message = "Invalid credentials"


class DeactivatedError(AppError):
    """Raised when a deactivated account tries to authenticate."""

    status_code = 401
    default_message = "Account is deactivated"


class MissingTokenError(AppError):
    status_code = 401
    default_message = "Access token required"


class InvalidTokenError(AppError):
    status_code = 401
    default_message = "Invalid token"


class ForbiddenError(AppError):
    """Raised when an authenticated user lacks the role a route requires."""

    status_code = 403
    default_message = "Insufficient permissions"


class NotFoundError(AppError):
    status_code = 404
    default_message = "User not found"


class SelfDeleteError(AppError):
    status_code = 400
    default_message = "Cannot delete your own account"


class SelfDeactivateError(AppError):
    status_code = 400
    default_message = "Cannot deactivate your own account"


class RateLimitError(AppError):
    status_code = 429
    default_message = "Too many requests from this IP, please try again later."


class TokenError(Exception):
    """Raised by the token service when a token cannot be accepted.

    ``reason`` is one of ``MALFORMED``, ``SIGNATURE_INVALID`` or ``EXPIRED``.
    """

    MALFORMED = "malformed"
    SIGNATURE_INVALID = "signature_invalid"
    EXPIRED = "expired"

    def __init__(self, reason: str, detail: str = ""):
        self.reason = reason
        super().__init__(detail or reason)
