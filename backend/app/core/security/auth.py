"""Bearer-token authentication and role-based authorization dependencies."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.api.dependencies import UserStoreDep
from app.core.exceptions import (
    DeactivatedError,
    ForbiddenError,
    InvalidTokenError,
    MissingTokenError,
    TokenError,
)
from app.core.security.tokens import TokenPayload, decode_access_token
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(
    auto_error=False,  # Return None so a missing token maps to our own 401 body
    description="Authorization: Bearer <token>",
)


@dataclass(frozen=True)
class AuthContext:
    """The authenticated caller of a request."""

    user: User
    token: TokenPayload

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def role(self) -> UserRole:
        return self.user.role


async def get_current_user(
    store: UserStoreDep,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthContext:
    """Resolve the caller from the ``Authorization`` header.

    Raises ``MissingTokenError`` without a bearer token, ``InvalidTokenError``
    when the token is rejected or its user no longer exists, and
    ``DeactivatedError`` when the account has been deactivated since the
    token was issued.
    """
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()

    try:
        payload = decode_access_token(credentials.credentials)
    except TokenError as exc:
        logger.debug("Rejected token: %s", exc.reason)
        if exc.reason == TokenError.EXPIRED:
            raise InvalidTokenError("Token has expired") from exc
        raise InvalidTokenError() from exc

    user = await store.get_by_id(payload.user_id)
    if user is None:
        raise InvalidTokenError("User not found")
    if not user.is_active:
        raise DeactivatedError()

    return AuthContext(user=user, token=payload)


CurrentUser = Annotated[AuthContext, Depends(get_current_user)]


def require_roles(*roles: UserRole | str) -> Callable[[AuthContext], Awaitable[AuthContext]]:
    """Build a dependency that admits only callers holding one of ``roles``.

    Authentication always runs first. An empty allow-list admits nobody.
    """
    allowed = frozenset(UserRole(r) for r in roles)

    async def check_role(context: CurrentUser) -> AuthContext:
        if context.role not in allowed:
            logger.warning(
                "Forbidden: user %s with role %s needs one of %s",
                context.user_id,
                context.role.value,
                sorted(r.value for r in allowed),
            )
            raise ForbiddenError()
        return context

    return check_role


AdminUser = Annotated[AuthContext, Depends(require_roles(UserRole.ADMIN))]
