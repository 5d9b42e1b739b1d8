"""Registration, login and self-service profile operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from fastapi.concurrency import run_in_threadpool

from app.core.exceptions import (
    DeactivatedError,
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
)
from app.core.security.masking import mask_email
from app.core.security.passwords import dummy_hash, hash_password, verify_password
from app.core.security.tokens import create_access_token
from app.models.user import User
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)


@dataclass
class AuthSession:
    """A freshly issued token and the user it belongs to."""

    token: str
    user: User


class AuthService:
    """Orchestrates the credential store, password hasher and token service.

    Inputs are expected to be validated and normalized already (see
    ``app.schemas.user``); this layer enforces the rules that need the store.
    """

    def __init__(self, store: UserStore) -> None:
        self.store = store

    async def register(self, *, name: str, email: str, password: str) -> AuthSession:
        if await self.store.email_taken(email):
            raise DuplicateEmailError("User already exists with this email")

        # bcrypt is CPU bound, keep it off the event loop
        hashed = await run_in_threadpool(hash_password, password)
        try:
            user = await self.store.create(name=name, email=email, hashed_password=hashed)
        except DuplicateEmailError:
            raise DuplicateEmailError("User already exists with this email") from None

        logger.info("New user registered: %s", mask_email(user.email))
        return AuthSession(token=create_access_token(user.id), user=user)

    async def login(self, *, email: str, password: str) -> AuthSession:
        user = await self.store.get_by_email(email)
        # Unknown emails still pay for one bcrypt check
        hashed = user.hashed_password if user is not None else dummy_hash()
        password_ok = await run_in_threadpool(verify_password, password, hashed)
        if user is None or not password_ok:
            logger.warning("Failed login attempt for %s", mask_email(email))
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.warning("Login refused for deactivated account %s", mask_email(email))
            raise DeactivatedError()

        user = await self.store.update(user, {"last_login": datetime.now(timezone.utc)})
        logger.info("User logged in: %s", mask_email(user.email))
        return AuthSession(token=create_access_token(user.id), user=user)

    async def get_profile(self, user_id: str) -> User:
        user = await self.store.get_by_id(user_id)
        if user is None:
            raise NotFoundError()
        return user

    async def update_profile(
        self,
        user_id: str,
        *,
        name: str | None = None,
        email: str | None = None,
    ) -> User:
        user = await self.get_profile(user_id)

        changes: dict[str, str] = {}
        if name is not None:
            changes["name"] = name
        if email is not None and email != user.email:
            if await self.store.email_taken(email, exclude_id=user.id):
                raise DuplicateEmailError()
            changes["email"] = email

        if not changes:
            return user
        user = await self.store.update(user, changes)
        logger.info("Profile updated: %s", mask_email(user.email))
        return user
