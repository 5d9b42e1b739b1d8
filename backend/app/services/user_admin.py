"""Administrative listing, lookup, update, deletion and statistics of users."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from app.config import settings
from app.core.exceptions import (
    DuplicateEmailError,
    NotFoundError,
    SelfDeactivateError,
    SelfDeleteError,
)
from app.core.security.masking import mask_email
from app.models.user import User, UserRole
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
RECENT_WINDOW = timedelta(days=7)


def parse_positive_int(raw: str | None, default: int) -> int:
    """Parse a query-string integer, falling back to ``default``.

    Missing, non-numeric and non-positive values all yield the default.
    """
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value > 0 else default


def parse_bool_flag(raw: str | None) -> bool | None:
    """``"true"`` is True, any other present value is False."""
    if raw is None:
        return None
    return raw.strip().lower() == "true"


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0


@dataclass
class UserPage:
    users: list[User]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return page_count(self.total, self.limit)


@dataclass
class UserStatistics:
    total_users: int
    active_users: int
    inactive_users: int
    admin_users: int
    recent_users: int


class UserAdminService:
    """Operations behind the admin-only ``/api/users`` routes."""

    def __init__(self, store: UserStore, max_limit: int | None = None) -> None:
        self.store = store
        self.max_limit = max_limit if max_limit is not None else settings.max_page_limit

    async def list_users(
        self,
        *,
        role: UserRole | None = None,
        is_active: bool | None = None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
    ) -> UserPage:
        page = max(page, 1)
        limit = min(max(limit, 1), self.max_limit)
        users = await self.store.find(
            role=role,
            is_active=is_active,
            offset=(page - 1) * limit,
            limit=limit,
        )
        total = await self.store.count(role=role, is_active=is_active)
        return UserPage(users=users, page=page, limit=limit, total=total)

    async def get_user(self, user_id: str) -> User:
        user = await self.store.get_by_id(user_id)
        if user is None:
            raise NotFoundError()
        return user

    async def update_user(
        self,
        user_id: str,
        changes: dict[str, Any],
        actor_id: str | None = None,
    ) -> User:
        """Apply the non-null fields of ``changes`` (name, email, role, is_active).

        An administrator may not deactivate the account they are acting as.
        """
        changes = {k: v for k, v in changes.items() if v is not None}
        if (
            actor_id is not None
            and str(user_id) == str(actor_id)
            and changes.get("is_active") is False
        ):
            raise SelfDeactivateError()

        user = await self.get_user(user_id)
        email = changes.get("email")
        if email is not None:
            if email == user.email:
                del changes["email"]
            elif await self.store.email_taken(email, exclude_id=user.id):
                raise DuplicateEmailError()

        if changes:
            user = await self.store.update(user, changes)
        logger.info("User updated by admin: %s", mask_email(user.email))
        return user

    async def delete_user(self, user_id: str, actor_id: str) -> None:
        # Compared on the canonical id, before any lookup
        if str(user_id) == str(actor_id):
            raise SelfDeleteError()

        user = await self.get_user(user_id)
        await self.store.delete(user)
        logger.info("User deleted by admin: %s", mask_email(user.email))

    async def stats(self) -> UserStatistics:
        since = datetime.now(timezone.utc) - RECENT_WINDOW
        total = await self.store.count()
        active = await self.store.count(is_active=True)
        admins = await self.store.count(role=UserRole.ADMIN)
        recent = await self.store.count(created_since=since)
        return UserStatistics(
            total_users=total,
            active_users=active,
            inactive_users=total - active,
            admin_users=admins,
            recent_users=recent,
        )
