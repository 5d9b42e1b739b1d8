"""Credential store: all reads and writes of ``User`` records."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateEmailError
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


class UserStore:
    """Query interface over the ``users`` table for one request's session.

    Each write commits immediately. A unique-index violation on ``email``
    is rolled back and surfaced as ``DuplicateEmailError``, the same error
    the callers' own pre-checks raise.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_id(self, user_id: str) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def email_taken(self, email: str, exclude_id: str | None = None) -> bool:
        """Return True if another record already uses ``email``."""
        query = select(User.id).where(User.email == email)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await self.db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def create(
        self,
        *,
        name: str,
        email: str,
        hashed_password: str,
        role: UserRole = UserRole.USER,
        is_active: bool = True,
    ) -> User:
        user = User(
            name=name,
            email=email,
            hashed_password=hashed_password,
            role=role,
            is_active=is_active,
        )
        self.db.add(user)
        await self._commit()
        await self.db.refresh(user)
        return user

    async def update(self, user: User, changes: dict[str, Any]) -> User:
        """Apply ``changes`` to ``user`` and persist them."""
        for field, value in changes.items():
            setattr(user, field, value)
        await self._commit()
        await self.db.refresh(user)
        return user

    async def delete(self, user: User) -> None:
        await self.db.delete(user)
        await self.db.commit()

    async def find(
        self,
        *,
        role: UserRole | None = None,
        is_active: bool | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> list[User]:
        """Return matching users, newest first."""
        query = select(User)
        if role is not None:
            query = query.where(User.role == role)
        if is_active is not None:
            query = query.where(User.is_active == is_active)
        result = await self.db.execute(
            query.order_by(User.created_at.desc()).offset(offset).limit(limit)
        )
        return list(result.scalars().all())

    async def count(
        self,
        *,
        role: UserRole | None = None,
        is_active: bool | None = None,
        created_since: datetime | None = None,
    ) -> int:
        query = select(func.count()).select_from(User)
        if role is not None:
            query = query.where(User.role == role)
        if is_active is not None:
            query = query.where(User.is_active == is_active)
        if created_since is not None:
            query = query.where(User.created_at >= created_since)
        result = await self.db.execute(query)
        return int(result.scalar_one())

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            logger.info("Unique constraint rejected write: %s", exc.orig)
            raise DuplicateEmailError() from exc
