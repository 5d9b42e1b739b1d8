"""Shared pytest fixtures for the user auth API tests."""

from __future__ import annotations

import os

# Must be set before app.config builds its cached settings
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone
from typing import Any, AsyncGenerator
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.dependencies import get_user_store
from app.core.exceptions import DuplicateEmailError
from app.core.security.passwords import hash_password
from app.core.security.tokens import create_access_token
from app.main import app
from app.models.user import User, UserRole

DEFAULT_PASSWORD = "Test123!"


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ── In-memory credential store ────────────────────────────────────────────────

class InMemoryUserStore:
    """Test double with the same async interface as ``UserStore``."""

    def __init__(self) -> None:
        self.users: dict[str, User] = {}
        self._clock = _now()

    def _tick(self) -> datetime:
        # Strictly increasing creation times keep "newest first" deterministic
        self._clock += timedelta(milliseconds=1)
        return self._clock

    async def get_by_id(self, user_id: str) -> User | None:
        return self.users.get(user_id)

    async def get_by_email(self, email: str) -> User | None:
        return next((u for u in self.users.values() if u.email == email), None)

    async def email_taken(self, email: str, exclude_id: str | None = None) -> bool:
        return any(u.email == email and u.id != exclude_id for u in self.users.values())

    async def create(
        self,
        *,
        name: str,
        email: str,
        hashed_password: str,
        role: UserRole = UserRole.USER,
        is_active: bool = True,
        created_at: datetime | None = None,
    ) -> User:
        if await self.email_taken(email):
            raise DuplicateEmailError()
        created = created_at or self._tick()
        user = User(
            id=str(uuid4()),
            name=name,
            email=email,
            hashed_password=hashed_password,
            role=role,
            is_active=is_active,
            last_login=None,
            created_at=created,
            updated_at=created,
        )
        self.users[user.id] = user
        return user

    async def update(self, user: User, changes: dict[str, Any]) -> User:
        if "email" in changes and await self.email_taken(changes["email"], exclude_id=user.id):
            raise DuplicateEmailError()
        for field, value in changes.items():
            setattr(user, field, value)
        user.updated_at = _now()
        return user

    async def delete(self, user: User) -> None:
        self.users.pop(user.id, None)

    def _matching(self, role=None, is_active=None, created_since=None) -> list[User]:
        users = list(self.users.values())
        if role is not None:
            users = [u for u in users if u.role == role]
        if is_active is not None:
            users = [u for u in users if u.is_active == is_active]
        if created_since is not None:
            users = [u for u in users if u.created_at >= created_since]
        return users

    async def find(self, *, role=None, is_active=None, offset=0, limit=10) -> list[User]:
        users = sorted(self._matching(role, is_active), key=lambda u: u.created_at, reverse=True)
        return users[offset:offset + limit]

    async def count(self, *, role=None, is_active=None, created_since=None) -> int:
        return len(self._matching(role, is_active, created_since))


@pytest.fixture
def store() -> InMemoryUserStore:
    return InMemoryUserStore()


async def make_user(
    store: InMemoryUserStore,
    *,
    name: str = "Test User",
    email: str | None = None,
    password: str = DEFAULT_PASSWORD,
    role: UserRole = UserRole.USER,
    is_active: bool = True,
    created_at: datetime | None = None,
) -> User:
    """Insert a user directly into the store."""
    return await store.create(
        name=name,
        email=email or f"user-{uuid4().hex[:8]}@mail.io",
        hashed_password=hash_password(password),
        role=role,
        is_active=is_active,
        created_at=created_at,
    )


def auth_header(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
async def admin(store: InMemoryUserStore) -> User:
    return await make_user(store, name="Admin", email="admin@mail.io", role=UserRole.ADMIN)


# ── HTTP client ───────────────────────────────────────────────────────────────

@pytest.fixture
async def client(store: InMemoryUserStore) -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client with the credential store replaced by ``store``."""
    app.dependency_overrides[get_user_store] = lambda: store

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ── Database mock helpers ─────────────────────────────────────────────────────

@pytest.fixture
def mock_db() -> MagicMock:
    """Return a mock async SQLAlchemy session."""
    session = MagicMock()
    session.execute = AsyncMock()
    session.add = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()

    async def _refresh(obj: object) -> None:
        if getattr(obj, "id", None) is None:
            obj.id = str(uuid4())  # type: ignore[attr-defined]
        if getattr(obj, "created_at", None) is None:
            obj.created_at = _now()  # type: ignore[attr-defined]
        if getattr(obj, "updated_at", None) is None:
            obj.updated_at = _now()  # type: ignore[attr-defined]

    session.refresh = AsyncMock(side_effect=_refresh)
    return session
