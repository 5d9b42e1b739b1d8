"""Pydantic schemas for users and authentication."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    field_validator,
)
from pydantic.alias_generators import to_camel

from app.models.user import UserRole

PASSWORD_MIN_LENGTH = 6
_PASSWORD_RULES = (
    (re.compile(r"[a-z]"), "one lowercase letter"),
    (re.compile(r"[A-Z]"), "one uppercase letter"),
    (re.compile(r"\d"), "one number"),
)


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def normalize_email(value: str) -> str:
    """Lower-case an address so lookups and the unique index agree."""
    return value.strip().lower()


Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=50)]
Email = Annotated[EmailStr, BeforeValidator(_strip), AfterValidator(normalize_email)]


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, also accepts snake_case on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Requests ──────────────────────────────────────────────────────────────────

class RegisterRequest(CamelModel):
    name: Name
    email: Email
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, v: str) -> str:
        missing = [label for pattern, label in _PASSWORD_RULES if not pattern.search(v)]
        if missing:
            raise ValueError(
                "Password must contain at least one lowercase letter, "
                "one uppercase letter, and one number"
            )
        return v


class LoginRequest(CamelModel):
    email: Email
    password: str = Field(..., min_length=1)


class ProfileUpdate(CamelModel):
    """Fields a user may change on their own record."""

    name: Name | None = None
    email: Email | None = None


class AdminUserUpdate(ProfileUpdate):
    """Fields an administrator may change on any record."""

    role: UserRole | None = None
    is_active: bool | None = None


# ── Responses ─────────────────────────────────────────────────────────────────

class UserResponse(CamelModel):
    """Outbound user record. The password hash has no field here."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: UserRole
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime
    updated_at: datetime


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class UserEnvelope(CamelModel):
    success: bool = True
    user: UserResponse


class UserUpdatedResponse(CamelModel):
    success: bool = True
    message: str
    user: UserResponse


class AuthResponse(CamelModel):
    success: bool = True
    message: str
    token: str
    user: UserResponse


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class UserListResponse(CamelModel):
    success: bool = True
    users: list[UserResponse]
    pagination: Pagination


class UserStats(CamelModel):
    total_users: int
    active_users: int
    inactive_users: int
    admin_users: int
    recent_users: int


class UserStatsResponse(CamelModel):
    success: bool = True
    stats: UserStats
