"""Pydantic schemas for API validation."""

from app.schemas.user import (
    AdminUserUpdate,
    AuthResponse,
    LoginRequest,
    MessageResponse,
    Pagination,
    ProfileUpdate,
    RegisterRequest,
    UserEnvelope,
    UserListResponse,
    UserResponse,
    UserStats,
    UserStatsResponse,
    UserUpdatedResponse,
)

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "ProfileUpdate",
    "AdminUserUpdate",
    "UserResponse",
    "UserEnvelope",
    "UserUpdatedResponse",
    "AuthResponse",
    "MessageResponse",
    "Pagination",
    "UserListResponse",
    "UserStats",
    "UserStatsResponse",
]
