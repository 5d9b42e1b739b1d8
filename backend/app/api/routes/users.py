"""Administrative user-management endpoints. Every route requires the admin role."""

from fastapi import APIRouter, Query

from app.api.dependencies import UserAdminServiceDep
from app.core.exceptions import ValidationError
from app.core.security.auth import AdminUser
from app.models.user import UserRole
from app.schemas.user import (
    AdminUserUpdate,
    MessageResponse,
    Pagination,
    UserEnvelope,
    UserListResponse,
    UserResponse,
    UserStats,
    UserStatsResponse,
    UserUpdatedResponse,
)
from app.services.user_admin import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    parse_bool_flag,
    parse_positive_int,
)

router = APIRouter()


@router.get("", response_model=UserListResponse)
async def list_users(
    admin: AdminUser,
    users: UserAdminServiceDep,
    page: str | None = Query(None, description="Page number, defaults to 1"),
    limit: str | None = Query(None, description="Page size, defaults to 10"),
    role: str | None = Query(None),
    is_active: str | None = Query(None, alias="isActive"),
) -> UserListResponse:
    """List users newest first, optionally filtered by role and active flag."""
    role_filter = None
    if role:
        try:
            role_filter = UserRole(role)
        except ValueError:
            raise ValidationError(
                errors=[{"field": "role", "message": "Role must be user, admin, or moderator"}]
            ) from None

    result = await users.list_users(
        role=role_filter,
        is_active=parse_bool_flag(is_active),
        page=parse_positive_int(page, DEFAULT_PAGE),
        limit=parse_positive_int(limit, DEFAULT_LIMIT),
    )
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in result.users],
        pagination=Pagination(
            page=result.page,
            limit=result.limit,
            total=result.total,
            pages=result.pages,
        ),
    )


# Declared before /{user_id} so "stats" is not taken for an id
@router.get("/stats", response_model=UserStatsResponse)
async def user_stats(admin: AdminUser, users: UserAdminServiceDep) -> UserStatsResponse:
    """Aggregate counts over all users."""
    stats = await users.stats()
    return UserStatsResponse(
        stats=UserStats(
            total_users=stats.total_users,
            active_users=stats.active_users,
            inactive_users=stats.inactive_users,
            admin_users=stats.admin_users,
            recent_users=stats.recent_users,
        )
    )


@router.get("/{user_id}", response_model=UserEnvelope)
async def get_user(user_id: str, admin: AdminUser, users: UserAdminServiceDep) -> UserEnvelope:
    user = await users.get_user(user_id)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.put("/{user_id}", response_model=UserUpdatedResponse)
async def update_user(
    user_id: str,
    body: AdminUserUpdate,
    admin: AdminUser,
    users: UserAdminServiceDep,
) -> UserUpdatedResponse:
    user = await users.update_user(
        user_id, body.model_dump(exclude_unset=True), actor_id=admin.user_id
    )
    return UserUpdatedResponse(
        message="User updated successfully",
        user=UserResponse.model_validate(user),
    )


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: str, admin: AdminUser, users: UserAdminServiceDep) -> MessageResponse:
    """Hard-delete a user. Administrators cannot delete themselves."""
    await users.delete_user(user_id, actor_id=admin.user_id)
    return MessageResponse(message="User deleted successfully")
