"""Integration tests for the admin-only /api/users endpoints.

Total: 19 tests
Uses the in-memory credential store via FastAPI dependency override.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from app.models.user import UserRole
from tests.conftest import auth_header, make_user

USERS = "/api/users"


# ── AUTHORIZATION ─────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_list_requires_token(client: AsyncClient):
    response = await client.get(USERS)

    assert response.status_code == 401
    assert response.json()["success"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize("role", [UserRole.USER, UserRole.MODERATOR])
async def test_non_admin_is_forbidden(client: AsyncClient, store, role):
    user = await make_user(store, role=role)

    for method, path in [("GET", USERS), ("GET", f"{USERS}/stats"), ("DELETE", f"{USERS}/{user.id}")]:
        response = await client.request(method, path, headers=auth_header(user))
        assert response.status_code == 403
        assert response.json() == {"success": False, "message": "Insufficient permissions"}

    assert user.id in store.users


@pytest.mark.asyncio
async def test_promoted_user_passes_admin_check(client: AsyncClient, store, admin):
    user = await make_user(store, email="promote@mail.io")
    headers = auth_header(user)
    assert (await client.get(USERS, headers=headers)).status_code == 403

    response = await client.put(f"{USERS}/{user.id}", headers=auth_header(admin), json={"role": "admin"})
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "admin"

    # Same token as before: the role is read from the store on every request
    assert (await client.get(USERS, headers=headers)).status_code == 200


@pytest.mark.asyncio
async def test_deactivated_admin_is_rejected(client: AsyncClient, store):
    inactive_admin = await make_user(store, role=UserRole.ADMIN, is_active=False)

    response = await client.get(USERS, headers=auth_header(inactive_admin))

    assert response.status_code == 401
    assert response.json()["message"] == "Account is deactivated"


# ── LIST ──────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_list_defaults_and_pagination(client: AsyncClient, store, admin):
    for i in range(11):
        await make_user(store, name=f"User {i:02d}")

    response = await client.get(USERS, headers=auth_header(admin))

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["pagination"] == {"page": 1, "limit": 10, "total": 12, "pages": 2}
    assert len(data["users"]) == 10
    # Newest first
    assert data["users"][0]["name"] == "User 10"
    assert all("passwordHash" not in u for u in data["users"])


@pytest.mark.asyncio
async def test_list_non_numeric_paging_falls_back(client: AsyncClient, admin):
    response = await client.get(USERS, headers=auth_header(admin), params={"page": "x", "limit": "y"})

    assert response.status_code == 200
    assert response.json()["pagination"]["page"] == 1
    assert response.json()["pagination"]["limit"] == 10


@pytest.mark.asyncio
async def test_list_page_beyond_range_is_empty(client: AsyncClient, admin):
    response = await client.get(USERS, headers=auth_header(admin), params={"page": 5, "limit": 10})

    assert response.status_code == 200
    data = response.json()
    assert data["users"] == []
    assert data["pagination"] == {"page": 5, "limit": 10, "total": 1, "pages": 1}


@pytest.mark.asyncio
async def test_list_filters(client: AsyncClient, store, admin):
    await make_user(store, role=UserRole.MODERATOR)
    await make_user(store, role=UserRole.MODERATOR, is_active=False)

    response = await client.get(
        USERS, headers=auth_header(admin), params={"role": "moderator", "isActive": "false"}
    )

    users = response.json()["users"]
    assert len(users) == 1
    assert users[0]["role"] == "moderator"
    assert users[0]["isActive"] is False


@pytest.mark.asyncio
async def test_list_unknown_role_is_validation_error(client: AsyncClient, admin):
    response = await client.get(USERS, headers=auth_header(admin), params={"role": "superuser"})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "role"


# ── GET / UPDATE ──────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_get_user(client: AsyncClient, store, admin):
    user = await make_user(store, email="someone@mail.io")

    response = await client.get(f"{USERS}/{user.id}", headers=auth_header(admin))

    assert response.status_code == 200
    assert response.json()["user"]["email"] == "someone@mail.io"


@pytest.mark.asyncio
async def test_get_unknown_user(client: AsyncClient, admin):
    response = await client.get(f"{USERS}/does-not-exist", headers=auth_header(admin))

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "User not found"}


@pytest.mark.asyncio
async def test_update_user_fields(client: AsyncClient, store, admin):
    user = await make_user(store)

    response = await client.put(
        f"{USERS}/{user.id}",
        headers=auth_header(admin),
        json={"name": "Moderator Mo", "role": "moderator", "isActive": False},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "User updated successfully"
    assert body["user"]["name"] == "Moderator Mo"
    assert body["user"]["role"] == "moderator"
    assert body["user"]["isActive"] is False


@pytest.mark.asyncio
async def test_update_user_duplicate_email(client: AsyncClient, store, admin):
    user = await make_user(store, email="user@mail.io")

    response = await client.put(f"{USERS}/{user.id}", headers=auth_header(admin), json={"email": "admin@mail.io"})

    assert response.status_code == 400
    assert response.json()["message"] == "Email already in use"
    assert user.email == "user@mail.io"


@pytest.mark.asyncio
async def test_update_user_invalid_role(client: AsyncClient, store, admin):
    user = await make_user(store)

    response = await client.put(f"{USERS}/{user.id}", headers=auth_header(admin), json={"role": "owner"})

    assert response.status_code == 400
    assert user.role == UserRole.USER


# ── DELETE ────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_delete_user(client: AsyncClient, store, admin):
    user = await make_user(store)

    response = await client.delete(f"{USERS}/{user.id}", headers=auth_header(admin))

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "User deleted successfully"}
    assert user.id not in store.users


@pytest.mark.asyncio
async def test_admin_cannot_delete_self(client: AsyncClient, store, admin):
    response = await client.delete(f"{USERS}/{admin.id}", headers=auth_header(admin))

    assert response.status_code == 400
    assert response.json()["message"] == "Cannot delete your own account"
    assert admin.id in store.users


@pytest.mark.asyncio
async def test_admin_cannot_deactivate_self(client: AsyncClient, store, admin):
    headers = auth_header(admin)

    response = await client.put(f"{USERS}/{admin.id}", headers=headers, json={"isActive": False})

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Cannot deactivate your own account"}
    assert admin.is_active is True
    # The admin keeps access with the same token
    assert (await client.get(USERS, headers=headers)).status_code == 200


@pytest.mark.asyncio
async def test_admin_can_rename_self(client: AsyncClient, admin):
    response = await client.put(
        f"{USERS}/{admin.id}", headers=auth_header(admin), json={"name": "Head Admin", "isActive": True}
    )

    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Head Admin"
    assert response.json()["user"]["isActive"] is True


# ── STATS ─────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_stats(client: AsyncClient, store, admin):
    await make_user(store, is_active=False)
    await make_user(store, created_at=datetime.now(timezone.utc) - timedelta(days=8))

    response = await client.get(f"{USERS}/stats", headers=auth_header(admin))

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "stats": {
            "totalUsers": 3,
            "activeUsers": 2,
            "inactiveUsers": 1,
            "adminUsers": 1,
            "recentUsers": 2,
        },
    }
