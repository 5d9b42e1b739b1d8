"""Request-scoped service dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.services.auth_service import AuthService
from app.services.user_admin import UserAdminService
from app.services.user_store import UserStore


def get_user_store(db: AsyncSession = Depends(get_db)) -> UserStore:
    """Get a UserStore bound to the request's database session."""
    return UserStore(db)


UserStoreDep = Annotated[UserStore, Depends(get_user_store)]


def get_auth_service(store: UserStoreDep) -> AuthService:
    return AuthService(store)


def get_user_admin_service(store: UserStoreDep) -> UserAdminService:
    return UserAdminService(store)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
UserAdminServiceDep = Annotated[UserAdminService, Depends(get_user_admin_service)]
