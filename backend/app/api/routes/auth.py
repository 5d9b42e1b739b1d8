"""Authentication endpoints."""

from fastapi import APIRouter, status

from app.api.dependencies import AuthServiceDep
from app.core.security.auth import CurrentUser
from app.schemas.user import (
    AuthResponse,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    UserEnvelope,
    UserResponse,
    UserUpdatedResponse,
)

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, auth: AuthServiceDep) -> AuthResponse:
    """Create an account and return a token for it."""
    session = await auth.register(name=body.name, email=body.email, password=body.password)
    return AuthResponse(
        message="User registered successfully",
        token=session.token,
        user=UserResponse.model_validate(session.user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, auth: AuthServiceDep) -> AuthResponse:
    """Authenticate with email and password and return a token."""
    session = await auth.login(email=body.email, password=body.password)
    return AuthResponse(
        message="Login successful",
        token=session.token,
        user=UserResponse.model_validate(session.user),
    )


@router.get("/profile", response_model=UserEnvelope)
async def get_profile(current: CurrentUser, auth: AuthServiceDep) -> UserEnvelope:
    """Return the caller's own record."""
    user = await auth.get_profile(current.user_id)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.put("/profile", response_model=UserUpdatedResponse)
async def update_profile(
    body: ProfileUpdate,
    current: CurrentUser,
    auth: AuthServiceDep,
) -> UserUpdatedResponse:
    """Change the caller's name and/or email."""
    user = await auth.update_profile(current.user_id, name=body.name, email=body.email)
    return UserUpdatedResponse(
        message="Profile updated successfully",
        user=UserResponse.model_validate(user),
    )
