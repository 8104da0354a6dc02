"""Authentication endpoints."""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel
from slowapi import Limiter
from slowapi.util import get_remote_address

from bizdir.config import settings
from bizdir.models.user import User
from bizdir.services.auth import (
    SERVICE_UNAVAILABLE_DETAIL,
    CurrentUser,
    RequireAuth,
    Selection,
    authenticate_user,
    create_access_token,
)
from bizdir.services.record_store import StorageMode

router = APIRouter()

# Rate limiter for auth endpoints (stricter than global limit)
limiter = Limiter(key_func=get_remote_address)


def _login_rate_limit() -> str:
    return f"{settings.auth_rate_limit_per_minute}/minute"


class UserResponse(BaseModel):
    """Public view of a user account."""

    id: str
    username: str
    email: str | None
    full_name: str | None
    is_active: bool
    is_admin: bool
    created_at: datetime
    last_login: datetime | None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        """Create UserResponse from User model."""
        return cls(
            id=str(user.id),
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            is_active=user.is_active,
            is_admin=user.is_admin,
            created_at=user.created_at,
            last_login=user.last_login,
        )


class Token(BaseModel):
    """Token response model."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int


class AuthStatus(BaseModel):
    """Whether the caller is authenticated and whether it has to be."""

    storage_mode: StorageMode
    auth_required: bool
    authenticated: bool
    username: str | None = None


@router.post("/token", response_model=Token)
@limiter.limit(_login_rate_limit)
async def login_token(
    request: Request,  # Required for rate limiting
    selection: Selection,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
) -> Token:
    """Login with username and password to get an access token.

    Accounts only exist when the directory is database-backed.
    """
    if selection.mode is StorageMode.UNAVAILABLE:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=SERVICE_UNAVAILABLE_DETAIL,
        )
    if selection.mode is not StorageMode.DATABASE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Authentication is not available without a database",
        )

    user = await authenticate_user(
        form_data.username,
        form_data.password,
        get_remote_address(request),
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user.last_login = datetime.now(timezone.utc)
    await user.save()

    access_token = create_access_token(data={"sub": user.username})
    return Token(
        access_token=access_token,
        expires_in=settings.token_lifetime_minutes * 60,
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: RequireAuth) -> UserResponse:
    """Get the current authenticated user's information."""
    return UserResponse.from_user(current_user)


@router.get("/check", response_model=AuthStatus)
async def check_auth(selection: Selection, user: CurrentUser) -> AuthStatus:
    """Report the storage mode and whether API calls need a token."""
    return AuthStatus(
        storage_mode=selection.mode,
        auth_required=selection.requires_auth and settings.auth_enabled,
        authenticated=user is not None,
        username=user.username if user else None,
    )
