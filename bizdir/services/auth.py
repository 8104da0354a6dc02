"""Authentication and access policy for the API.

Whether a request needs a user depends on the storage mode chosen at
startup: the in-memory directory is open, the database-backed directory
requires a bearer token, and an unreachable database refuses everything.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pwdlib import PasswordHash
from pwdlib.hashers.argon2 import Argon2Hasher

from bizdir.config import settings
from bizdir.models.user import User
from bizdir.services.record_store import RecordStore, StorageMode, StoreSelection

# Security event logger
security_logger = logging.getLogger("bizdir.security")

# Password hashing using pwdlib with Argon2
password_hash = PasswordHash((Argon2Hasher(),))

# OAuth2 scheme for token authentication
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)

ALGORITHM = "HS256"

SERVICE_UNAVAILABLE_DETAIL = "Service temporarily unavailable"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return password_hash.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return password_hash.hash(password)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token with a unique JWT ID."""
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.token_lifetime_minutes)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire, "jti": str(uuid.uuid4())})
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> str | None:
    """Return the token subject, or None for an invalid or expired token."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    subject = payload.get("sub")
    return subject if isinstance(subject, str) and subject else None


async def get_user_by_username(username: str) -> User | None:
    """Get a user by username."""
    return await User.find_one(User.username == username)


async def authenticate_user(
    username: str,
    password: str,
    ip_address: str | None = None,
) -> User | None:
    """Authenticate a user with username and password.

    Args:
        username: Account name.
        password: Plain text password.
        ip_address: Client IP address for logging.

    Returns:
        User if authentication succeeded, None otherwise.
    """
    user = await get_user_by_username(username)
    if not user:
        security_logger.warning(
            "Failed login - user not found: username=%s, ip=%s",
            username,
            ip_address or "unknown",
        )
        return None

    if not verify_password(password, user.hashed_password):
        security_logger.warning(
            "Failed login - invalid password: username=%s, ip=%s",
            username,
            ip_address or "unknown",
        )
        return None

    if not user.is_active:
        security_logger.warning(
            "Failed login - inactive account: username=%s, ip=%s",
            username,
            ip_address or "unknown",
        )
        return None

    security_logger.info("Successful login: username=%s, ip=%s", username, ip_address or "unknown")
    return user


def get_store_selection(request: Request) -> StoreSelection:
    """Storage decision made at startup, kept on the application state."""
    selection = getattr(request.app.state, "store_selection", None)
    if selection is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=SERVICE_UNAVAILABLE_DETAIL,
        )
    return selection


Selection = Annotated[StoreSelection, Depends(get_store_selection)]


async def get_current_user(
    selection: Selection,
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> User | None:
    """Get the user named by the bearer token.

    Users only exist in database mode; in every other mode this is None.
    """
    if not token or selection.mode is not StorageMode.DATABASE:
        return None

    username = decode_access_token(token)
    if username is None:
        return None

    user = await get_user_by_username(username)
    if user is None or not user.is_active:
        return None
    return user


async def require_auth(
    user: Annotated[User | None, Depends(get_current_user)],
) -> User:
    """Require authentication - raises 401 if not authenticated."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def require_access(
    request: Request,
    selection: Selection,
    user: Annotated[User | None, Depends(get_current_user)],
) -> User | None:
    """Apply the access policy for directory endpoints.

    - unavailable: 503 for everyone.
    - memory, or authentication disabled: open access, returns None.
    - database: a valid bearer token is required, 401 otherwise.
    """
    if selection.mode is StorageMode.UNAVAILABLE:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=SERVICE_UNAVAILABLE_DETAIL,
        )

    if not selection.requires_auth or not settings.auth_enabled:
        return user

    if user is None:
        security_logger.warning(
            "Unauthenticated request refused: path=%s, ip=%s",
            request.url.path,
            request.client.host if request.client else "unknown",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_record_store(
    selection: Selection,
    _: Annotated[User | None, Depends(require_access)],
) -> RecordStore:
    """Record store for a request that passed the access policy."""
    if selection.store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=SERVICE_UNAVAILABLE_DETAIL,
        )
    return selection.store


# Type aliases for dependency injection
CurrentUser = Annotated[User | None, Depends(get_current_user)]
RequireAuth = Annotated[User, Depends(require_auth)]
Access = Annotated[User | None, Depends(require_access)]
Store = Annotated[RecordStore, Depends(get_record_store)]
