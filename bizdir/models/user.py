"""User document model for API authentication."""

from datetime import datetime, timezone
from typing import Optional

from beanie import Document, Indexed
from pydantic import Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Document):
    """User account allowed to use the API when the directory is database-backed.

    Accounts are managed with the ``bizdir-users`` command; there is no
    self-registration endpoint.
    """

    username: Indexed(str, unique=True)
    email: Optional[str] = None
    full_name: Optional[str] = None
    hashed_password: str
    is_active: bool = True
    is_admin: bool = False

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    last_login: Optional[datetime] = None

    class Settings:
        name = "users"

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username}, is_active={self.is_active})>"
