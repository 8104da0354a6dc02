"""Business record models.

``Business`` is the store-agnostic record handed around by services and
routers. ``BusinessDocument`` is its MongoDB representation, used only by the
document-backed record store.
"""

import uuid

from beanie import Document, Indexed
from pydantic import BaseModel, Field


def generate_business_id() -> str:
    """Generate an opaque, unique business ID."""
    return str(uuid.uuid4())


class Business(BaseModel):
    """A business directory entry."""

    id: str
    name: str
    street_name: str
    zipcode: str
    city: str
    email: str = ""
    phone: str = ""
    tags: list[str] = Field(default_factory=list)
    comment: str = ""
    is_active: bool = True


class BusinessDocument(Document):
    """Business document stored in the ``businesses`` collection."""

    id: str = Field(default_factory=generate_business_id)  # type: ignore[assignment]

    name: Indexed(str)
    street_name: str
    zipcode: Indexed(str)
    city: Indexed(str)
    email: str = ""
    phone: str = ""
    tags: list[str] = Field(default_factory=list)
    comment: str = ""
    is_active: bool = True

    class Settings:
        name = "businesses"

    def to_business(self) -> Business:
        """Convert to the store-agnostic record."""
        return Business.model_validate(self.model_dump())
