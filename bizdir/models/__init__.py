"""Data models for Bizdir."""

from bizdir.models.business import Business, BusinessDocument, generate_business_id
from bizdir.models.user import User

__all__ = [
    "Business",
    "BusinessDocument",
    "User",
    "generate_business_id",
]
