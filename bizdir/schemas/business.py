"""Pydantic schemas for business records.

Field names are snake_case in Python and camelCase on the wire
(``streetName``, ``isActive``); both spellings are accepted on input.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

MAX_NAME_LENGTH = 255
MAX_FIELD_LENGTH = 255
MAX_ZIPCODE_LENGTH = 32
MAX_COMMENT_LENGTH = 2000
MAX_TAGS = 100

REQUIRED_FIELDS = ("name", "street_name", "zipcode", "city")
OPTIONAL_TEXT_FIELDS = ("email", "phone", "comment")


def dedupe_tags(tags: list[str]) -> list[str]:
    """Trim tags and drop blanks and repeats, keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for tag in tags:
        cleaned = tag.strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            result.append(cleaned)
    return result


class CamelModel(BaseModel):
    """Base model serialising to camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class BusinessCreate(CamelModel):
    """Schema for creating a business (single create, bulk create and import)."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    street_name: str = Field(..., min_length=1, max_length=MAX_FIELD_LENGTH)
    zipcode: str = Field(..., min_length=1, max_length=MAX_ZIPCODE_LENGTH)
    city: str = Field(..., min_length=1, max_length=MAX_FIELD_LENGTH)
    email: str = Field("", max_length=MAX_FIELD_LENGTH)
    phone: str = Field("", max_length=MAX_FIELD_LENGTH)
    tags: list[str] = Field(default_factory=list, max_length=MAX_TAGS)
    comment: str = Field("", max_length=MAX_COMMENT_LENGTH)
    is_active: bool = True

    @field_validator(*OPTIONAL_TEXT_FIELDS, mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("tags", mode="before")
    @classmethod
    def none_to_no_tags(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str]) -> list[str]:
        return dedupe_tags(v)

    @field_validator("is_active", mode="before")
    @classmethod
    def none_to_active(cls, v: Any) -> Any:
        return True if v is None else v


class BusinessUpdate(CamelModel):
    """Schema for a partial update.

    Only fields present in the request body are applied. Sending ``null`` for
    email, phone, comment or tags clears them; the address fields and the name
    cannot be cleared.
    """

    name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    street_name: str | None = Field(None, min_length=1, max_length=MAX_FIELD_LENGTH)
    zipcode: str | None = Field(None, min_length=1, max_length=MAX_ZIPCODE_LENGTH)
    city: str | None = Field(None, min_length=1, max_length=MAX_FIELD_LENGTH)
    email: str | None = Field(None, max_length=MAX_FIELD_LENGTH)
    phone: str | None = Field(None, max_length=MAX_FIELD_LENGTH)
    tags: list[str] | None = Field(None, max_length=MAX_TAGS)
    comment: str | None = Field(None, max_length=MAX_COMMENT_LENGTH)
    is_active: bool | None = None

    @model_validator(mode="after")
    def reject_cleared_required_fields(self) -> "BusinessUpdate":
        for field in REQUIRED_FIELDS + ("is_active",):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{to_camel(field)} cannot be null")
        return self

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else dedupe_tags(v)

    def changes(self) -> dict[str, Any]:
        """Return only the explicitly provided fields, with nulls normalised."""
        data = self.model_dump(exclude_unset=True)
        for field in OPTIONAL_TEXT_FIELDS:
            if field in data and data[field] is None:
                data[field] = ""
        if "tags" in data and data["tags"] is None:
            data["tags"] = []
        return data


class BusinessRead(CamelModel):
    """Business record as returned by the API."""

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

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class BulkCreateRequest(BaseModel):
    """Request body for bulk creation."""

    businesses: list[BusinessCreate]


class DeleteResponse(BaseModel):
    """Response after deleting a business."""

    success: bool = True
