"""Pydantic schemas for spreadsheet import functionality."""

from typing import Any

from pydantic import BaseModel, Field

from bizdir.schemas.business import BusinessRead


class ImportRowError(BaseModel):
    """A spreadsheet row that could not be imported."""

    row: int = Field(..., description="Spreadsheet row number (header is row 1)")
    data: dict[str, Any] = Field(default_factory=dict, description="Row as read from the file")
    error: str


class ImportResultResponse(BaseModel):
    """Response after importing a spreadsheet.

    ``success`` is only true when every row was imported; partial success is
    told apart from total failure by ``imported`` and ``failed``.
    """

    success: bool
    imported: int
    failed: int
    businesses: list[BusinessRead]
    errors: list[ImportRowError]


class ImportPreviewResponse(BaseModel):
    """Headers, detected column mapping and first rows of an uploaded spreadsheet."""

    filename: str
    row_count: int
    headers: list[str]
    preview_rows: list[dict[str, Any]]
    suggested_mapping: dict[str, str | None] = Field(
        ..., description="Header -> business field it feeds, null when ignored"
    )
    missing_fields: list[str] = Field(
        default_factory=list, description="Required fields no header maps to"
    )
