"""Pydantic schemas for data export functionality."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class ExportFormat(str, Enum):
    """Supported export formats."""

    XLSX = "xlsx"
    CSV = "csv"
    DOCX = "docx"
    MAILING = "mailing"

    @property
    def extension(self) -> str:
        """File extension for the format."""
        return "csv" if self is ExportFormat.MAILING else self.value


# Alternative names accepted for each format
FORMAT_ALIASES: dict[str, ExportFormat] = {
    "xlsx": ExportFormat.XLSX,
    "spreadsheet": ExportFormat.XLSX,
    "excel": ExportFormat.XLSX,
    "csv": ExportFormat.CSV,
    "docx": ExportFormat.DOCX,
    "document": ExportFormat.DOCX,
    "word": ExportFormat.DOCX,
    "mailing": ExportFormat.MAILING,
    "mailinglist": ExportFormat.MAILING,
}


class ExportRequest(BaseModel):
    """Request body for exporting businesses."""

    format: ExportFormat = Field(ExportFormat.XLSX, description="Export format")
    ids: list[str] | None = Field(None, description="Business IDs to export; all when omitted or empty")
    custom_name: str | None = Field(
        None,
        alias="customName",
        max_length=200,
        description="Base name of the downloaded file",
    )

    model_config = {"populate_by_name": True}

    @field_validator("format", mode="before")
    @classmethod
    def resolve_format_alias(cls, v: Any) -> Any:
        if isinstance(v, str):
            key = v.strip().lower()
            if key in FORMAT_ALIASES:
                return FORMAT_ALIASES[key]
        return v


class BusinessFlatExport(BaseModel):
    """Flat business row for spreadsheet and CSV exports."""

    name: str
    street_name: str
    zipcode: str
    city: str
    email: str = ""
    phone: str = ""
    tags: str = ""
    comment: str = ""
    active: str = "Yes"

    @staticmethod
    def from_business(business: Any) -> "BusinessFlatExport":
        """Create a flat export row from a Business record."""
        return BusinessFlatExport(
            name=business.name,
            street_name=business.street_name,
            zipcode=business.zipcode,
            city=business.city,
            email=business.email or "",
            phone=business.phone or "",
            tags=", ".join(business.tags or []),
            comment=business.comment or "",
            active="Yes" if business.is_active else "No",
        )
