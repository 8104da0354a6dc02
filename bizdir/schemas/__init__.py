"""Pydantic schemas for the Bizdir API."""

from bizdir.schemas.business import (
    BulkCreateRequest,
    BusinessCreate,
    BusinessRead,
    BusinessUpdate,
    DeleteResponse,
)
from bizdir.schemas.export import BusinessFlatExport, ExportFormat, ExportRequest
from bizdir.schemas.import_schemas import (
    ImportPreviewResponse,
    ImportResultResponse,
    ImportRowError,
)

__all__ = [
    "BulkCreateRequest",
    "BusinessCreate",
    "BusinessFlatExport",
    "BusinessRead",
    "BusinessUpdate",
    "DeleteResponse",
    "ExportFormat",
    "ExportRequest",
    "ImportPreviewResponse",
    "ImportResultResponse",
    "ImportRowError",
]
