"""Import endpoints for spreadsheet business imports."""

import json
import logging
from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from bizdir.config import settings
from bizdir.schemas.business import BusinessRead
from bizdir.schemas.import_schemas import (
    ImportPreviewResponse,
    ImportResultResponse,
    ImportRowError,
)
from bizdir.services.auth import Access, Store
from bizdir.services.import_service import (
    FIELD_LABELS,
    REQUIRED_IMPORT_FIELDS,
    SpreadsheetParseError,
    parse_spreadsheet,
    run_import,
    suggest_column_mapping,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Extensions accepted on upload; the content itself decides between CSV and XLSX
ALLOWED_EXTENSIONS = {"", "csv", "txt", "xlsx", "xls"}
CHUNK_SIZE = 64 * 1024
PREVIEW_ROWS = 5


def _get_file_extension(filename: str | None) -> str:
    """Extract file extension from filename."""
    if not filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def _parse_batch_tags(raw: str | None) -> list[str]:
    """Read the ``tags`` form field: a JSON list of strings, or nothing."""
    if raw is None or not raw.strip():
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Field 'tags' must be a JSON list of strings",
        ) from None
    if not isinstance(value, list) or not all(isinstance(t, str) for t in value):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Field 'tags' must be a JSON list of strings",
        )
    return [t.strip() for t in value if t.strip()]


async def _read_upload(file: UploadFile | None) -> bytes:
    """Validate the uploaded file part and read it with a size cap."""
    if file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded",
        )

    ext = _get_file_extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type '.{ext}'. Allowed: CSV, XLSX",
        )

    max_size = settings.max_upload_size_bytes
    # Read in chunks to avoid unbounded memory for oversized files
    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await file.read(CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > max_size:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File exceeds maximum size of {max_size // (1024 * 1024)} MB",
            )
        chunks.append(chunk)
    return b"".join(chunks)


@router.post(
    "",
    response_model=ImportResultResponse,
    status_code=status.HTTP_201_CREATED,
    responses={207: {"model": ImportResultResponse, "description": "Some rows failed"}},
)
async def import_spreadsheet(
    store: Store,
    file: Annotated[UploadFile | None, File(description="CSV or XLSX spreadsheet")] = None,
    tags: Annotated[str | None, Form(description="JSON list of tags added to every row")] = None,
) -> JSONResponse:
    """Import businesses from a spreadsheet.

    Every row is validated; valid rows are stored together and invalid rows
    are reported with their spreadsheet row number. Returns 201 when all rows
    were imported and 207 when any row failed.
    """
    batch_tags = _parse_batch_tags(tags)
    content = await _read_upload(file)

    try:
        result = await run_import(
            content,
            store,
            batch_tags=batch_tags,
            max_rows=settings.import_max_rows,
        )
    except SpreadsheetParseError as e:
        logger.warning("Rejected upload %s: %s", file.filename if file else None, e)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    body = ImportResultResponse(
        success=result.success,
        imported=result.imported_count,
        failed=result.failed_count,
        businesses=[BusinessRead.model_validate(b) for b in result.created],
        errors=[ImportRowError(row=e.row, data=e.data, error=e.error) for e in result.errors],
    )
    status_code = status.HTTP_201_CREATED if result.success else status.HTTP_207_MULTI_STATUS
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body, by_alias=True),
    )


@router.post("/preview", response_model=ImportPreviewResponse)
async def preview_spreadsheet(
    _: Access,
    file: Annotated[UploadFile | None, File(description="CSV or XLSX spreadsheet")] = None,
) -> ImportPreviewResponse:
    """Show how a spreadsheet would be read, without storing anything.

    Returns the headers, the business field each header maps to and the
    first rows of the file.
    """
    content = await _read_upload(file)

    try:
        sheet = parse_spreadsheet(content, max_rows=settings.import_max_rows)
    except SpreadsheetParseError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    mapping = suggest_column_mapping(sheet.headers)
    mapped_fields = set(mapping.values())
    missing = [FIELD_LABELS[f] for f in REQUIRED_IMPORT_FIELDS if f not in mapped_fields]

    return ImportPreviewResponse(
        filename=file.filename or "unknown",
        row_count=len(sheet.rows),
        headers=sheet.headers,
        preview_rows=jsonable_encoder(sheet.rows[:PREVIEW_ROWS]),
        suggested_mapping=mapping,
        missing_fields=missing,
    )
