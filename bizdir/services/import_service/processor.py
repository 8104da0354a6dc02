"""Batch processing for business imports."""

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from bizdir.models.business import Business
from bizdir.schemas.business import BusinessCreate
from bizdir.services.record_store import RecordStore

from .constants import FIELD_LABELS, MAX_ROWS, REQUIRED_IMPORT_FIELDS
from .mapping import map_row, merge_tags
from .parsers import FIRST_DATA_ROW, SpreadsheetParseError, parse_spreadsheet

logger = logging.getLogger(__name__)


@dataclass
class RowError:
    """A row that failed import validation."""

    row: int
    data: dict[str, Any]
    error: str


@dataclass
class ImportResult:
    """Outcome of importing one spreadsheet."""

    created: list[Business] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)

    @property
    def imported_count(self) -> int:
        return len(self.created)

    @property
    def failed_count(self) -> int:
        return len(self.errors)

    @property
    def success(self) -> bool:
        return not self.errors


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(loc) for loc in detail.get("loc", ()))
        message = detail.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or str(error)


def validate_row(
    row: dict[str, Any],
    batch_tags: list[str],
) -> tuple[BusinessCreate | None, str | None]:
    """Map and validate one row.

    Returns:
        (business, None) for a valid row, (None, message) otherwise.
    """
    candidate = map_row(row)
    candidate["tags"] = merge_tags(batch_tags, candidate["tags"])

    missing = [FIELD_LABELS[f] for f in REQUIRED_IMPORT_FIELDS if not candidate[f]]
    if missing:
        return None, f"Missing required fields: {', '.join(missing)}"

    try:
        return BusinessCreate.model_validate(candidate), None
    except ValidationError as e:
        return None, _format_validation_error(e)


def build_import_batch(
    rows: list[dict[str, Any]],
    batch_tags: list[str],
    row_numbers: list[int] | None = None,
) -> tuple[list[BusinessCreate], list[RowError]]:
    """Validate every row in file order without stopping at failures.

    Errors carry ``row_numbers[i]`` for ``rows[i]``. Without row numbers the
    rows are taken to be consecutive, starting below the header.
    """
    if row_numbers is None:
        row_numbers = list(range(FIRST_DATA_ROW, FIRST_DATA_ROW + len(rows)))

    valid: list[BusinessCreate] = []
    errors: list[RowError] = []

    for row_number, row in zip(row_numbers, rows, strict=True):
        business, error = validate_row(row, batch_tags)
        if business is not None:
            valid.append(business)
            continue
        logger.warning("Import error on row %d: %s", row_number, error)
        errors.append(RowError(row=row_number, data=row, error=error or "Invalid row"))

    return valid, errors


async def import_rows(
    rows: list[dict[str, Any]],
    store: RecordStore,
    batch_tags: list[str] | None = None,
    row_numbers: list[int] | None = None,
) -> ImportResult:
    """Validate parsed rows and store the valid ones with a single bulk insert.

    Args:
        rows: Parsed rows (header -> cell value) in file order.
        store: Record store receiving the new businesses.
        batch_tags: Tags applied to every row, merged with the row's own tags.
        row_numbers: File row of each entry in rows, for error reports.

    Returns:
        ImportResult with the created businesses and per-row errors.
    """
    valid, errors = build_import_batch(rows, list(batch_tags or []), row_numbers)

    created: list[Business] = []
    if valid:
        created = await store.bulk_create(valid)

    logger.info(
        "Import finished: %d rows, %d imported, %d failed",
        len(rows),
        len(created),
        len(errors),
    )
    return ImportResult(created=created, errors=errors)


async def run_import(
    file_content: bytes,
    store: RecordStore,
    batch_tags: list[str] | None = None,
    max_rows: int = MAX_ROWS,
) -> ImportResult:
    """Parse an uploaded spreadsheet and import its rows.

    Raises:
        SpreadsheetParseError: If the file cannot be parsed or has no data
            rows; nothing is stored in that case.
    """
    sheet = parse_spreadsheet(file_content, max_rows=max_rows)
    if not sheet.rows:
        raise SpreadsheetParseError("Spreadsheet has no data rows")

    return await import_rows(sheet.rows, store, batch_tags, row_numbers=sheet.row_numbers)
