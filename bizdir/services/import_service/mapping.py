"""Column mapping: turn a spreadsheet row with arbitrary headers into business fields."""

import re
from collections.abc import Iterable
from typing import Any

from .constants import FALSE_VALUES, FIELD_ALIASES, TRUE_VALUES

_WHITESPACE = re.compile(r"\s+")

# Fields read as plain text
TEXT_FIELDS = ("name", "street_name", "zipcode", "city", "email", "phone", "comment")


def normalize_header(header: Any) -> str:
    """Normalise a header for alias lookup: trimmed, casefolded, single-spaced."""
    if header is None:
        return ""
    return _WHITESPACE.sub(" ", str(header).strip()).casefold()


def to_text(value: Any) -> str:
    """Coerce a cell value to a string.

    Missing cells become "", and whole-number floats lose their ``.0`` so a
    zipcode typed as a number in Excel reads back as typed.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set)):
        return len(value) == 0
    return False


def _index_row(row: dict[str, Any]) -> dict[str, Any]:
    """Key a row by normalised header; the first non-blank cell per header wins."""
    indexed: dict[str, Any] = {}
    for header, value in row.items():
        key = normalize_header(header)
        if not key:
            continue
        if key not in indexed or (_is_blank(indexed[key]) and not _is_blank(value)):
            indexed[key] = value
    return indexed


def lookup(indexed_row: dict[str, Any], aliases: Iterable[str]) -> Any:
    """Return the cell of the first alias holding a non-blank value, else None."""
    for alias in aliases:
        value = indexed_row.get(alias)
        if not _is_blank(value):
            return value
    return None


def split_tags(value: Any) -> list[str]:
    """Read tags from a cell.

    Array-like cells give one tag per element; text is split on commas.
    Tags are trimmed and blanks dropped.
    """
    if _is_blank(value):
        return []
    if isinstance(value, (list, tuple, set)):
        parts = [to_text(item) for item in value]
    else:
        parts = to_text(value).split(",")
    return [part.strip() for part in parts if part and part.strip()]


def merge_tags(batch_tags: Iterable[str], row_tags: Iterable[str]) -> list[str]:
    """Union of batch tags and row tags without repeats, in first-seen order."""
    merged: list[str] = []
    seen: set[str] = set()
    for tag in list(batch_tags) + list(row_tags):
        cleaned = str(tag).strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            merged.append(cleaned)
    return merged


def parse_active(value: Any) -> Any:
    """Interpret an active flag cell.

    Blank means active. Recognised yes/no words (English and Dutch) map to
    booleans; anything else is returned unchanged for validation to reject.
    """
    if _is_blank(value):
        return True
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    text = to_text(value).casefold()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    return value


def map_row(row: dict[str, Any]) -> dict[str, Any]:
    """Map one spreadsheet row onto the business fields.

    Never fails: every row yields a candidate, possibly with empty required
    fields, which import validation reports.

    Args:
        row: Header -> cell value, as produced by the parsers.

    Returns:
        Dict with name, street_name, zipcode, city, email, phone, comment,
        tags (row tags only) and is_active.
    """
    indexed = _index_row(row)

    candidate: dict[str, Any] = {
        field: to_text(lookup(indexed, FIELD_ALIASES[field])) for field in TEXT_FIELDS
    }
    candidate["tags"] = split_tags(lookup(indexed, FIELD_ALIASES["tags"]))
    candidate["is_active"] = parse_active(lookup(indexed, FIELD_ALIASES["is_active"]))
    return candidate


def suggest_column_mapping(headers: list[str]) -> dict[str, str | None]:
    """Report which business field each header would feed, or None.

    Only the winning header per field is reported when several match.
    """
    normalized = {header: normalize_header(header) for header in headers}
    mapping: dict[str, str | None] = {header: None for header in headers}
    for field, aliases in FIELD_ALIASES.items():
        for alias in aliases:
            match = next(
                (h for h in headers if normalized[h] == alias and mapping[h] is None),
                None,
            )
            if match is not None:
                mapping[match] = field
                break
    return mapping
