"""Import service package for parsing spreadsheets and creating business records."""

from .constants import FIELD_ALIASES, FIELD_LABELS, MAX_ROWS, REQUIRED_IMPORT_FIELDS
from .mapping import (
    map_row,
    merge_tags,
    normalize_header,
    parse_active,
    split_tags,
    suggest_column_mapping,
    to_text,
)
from .parsers import (
    ParsedSheet,
    SpreadsheetParseError,
    parse_csv,
    parse_spreadsheet,
    parse_xlsx,
    sniff_file_type,
)
from .processor import (
    ImportResult,
    RowError,
    build_import_batch,
    import_rows,
    run_import,
    validate_row,
)

__all__ = [
    # Constants
    "FIELD_ALIASES",
    "FIELD_LABELS",
    "MAX_ROWS",
    "REQUIRED_IMPORT_FIELDS",
    # Parsers
    "ParsedSheet",
    "SpreadsheetParseError",
    "parse_csv",
    "parse_spreadsheet",
    "parse_xlsx",
    "sniff_file_type",
    # Mapping
    "map_row",
    "merge_tags",
    "normalize_header",
    "parse_active",
    "split_tags",
    "suggest_column_mapping",
    "to_text",
    # Processor
    "ImportResult",
    "RowError",
    "build_import_batch",
    "import_rows",
    "run_import",
    "validate_row",
]
