"""File parsing functions for CSV and XLSX imports."""

import csv
import io
import zipfile
from dataclasses import dataclass, field
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .constants import CSV_DELIMITERS, MAX_ROWS, OLE2_SIGNATURE, ZIP_SIGNATURE

# Row 1 holds the headers
FIRST_DATA_ROW = 2


class SpreadsheetParseError(ValueError):
    """The uploaded file cannot be read as a spreadsheet."""


@dataclass
class ParsedSheet:
    """Headers and non-blank data rows of one spreadsheet.

    ``row_numbers[i]`` is the row ``rows[i]`` sits on in the file. Blank rows
    are dropped but still counted, so the numbers match what a spreadsheet
    program shows.
    """

    headers: list[str]
    rows: list[dict[str, Any]] = field(default_factory=list)
    row_numbers: list[int] = field(default_factory=list)

    def add(self, row_number: int, row: dict[str, Any]) -> None:
        self.rows.append(row)
        self.row_numbers.append(row_number)


def _unique_headers(raw_headers: list[Any]) -> list[str | None]:
    """Clean header cells, suffixing repeats (Name, Name_1, ...) and keeping blanks as None."""
    headers: list[str | None] = []
    seen: dict[str, int] = {}
    for raw in raw_headers:
        header = str(raw).strip() if raw is not None else ""
        if not header:
            headers.append(None)
            continue
        if header in seen:
            seen[header] += 1
            header = f"{header}_{seen[header]}"
        else:
            seen[header] = 0
        headers.append(header)
    return headers


def _is_empty_row(row: dict[str, Any]) -> bool:
    return all(v is None or (isinstance(v, str) and not v.strip()) for v in row.values())


def sniff_file_type(file_content: bytes) -> str:
    """Guess the spreadsheet type from the payload.

    Returns:
        "xlsx" or "csv".

    Raises:
        SpreadsheetParseError: For empty, legacy .xls or binary payloads.
    """
    if not file_content:
        raise SpreadsheetParseError("Uploaded file is empty")
    if file_content.startswith(ZIP_SIGNATURE):
        return "xlsx"
    if file_content.startswith(OLE2_SIGNATURE):
        raise SpreadsheetParseError(
            "Legacy .xls workbooks are not supported, save the file as .xlsx or .csv"
        )
    if b"\x00" in file_content[:4096]:
        raise SpreadsheetParseError("Uploaded file is not a spreadsheet")
    return "csv"


def _decode_text(file_content: bytes) -> str:
    # UTF-8 first (BOM tolerated, Excel adds one), Latin-1 never fails
    try:
        return file_content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return file_content.decode("latin-1")


def csv_dialect(sample: str) -> type[csv.Dialect]:
    """Build an excel dialect using the delimiter sniffed from ``sample``.

    Only the delimiter is taken from the sniffer. Quoting stays excel's
    (double quotes, doubled to escape), so apostrophes in the data are
    ordinary characters.
    """
    try:
        delimiter = csv.Sniffer().sniff(sample, delimiters=CSV_DELIMITERS).delimiter
    except csv.Error:
        return csv.excel

    return type("SniffedDialect", (csv.excel,), {"delimiter": delimiter})


def parse_csv(file_content: bytes, max_rows: int = MAX_ROWS) -> ParsedSheet:
    """Parse CSV file content into headers and rows.

    The delimiter is sniffed among comma, semicolon and tab, falling back to
    comma. Blank rows are skipped.

    Args:
        file_content: Raw CSV file bytes.
        max_rows: Maximum number of data rows to read.

    Returns:
        ParsedSheet with rows keyed by header name.

    Raises:
        SpreadsheetParseError: If the CSV is empty or has no headers.
    """
    text = _decode_text(file_content)
    if not text.strip():
        raise SpreadsheetParseError("CSV file has no headers")

    dialect = csv_dialect(text[:8192])

    try:
        reader = csv.reader(io.StringIO(text, newline=""), dialect)
        raw_headers = next(reader, None)
        if raw_headers is None:
            raise SpreadsheetParseError("CSV file has no headers")

        headers = _unique_headers(raw_headers)
        sheet = ParsedSheet(headers=[h for h in headers if h])
        if not sheet.headers:
            raise SpreadsheetParseError("CSV file has no valid headers")

        for row_number, values in enumerate(reader, start=FIRST_DATA_ROW):
            if len(sheet.rows) >= max_rows:
                break
            row = {
                header: (values[j].strip() if j < len(values) else "")
                for j, header in enumerate(headers)
                if header
            }
            if not _is_empty_row(row):
                sheet.add(row_number, row)
    except csv.Error as e:
        raise SpreadsheetParseError(f"Could not parse CSV file: {e}") from e

    return sheet


def parse_xlsx(file_content: bytes, max_rows: int = MAX_ROWS) -> ParsedSheet:
    """Parse XLSX file content into headers and rows (first sheet only).

    Uses openpyxl read_only mode and iterates rows lazily. Cell values keep
    their spreadsheet type; the column mapper turns them into text.

    Args:
        file_content: Raw XLSX file bytes.
        max_rows: Maximum number of data rows to read.

    Returns:
        ParsedSheet with rows keyed by header name.

    Raises:
        SpreadsheetParseError: If the workbook is unreadable, empty or has no headers.
    """
    try:
        wb = load_workbook(filename=io.BytesIO(file_content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as e:
        raise SpreadsheetParseError(f"Could not read workbook: {e}") from e

    try:
        ws = wb.worksheets[0] if wb.worksheets else None
        if ws is None:
            raise SpreadsheetParseError("XLSX file has no worksheets")

        row_iter = ws.iter_rows(values_only=True)
        try:
            raw_headers = next(row_iter)
        except StopIteration:
            raise SpreadsheetParseError("XLSX file is empty") from None

        headers = _unique_headers(list(raw_headers))
        sheet = ParsedSheet(headers=[h for h in headers if h])
        if not sheet.headers:
            raise SpreadsheetParseError("XLSX file has no valid headers")

        # read-only worksheets yield a blank row for every row missing from the XML
        for row_number, row_values in enumerate(row_iter, start=FIRST_DATA_ROW):
            if len(sheet.rows) >= max_rows:
                break
            row: dict[str, Any] = {}
            for j, header in enumerate(headers):
                if not header:
                    continue
                val = row_values[j] if j < len(row_values) else None
                row[header] = val.strip() if isinstance(val, str) else val
            if not _is_empty_row(row):
                sheet.add(row_number, row)
    finally:
        wb.close()

    return sheet


def parse_spreadsheet(file_content: bytes, max_rows: int = MAX_ROWS) -> ParsedSheet:
    """Sniff the upload and parse it as XLSX or CSV."""
    if sniff_file_type(file_content) == "xlsx":
        return parse_xlsx(file_content, max_rows=max_rows)
    return parse_csv(file_content, max_rows=max_rows)
