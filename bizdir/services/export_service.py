"""Export service for generating business exports in various formats."""

import csv
import io
import re
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from bizdir.models.business import Business
from bizdir.schemas.export import BusinessFlatExport, ExportFormat

DEFAULT_BASENAME = "businesses"

# Business export headers
BUSINESS_HEADERS = [
    "Name",
    "Street Name",
    "Zipcode",
    "City",
    "Email",
    "Phone",
    "Tags",
    "Comment",
    "Active",
]

# Mailing list export headers
MAILING_HEADERS = [
    "Name",
    "Address Line 1",
    "Address Line 2",
]

SHEET_TITLE = "Businesses"

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f\x7f]')


def select_businesses(
    businesses: Sequence[Business],
    ids: Sequence[str] | None,
) -> list[Business]:
    """Keep the businesses whose ID is listed, in store order.

    No IDs (None or empty) selects everything.
    """
    if not ids:
        return list(businesses)
    wanted = set(ids)
    return [b for b in businesses if b.id in wanted]


def _business_to_row(business: Business) -> list[Any]:
    """Convert a business to a row for CSV/Excel."""
    flat = BusinessFlatExport.from_business(business)
    return [
        flat.name,
        flat.street_name,
        flat.zipcode,
        flat.city,
        flat.email,
        flat.phone,
        flat.tags,
        flat.comment,
        flat.active,
    ]


def _business_to_mailing_row(business: Business) -> list[str]:
    """Convert a business to an address-label row."""
    return [
        business.name,
        business.street_name,
        f"{business.zipcode} {business.city}".strip(),
    ]


def _rows_to_csv(headers: list[str], rows: list[list[Any]]) -> bytes:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(headers)
    writer.writerows(rows)
    return output.getvalue().encode("utf-8")


def export_businesses_to_csv(businesses: Sequence[Business]) -> bytes:
    """Export businesses to CSV format.

    Args:
        businesses: Businesses to export, in output order

    Returns:
        CSV content as bytes
    """
    return _rows_to_csv(BUSINESS_HEADERS, [_business_to_row(b) for b in businesses])


def export_businesses_to_mailing_csv(businesses: Sequence[Business]) -> bytes:
    """Export businesses as a mailing list: name plus two address lines."""
    return _rows_to_csv(MAILING_HEADERS, [_business_to_mailing_row(b) for b in businesses])


def export_businesses_to_xlsx(businesses: Sequence[Business]) -> bytes:
    """Export businesses to Excel (XLSX) format.

    Args:
        businesses: Businesses to export, in output order

    Returns:
        XLSX content as bytes
    """
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    # Header styling
    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
    header_alignment = Alignment(horizontal="center")

    for col_idx, header in enumerate(BUSINESS_HEADERS, 1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment

    rows = [_business_to_row(b) for b in businesses]
    for row_idx, values in enumerate(rows, 2):
        for col_idx, value in enumerate(values, 1):
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            # openpyxl treats a leading "=" as a formula, keep text as text
            if isinstance(value, str):
                cell.data_type = "s"

    # Fit column widths to content
    for col_idx, header in enumerate(BUSINESS_HEADERS, 1):
        max_length = max(
            [len(header)] + [len(str(row[col_idx - 1])) for row in rows if row[col_idx - 1]]
        )
        ws.column_dimensions[get_column_letter(col_idx)].width = min(max_length + 2, 50)

    ws.freeze_panes = "A2"

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def export_businesses_to_docx(businesses: Sequence[Business]) -> bytes:
    """Export businesses to a Word document of centred address blocks.

    Each business gets a level-2 heading with its name followed by the street
    line and the "zipcode city" line. Blocks follow each other without page
    breaks.

    Args:
        businesses: Businesses to export, in output order

    Returns:
        DOCX content as bytes
    """
    document = Document()

    for business in businesses:
        heading = document.add_heading(business.name, level=2)
        heading.alignment = WD_ALIGN_PARAGRAPH.CENTER
        heading.paragraph_format.space_after = Pt(10)

        street = document.add_paragraph(business.street_name)
        street.alignment = WD_ALIGN_PARAGRAPH.CENTER
        street.paragraph_format.space_after = Pt(5)

        place = document.add_paragraph(f"{business.zipcode} {business.city}")
        place.alignment = WD_ALIGN_PARAGRAPH.CENTER
        place.paragraph_format.space_after = Pt(20)

    output = io.BytesIO()
    document.save(output)
    return output.getvalue()


def render_export(export_format: ExportFormat, businesses: Sequence[Business]) -> bytes:
    """Serialise businesses in the requested format."""
    renderers = {
        ExportFormat.XLSX: export_businesses_to_xlsx,
        ExportFormat.CSV: export_businesses_to_csv,
        ExportFormat.DOCX: export_businesses_to_docx,
        ExportFormat.MAILING: export_businesses_to_mailing_csv,
    }
    return renderers[export_format](businesses)


def get_content_type(export_format: ExportFormat) -> str:
    """Get the MIME type for an export format.

    Args:
        export_format: Export format

    Returns:
        MIME type string
    """
    content_types = {
        ExportFormat.CSV: "text/csv",
        ExportFormat.MAILING: "text/csv",
        ExportFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        ExportFormat.DOCX: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }
    return content_types[export_format]


def sanitize_basename(name: str | None) -> str:
    """Strip characters that are unsafe in a download filename."""
    if not name:
        return ""
    return _UNSAFE_FILENAME_CHARS.sub("", name).strip().strip(".")


def generate_filename(
    export_format: ExportFormat,
    custom_name: str | None = None,
    default_basename: str = DEFAULT_BASENAME,
) -> str:
    """Build the download filename from the custom name or the default base name.

    Args:
        export_format: Export format, decides the extension
        custom_name: Name chosen by the user, may be empty
        default_basename: Base name used when no usable custom name is given

    Returns:
        Filename string, e.g. "businesses.xlsx"
    """
    extension = export_format.extension
    basename = sanitize_basename(custom_name) or default_basename
    if basename.lower().endswith(f".{extension}"):
        basename = basename[: -(len(extension) + 1)] or default_basename
    return f"{basename}.{extension}"


def content_disposition(filename: str) -> str:
    """Build an attachment Content-Disposition header value.

    Non-ASCII names get an ASCII fallback plus an RFC 5987 ``filename*``.
    """
    if filename.isascii():
        return f'attachment; filename="{filename}"'
    stem, _, extension = filename.rpartition(".")
    ascii_stem = stem.encode("ascii", "ignore").decode("ascii").strip()
    fallback = f"{ascii_stem or DEFAULT_BASENAME}.{extension}"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"
