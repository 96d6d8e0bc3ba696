"""
app/parsers/spreadsheet_parser.py

Reads an uploaded workbook into raw row mappings keyed by header text.

Only the first sheet is read; later sheets are ignored.
"""

from __future__ import annotations

import io
import logging
import zipfile
import zlib
from typing import Any

import anyio.to_thread
import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from app.domain.delivery_record import RawRow
from app.exceptions import SpreadsheetParseError

logger = logging.getLogger(__name__)

# Compound File header of legacy BIFF (.xls) workbooks.
_OLE_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

# Read-only sheets parse their XML lazily, so corrupt parts only fail during
# iteration. XML parse errors from both lxml and ElementTree are SyntaxErrors.
_SHEET_READ_ERRORS = (SyntaxError, KeyError, ValueError, OSError, zipfile.BadZipFile, zlib.error)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _header_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _read_sheet(sheet: Any) -> tuple[list[str], list[RawRow]]:
    # The stored <dimension> can understate the used range; scan the whole sheet.
    sheet.reset_dimensions()
    row_iter = sheet.iter_rows(values_only=True)

    header_row = next(row_iter, None)
    if header_row is None:
        raise SpreadsheetParseError(f"Sheet '{sheet.title}' is empty.")
    headers = [_header_text(cell) for cell in header_row]
    if not any(headers):
        raise SpreadsheetParseError(f"Sheet '{sheet.title}' has no header row.")

    rows: list[RawRow] = []
    for cells in row_iter:
        row = {
            header: value
            for header, value in zip(headers, cells)
            if header and not _is_blank(value)
        }
        if row:
            rows.append(row)
    return headers, rows


def read_spreadsheet_rows(content: bytes) -> list[RawRow]:
    """
    Decode workbook bytes into one mapping per non-empty data row.

    Columns with a blank header are dropped. Blank cells are left out of
    the row mapping.
    """

    if not content:
        raise SpreadsheetParseError("Uploaded spreadsheet is empty.")
    if content.startswith(_OLE_SIGNATURE):
        raise SpreadsheetParseError(
            "Legacy .xls workbooks are not supported. Save the file as .xlsx and upload again."
        )

    try:
        workbook = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, *_SHEET_READ_ERRORS) as exc:
        raise SpreadsheetParseError("Uploaded file is not a readable spreadsheet.") from exc

    try:
        if not workbook.worksheets:
            raise SpreadsheetParseError("Spreadsheet has no sheets.")
        sheet = workbook.worksheets[0]
        try:
            headers, rows = _read_sheet(sheet)
        except _SHEET_READ_ERRORS as exc:
            raise SpreadsheetParseError(f"Sheet '{sheet.title}' is corrupt and could not be read.") from exc
    finally:
        workbook.close()

    if not rows:
        raise SpreadsheetParseError(f"Sheet '{sheet.title}' has no data rows.")

    logger.info(
        "Spreadsheet decoded sheet=%r columns=%d rows=%d",
        sheet.title,
        sum(1 for header in headers if header),
        len(rows),
    )
    return rows


async def parse_spreadsheet(content: bytes) -> list[RawRow]:
    """
    Decode workbook bytes off the event loop.
    """

    return await anyio.to_thread.run_sync(read_spreadsheet_rows, content)
