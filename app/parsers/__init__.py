"""
app/parsers package marker.
"""

from app.parsers.spreadsheet_parser import parse_spreadsheet, read_spreadsheet_rows

__all__ = [
    "parse_spreadsheet",
    "read_spreadsheet_rows",
]
