"""
Exceptions for the delivery spreadsheet import flow.

Only SpreadsheetParseError and EmptyResultError are raised out of the
import pipeline. BatchInsertError and RecordInsertError name the storage
failure kinds recorded in commit outcomes. DeliveryPersistenceError covers
the stats and clear operations, which have no outcome to report into.
"""

from __future__ import annotations


class DeliveryImportError(Exception):
    """Base exception for delivery import failures."""


class SpreadsheetParseError(DeliveryImportError):
    """Raised when the uploaded bytes are not a readable spreadsheet."""


class EmptyResultError(DeliveryImportError):
    """Raised when no row survives validation."""

    def __init__(self, message: str = "No valid data found in the spreadsheet.", *, rows_read: int = 0) -> None:
        super().__init__(message)
        self.rows_read = rows_read


class BatchInsertError(DeliveryImportError):
    """A bulk insert of one chunk failed."""


class RecordInsertError(DeliveryImportError):
    """A single record failed even when inserted on its own."""


class DeliveryPersistenceError(DeliveryImportError):
    """Raised when a read or delete against the delivery table fails."""
