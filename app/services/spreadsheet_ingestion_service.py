"""
app/services/spreadsheet_ingestion_service.py

Service layer for delivery spreadsheet ingestion.

Parses the uploaded workbook, validates every row, and optionally hands the
surviving records to a BatchCommitter. Invalid rows are skipped with a log
entry; only an unreadable file (SpreadsheetParseError) or a file without a
single valid row (EmptyResultError) is raised to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from functools import lru_cache

from app.config import get_import_settings
from app.domain.delivery_record import DeliveryRecord, ImportSummary, IngestionReport, RawRow
from app.exceptions import EmptyResultError
from app.logging_utils import log_event
from app.parsers.spreadsheet_parser import parse_spreadsheet
from app.services.batch_committer import BatchCommitter, ProgressCallback
from app.validators.delivery_row_validator import DeliveryRowValidator

SpreadsheetParser = Callable[[bytes], Awaitable[list[RawRow]]]


class SpreadsheetIngestionService:
    """
    Turns workbook bytes into validated DeliveryRecords.
    """

    def __init__(
        self,
        *,
        parser: SpreadsheetParser = parse_spreadsheet,
        validator: DeliveryRowValidator | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._parser = parser
        self._logger = logger or logging.getLogger(__name__)
        self._validator = validator or DeliveryRowValidator(logger=self._logger)

    async def ingest(self, content: bytes) -> list[DeliveryRecord]:
        """
        Parse and validate a workbook, keeping valid rows in sheet order.
        """

        report = await self.ingest_with_report(content)
        return report.records

    async def ingest_with_report(self, content: bytes) -> IngestionReport:
        raw_rows = await self._parser(content)

        records: list[DeliveryRecord] = []
        # Row 1 of the sheet is the header.
        for row_number, raw_row in enumerate(raw_rows, start=2):
            record = self._validator.validate_row(raw_row, row_number=row_number)
            if record is not None:
                records.append(record)

        report = IngestionReport(records=records, rows_read=len(raw_rows))
        log_event(
            self._logger,
            logging.INFO,
            "spreadsheet_validated",
            rows_read=report.rows_read,
            rows_valid=len(records),
            rows_skipped=report.rows_skipped,
        )
        if not records:
            raise EmptyResultError(rows_read=report.rows_read)
        return report

    async def import_file(
        self,
        content: bytes,
        committer: BatchCommitter,
        on_progress: ProgressCallback | None = None,
    ) -> ImportSummary:
        """
        Ingest a workbook and commit its valid records.
        """

        report = await self.ingest_with_report(content)
        result = await committer.commit_in_batches(report.records, on_progress)
        return ImportSummary(
            rows_read=report.rows_read,
            rows_skipped=report.rows_skipped,
            result=result,
        )


@lru_cache(maxsize=1)
def get_spreadsheet_ingestion_service() -> SpreadsheetIngestionService:
    """
    Build and cache the ingestion service with env-driven settings.
    """

    settings = get_import_settings()
    return SpreadsheetIngestionService(
        validator=DeliveryRowValidator(invalid_date_policy=settings.invalid_date_policy),
    )
