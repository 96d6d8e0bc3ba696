"""
app/validators/delivery_row_validator.py

Row-level validation and type conversion for delivery spreadsheet imports.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from app.domain.delivery_record import (
    COUNTER_COLUMNS,
    DATE_COLUMN,
    DRIVER_NAME_COLUMN,
    FEE_COLUMN,
    STRING_COLUMNS,
    TIME_COLUMNS,
    DeliveryRecord,
    RawRow,
)
from app.logging_utils import log_event
from app.validators.field_coercion import (
    coerce_date,
    coerce_float,
    coerce_int,
    coerce_string,
    coerce_time_of_day,
    parse_date,
)

INVALID_DATE_DEFAULT = "default"
INVALID_DATE_REJECT = "reject"


class DeliveryRowValidator:
    """
    Converts one raw spreadsheet row into a DeliveryRecord, or rejects it.

    A row is rejected when the period date or driver name is missing. With
    `invalid_date_policy="reject"` a row whose date cannot be parsed is also
    rejected; the default policy files it under the processing date.
    """

    def __init__(
        self,
        *,
        invalid_date_policy: str = INVALID_DATE_DEFAULT,
        logger: logging.Logger | None = None,
        today: date | None = None,
    ) -> None:
        if invalid_date_policy not in {INVALID_DATE_DEFAULT, INVALID_DATE_REJECT}:
            raise ValueError(f"Unknown invalid_date_policy '{invalid_date_policy}'.")
        self._invalid_date_policy = invalid_date_policy
        self._logger = logger or logging.getLogger(__name__)
        self._today = today

    def validate_row(self, raw: RawRow, *, row_number: int | None = None) -> DeliveryRecord | None:
        """
        Return the typed record, or None when the row must be skipped.
        """

        missing = [
            column
            for column in (DATE_COLUMN, DRIVER_NAME_COLUMN)
            if self._is_missing(raw.get(column))
        ]
        if missing:
            log_event(
                self._logger,
                logging.INFO,
                "row_rejected",
                reason="missing_required_fields",
                row_number=row_number,
                missing=missing,
            )
            return None

        try:
            return self._convert(raw, row_number=row_number)
        except Exception as exc:  # noqa: BLE001
            log_event(
                self._logger,
                logging.ERROR,
                "row_rejected",
                reason="conversion_failed",
                row_number=row_number,
                error=repr(exc),
                raw_row=dict(raw),
            )
            return None

    def _convert(self, raw: RawRow, *, row_number: int | None) -> DeliveryRecord | None:
        raw_date = raw.get(DATE_COLUMN)
        period_date = parse_date(raw_date)
        if period_date is None:
            if self._invalid_date_policy == INVALID_DATE_REJECT:
                log_event(
                    self._logger,
                    logging.WARNING,
                    "row_rejected",
                    reason="invalid_date",
                    row_number=row_number,
                    value=raw_date,
                )
                return None
            period_date = coerce_date(raw_date, today=self._today)
            log_event(
                self._logger,
                logging.WARNING,
                "date_fallback",
                row_number=row_number,
                value=raw_date,
                fallback=period_date,
            )

        values: dict[str, Any] = {DATE_COLUMN: period_date}
        for column in STRING_COLUMNS:
            values[column] = coerce_string(raw.get(column))
        for column in TIME_COLUMNS:
            values[column] = coerce_time_of_day(raw.get(column), log=self._logger)
        for column in COUNTER_COLUMNS:
            values[column] = max(0, coerce_int(raw.get(column)))
        values[FEE_COLUMN] = max(0.0, coerce_float(raw.get(FEE_COLUMN)))

        return DeliveryRecord(**values)

    @staticmethod
    def _is_missing(value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, float) and value != value:
            return True
        return isinstance(value, str) and value.strip() == ""
