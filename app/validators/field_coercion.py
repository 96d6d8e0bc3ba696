"""
app/validators/field_coercion.py

Total conversions from raw spreadsheet cell values to normalized types.

Cells arrive as native numbers, strings (possibly with currency symbols or
thousand separators), blanks, or the date/time objects openpyxl produces for
formatted cells. None of the functions here raise: unusable input maps to a
documented default.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from app.logging_utils import log_event

logger = logging.getLogger(__name__)

# Day 0 of the spreadsheet serial date system. Using 1899-12-30 rather than
# 1900-01-01 absorbs the phantom 1900-02-29 the format inherited from Lotus.
EXCEL_EPOCH = datetime(1899, 12, 30)

DEFAULT_TIME = "00:00:00"

# Datetimes earlier than this in a time column are durations, not timestamps.
_DURATION_CUTOFF = datetime(1900, 3, 1)

_SECONDS_PER_DAY = 24 * 60 * 60
# Cell text is matched against ASCII digits only.
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)
_SERIAL_RE = re.compile(r"^\d+(\.\d+)?$", re.ASCII)
_TIME_RE = re.compile(r"^\d{1,2}:\d{2}(:\d{2})?$", re.ASCII)
_INT_PREFIX_RE = re.compile(r"-?\d+", re.ASCII)
_FLOAT_PREFIX_RE = re.compile(r"-?(\d+(\.\d*)?|\.\d+)", re.ASCII)
_NON_INT_CHARS_RE = re.compile(r"[^\d-]", re.ASCII)
_NON_FLOAT_CHARS_RE = re.compile(r"[^\d.-]", re.ASCII)
_NULL_STRINGS = frozenset({"null", "undefined", "none", "nan"})

DATE_FORMATS: tuple[str, ...] = (
    "%d/%m/%Y",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y %H:%M:%S",
    "%Y/%m/%d",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%m/%d/%Y",
)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (ArithmeticError, ValueError):
        return math.nan


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def _serial_to_date(serial: float) -> str | None:
    if not math.isfinite(serial):
        return None
    try:
        return (EXCEL_EPOCH + timedelta(days=serial)).date().isoformat()
    except (OverflowError, ValueError):
        return None


def parse_date(value: Any) -> str | None:
    """
    Normalize a cell to `YYYY-MM-DD`, or None when it is not a date.
    """

    if _is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if _is_number(value):
        return _serial_to_date(_as_float(value))

    text = str(value).strip()
    if _ISO_DATE_RE.match(text):
        try:
            return date.fromisoformat(text).isoformat()
        except ValueError:
            return None
    if _SERIAL_RE.match(text):
        return _serial_to_date(float(text))

    normalized = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return datetime.fromisoformat(normalized).date().isoformat()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    return None


def coerce_date(value: Any, *, today: date | None = None) -> str:
    """
    Normalize a cell to `YYYY-MM-DD`.

    Numbers are serial day counts from EXCEL_EPOCH (serial 1 is 1899-12-31).
    Anything unparseable falls back to `today`, the processing date by
    default.
    """

    parsed = parse_date(value)
    if parsed is not None:
        return parsed
    return (today or date.today()).isoformat()


def _format_seconds(total_seconds: int) -> str:
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def coerce_time_of_day(value: Any, *, log: logging.Logger | None = None) -> str:
    """
    Normalize a cell to `HH:MM:SS`.

    Numbers are fractions of a 24-hour day. Strings must look like `H:MM` or
    `H:MM:SS`; `H:MM` gets `:00` appended and the hour is kept as written.
    Blank input and anything else becomes `00:00:00`, the latter with a
    diagnostic log entry.
    """

    log = log or logger

    if _is_blank(value):
        return DEFAULT_TIME
    if isinstance(value, datetime):
        naive = value.replace(tzinfo=None)
        if naive < _DURATION_CUTOFF:
            # Durations past 24h come back from openpyxl as datetimes on the epoch.
            seconds = (naive - EXCEL_EPOCH).total_seconds()
            if seconds >= 0:
                return _format_seconds(_round_half_up(seconds))
        else:
            return _format_seconds(naive.hour * 3600 + naive.minute * 60 + naive.second)
    elif isinstance(value, time):
        return _format_seconds(value.hour * 3600 + value.minute * 60 + value.second)
    elif isinstance(value, timedelta):
        seconds = value.total_seconds()
        if seconds >= 0:
            return _format_seconds(_round_half_up(seconds))
    elif _is_number(value):
        seconds = _as_float(value) * _SECONDS_PER_DAY
        if math.isfinite(seconds) and seconds >= 0:
            return _format_seconds(_round_half_up(seconds))
    elif isinstance(value, str):
        text = value.strip()
        if text.lower() in _NULL_STRINGS:
            return DEFAULT_TIME
        if _TIME_RE.match(text):
            return text + ":00" if text.count(":") == 1 else text

    log_event(
        log,
        logging.WARNING,
        "time_of_day_fallback",
        value=value,
        fallback=DEFAULT_TIME,
    )
    return DEFAULT_TIME


def coerce_int(value: Any) -> int:
    """
    Parse an integer, keeping only digits and minus signs from strings.

    `"1.234"` reads as 1234 (thousand separators are dropped). Floats are
    truncated. Anything non-numeric becomes 0.
    """

    if _is_blank(value) or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        try:
            return int(value)
        except (OverflowError, ValueError, ArithmeticError):
            return 0

    cleaned = _NON_INT_CHARS_RE.sub("", str(value))
    match = _INT_PREFIX_RE.match(cleaned)
    return int(match.group(0)) if match else 0


def coerce_float(value: Any) -> float:
    """
    Parse a float, keeping only digits, dots and minus signs from strings.

    Anything non-numeric becomes 0.0.
    """

    if _is_blank(value) or isinstance(value, bool):
        return 0.0
    if _is_number(value):
        number = _as_float(value)
        return number if math.isfinite(number) else 0.0

    cleaned = _NON_FLOAT_CHARS_RE.sub("", str(value))
    match = _FLOAT_PREFIX_RE.match(cleaned)
    return float(match.group(0)) if match else 0.0


def coerce_string(value: Any) -> str:
    """
    Stringify and trim. Blank becomes an empty string.

    Whole floats render without the trailing `.0`, since numeric ids come
    back from spreadsheets as floats.
    """

    if _is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()
