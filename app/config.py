"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

INVALID_DATE_POLICIES = frozenset({"default", "reject"})


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_invalid_date_policy() -> str:
    policy = _get_str_env("DELIVERY_IMPORT_INVALID_DATE_POLICY", "default").lower()
    if policy not in INVALID_DATE_POLICIES:
        raise RuntimeError(
            f"DELIVERY_IMPORT_INVALID_DATE_POLICY '{policy}' is not valid. "
            f"Allowed values: {sorted(INVALID_DATE_POLICIES)}."
        )
    return policy


@dataclass(frozen=True)
class ImportSettings:
    """
    Runtime settings for delivery spreadsheet imports.

    `invalid_date_policy` decides what happens to a row whose period date
    cannot be parsed: "default" files it under the processing date,
    "reject" drops the row.
    """

    batch_size: int = 1000
    pause_seconds: float = 0.1
    invalid_date_policy: str = "default"
    max_upload_bytes: int = 50 * 1024 * 1024


@lru_cache(maxsize=1)
def get_import_settings() -> ImportSettings:
    """
    Return cached import settings from environment variables.
    """

    return ImportSettings(
        batch_size=max(1, _get_int_env("DELIVERY_IMPORT_BATCH_SIZE", 1000)),
        pause_seconds=max(0.0, _get_float_env("DELIVERY_IMPORT_PAUSE_SECONDS", 0.1)),
        invalid_date_policy=_get_invalid_date_policy(),
        max_upload_bytes=max(1, _get_int_env("DELIVERY_IMPORT_MAX_UPLOAD_BYTES", 50 * 1024 * 1024)),
    )
