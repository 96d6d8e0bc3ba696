"""
app/repositories/delivery_record_repository.py

Persistence layer for delivery records.

Storage calls report failures as InsertOutcome values instead of raising,
so callers can tell a failed chunk from a failed record without exception
control flow.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import date
from typing import Any, Protocol

import anyio.to_thread
from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.delivery_record import DeliveryRecord, DeliveryStats, InsertOutcome, TableStatus
from app.exceptions import DeliveryPersistenceError
from db.models.delivery_data import DeliveryData

logger = logging.getLogger(__name__)


class DeliveryRecordStorage(Protocol):
    """
    Bulk and single-record insert over the delivery records table.
    """

    async def insert_many(self, records: Sequence[DeliveryRecord]) -> InsertOutcome:
        ...

    async def insert_one(self, record: DeliveryRecord) -> InsertOutcome:
        ...


def _describe_error(exc: Exception) -> str:
    original = getattr(exc, "orig", None)
    message = str(original if original is not None else exc).strip()
    first_line = message.splitlines()[0] if message else type(exc).__name__
    return f"{type(exc).__name__}: {first_line}"


def _to_row_values(record: DeliveryRecord) -> dict[str, Any]:
    values = record.to_payload()
    values["data_do_periodo"] = date.fromisoformat(values["data_do_periodo"])
    return values


class DeliveryRecordRepository:
    """
    SQLAlchemy-backed storage for the `delivery_data` table.

    Each call runs in its own short transaction on a worker thread.
    """

    def __init__(self, *, session_factory: Callable[[], Session] | None = None) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory = SessionLocal
        else:
            self._session_factory = session_factory

    async def insert_many(self, records: Sequence[DeliveryRecord]) -> InsertOutcome:
        return await anyio.to_thread.run_sync(self._insert_records, list(records))

    async def insert_one(self, record: DeliveryRecord) -> InsertOutcome:
        return await anyio.to_thread.run_sync(self._insert_records, [record])

    async def check_table(self) -> TableStatus:
        """
        Probe the table with a one-row read.
        """

        return await anyio.to_thread.run_sync(self._check_table)

    async def get_stats(self) -> DeliveryStats:
        return await anyio.to_thread.run_sync(self._get_stats)

    async def clear_all(self) -> int:
        """
        Delete every stored record and return how many were removed.
        """

        return await anyio.to_thread.run_sync(self._clear_all)

    def _insert_records(self, records: list[DeliveryRecord]) -> InsertOutcome:
        if not records:
            return InsertOutcome(inserted=0)

        try:
            rows = [_to_row_values(record) for record in records]
            with self._session_factory() as session:
                with session.begin():
                    session.execute(insert(DeliveryData), rows)
        except (SQLAlchemyError, ValueError) as exc:
            return InsertOutcome(error=_describe_error(exc))
        return InsertOutcome(inserted=len(records))

    def _check_table(self) -> TableStatus:
        try:
            with self._session_factory() as session:
                session.execute(select(DeliveryData.id).limit(1)).all()
        except SQLAlchemyError as exc:
            logger.error("delivery_data table check failed: %s", exc)
            return TableStatus(exists=False, error=_describe_error(exc))
        return TableStatus(exists=True)

    def _get_stats(self) -> DeliveryStats:
        stmt = select(
            func.count(DeliveryData.id),
            func.coalesce(func.sum(DeliveryData.numero_de_corridas_ofertadas), 0),
            func.coalesce(func.sum(DeliveryData.numero_de_corridas_aceitas), 0),
            func.coalesce(func.sum(DeliveryData.numero_de_corridas_rejeitadas), 0),
            func.coalesce(func.sum(DeliveryData.numero_de_corridas_completadas), 0),
        )
        try:
            with self._session_factory() as session:
                total, ofertadas, aceitas, rejeitadas, completadas = session.execute(stmt).one()
        except SQLAlchemyError as exc:
            logger.error("delivery_data stats query failed: %s", exc)
            raise DeliveryPersistenceError("Failed to read delivery record totals.") from exc
        return DeliveryStats(
            total_records=int(total),
            total_ofertadas=int(ofertadas),
            total_aceitas=int(aceitas),
            total_rejeitadas=int(rejeitadas),
            total_completadas=int(completadas),
        )

    def _clear_all(self) -> int:
        try:
            with self._session_factory() as session:
                with session.begin():
                    count = session.scalar(select(func.count(DeliveryData.id))) or 0
                    if count:
                        session.execute(delete(DeliveryData))
        except SQLAlchemyError as exc:
            logger.error("delivery_data clear failed: %s", exc)
            raise DeliveryPersistenceError("Failed to clear delivery records.") from exc
        logger.info("Removed %d delivery records", count)
        return int(count)
