"""
app/services/batch_committer.py

Commits validated delivery records to storage in bounded, sequential chunks.

A chunk whose bulk insert fails is retried one record at a time so a single
bad record does not sink its chunk-mates. A record that also fails on its
own is counted as a permanent error for the run and is not retried again.
No storage failure aborts the run; everything is reported in the returned
BatchResult.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

import anyio

from app.domain.delivery_record import BatchResult, DeliveryRecord, InsertOutcome
from app.exceptions import BatchInsertError, RecordInsertError
from app.logging_utils import log_event
from app.repositories.delivery_record_repository import DeliveryRecordStorage

DEFAULT_BATCH_SIZE = 1000
DEFAULT_PAUSE_SECONDS = 0.1

# Failure messages quoted in one chunk's error detail line.
_MAX_QUOTED_FAILURES = 3

ProgressCallback = Callable[[int, int, int], None]


@dataclass(frozen=True)
class RecordOutcome:
    """
    Result of one record inside a chunk. `index` is the 0-based position in
    the full record list.
    """

    index: int
    error: RecordInsertError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ChunkOutcome:
    outcomes: list[RecordOutcome] = field(default_factory=list)
    chunk_error: BatchInsertError | None = None

    @property
    def degraded(self) -> bool:
        return self.chunk_error is not None

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.ok)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.ok)


async def _guarded(
    call: Callable[[Any], Awaitable[InsertOutcome]],
    argument: Any,
) -> InsertOutcome:
    try:
        return await call(argument)
    except Exception as exc:  # noqa: BLE001
        return InsertOutcome(error=f"{type(exc).__name__}: {exc}")


class TwoTierInsertPolicy:
    """
    Chunk attempt first, then one attempt per record of a failed chunk.
    """

    async def insert_chunk(
        self,
        storage: DeliveryRecordStorage,
        chunk: Sequence[DeliveryRecord],
        *,
        start: int = 0,
    ) -> ChunkOutcome:
        bulk = await _guarded(storage.insert_many, chunk)
        if bulk.ok:
            return ChunkOutcome(outcomes=[RecordOutcome(index=start + offset) for offset in range(len(chunk))])

        outcomes: list[RecordOutcome] = []
        for offset, record in enumerate(chunk):
            single = await _guarded(storage.insert_one, record)
            error = None if single.ok else RecordInsertError(single.error)
            outcomes.append(RecordOutcome(index=start + offset, error=error))

        return ChunkOutcome(outcomes=outcomes, chunk_error=BatchInsertError(bulk.error))


class BatchCommitter:
    """
    Sequential chunked commit with per-record fallback and progress reporting.
    """

    def __init__(
        self,
        storage: DeliveryRecordStorage,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        pause_seconds: float = DEFAULT_PAUSE_SECONDS,
        retry_policy: TwoTierInsertPolicy | None = None,
        logger: logging.Logger | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self._storage = storage
        self._batch_size = max(1, batch_size)
        self._pause_seconds = max(0.0, pause_seconds)
        self._retry_policy = retry_policy or TwoTierInsertPolicy()
        self._logger = logger or logging.getLogger(__name__)
        self._sleep = sleep or anyio.sleep

    async def commit_in_batches(
        self,
        records: Sequence[DeliveryRecord],
        on_progress: ProgressCallback | None = None,
        *,
        batch_size: int | None = None,
    ) -> BatchResult:
        """
        Insert `records` chunk by chunk and return the success/error tally.

        `on_progress(percent, processed, total)` is called once per chunk.
        """

        size = max(1, batch_size or self._batch_size)
        total = len(records)
        if total == 0:
            return BatchResult()

        chunk_count = math.ceil(total / size)
        success_count = 0
        error_count = 0
        error_details: list[str] = []

        for chunk_number, start in enumerate(range(0, total, size), start=1):
            chunk = records[start : start + size]
            outcome = await self._retry_policy.insert_chunk(self._storage, chunk, start=start)

            success_count += outcome.succeeded
            error_count += outcome.failed
            if outcome.degraded:
                error_details.append(self._describe_degraded_chunk(chunk_number, start, len(chunk), outcome))
                self._log_degraded_chunk(chunk_number, outcome)
            else:
                log_event(
                    self._logger,
                    logging.INFO,
                    "chunk_committed",
                    chunk=chunk_number,
                    chunks=chunk_count,
                    records=len(chunk),
                )

            processed = start + len(chunk)
            if on_progress is not None:
                on_progress(_percent(processed, total), processed, total)

            if chunk_number < chunk_count and self._pause_seconds > 0:
                await self._sleep(self._pause_seconds)

        log_event(
            self._logger,
            logging.INFO if error_count == 0 else logging.WARNING,
            "commit_finished",
            total=total,
            success=success_count,
            errors=error_count,
            degraded_chunks=len(error_details),
        )
        return BatchResult(
            success_count=success_count,
            error_count=error_count,
            error_details=error_details,
        )

    @staticmethod
    def _describe_degraded_chunk(
        chunk_number: int,
        start: int,
        length: int,
        outcome: ChunkOutcome,
    ) -> str:
        detail = (
            f"Batch {chunk_number} (records {start}-{start + length - 1}): "
            f"{outcome.succeeded} succeeded, {outcome.failed} failed"
        )
        failures = [item for item in outcome.outcomes if not item.ok]
        if failures:
            quoted = "; ".join(
                f"record {item.index}: {item.error}" for item in failures[:_MAX_QUOTED_FAILURES]
            )
            if len(failures) > _MAX_QUOTED_FAILURES:
                quoted += f"; {len(failures) - _MAX_QUOTED_FAILURES} more"
            detail += f" [{quoted}]"
        return detail

    def _log_degraded_chunk(self, chunk_number: int, outcome: ChunkOutcome) -> None:
        log_event(
            self._logger,
            logging.WARNING,
            "chunk_degraded",
            chunk=chunk_number,
            chunk_error=str(outcome.chunk_error),
            succeeded=outcome.succeeded,
            failed=outcome.failed,
        )
        for item in outcome.outcomes:
            if not item.ok:
                log_event(
                    self._logger,
                    logging.ERROR,
                    "record_insert_failed",
                    chunk=chunk_number,
                    index=item.index,
                    error=str(item.error),
                )


def _percent(processed: int, total: int) -> int:
    return int(math.floor(processed * 100 / total + 0.5))
