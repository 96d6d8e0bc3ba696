"""
app/api/routers/delivery_import.py

Delivery spreadsheet import HTTP endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from app.api.dependencies import get_batch_committer, get_delivery_repository, get_spreadsheet_upload
from app.config import ImportSettings, get_import_settings
from app.exceptions import DeliveryPersistenceError, EmptyResultError, SpreadsheetParseError
from app.repositories.delivery_record_repository import DeliveryRecordRepository
from app.schemas.delivery_import import (
    ClearDataResponse,
    DeliveryImportSummaryResponse,
    DeliveryStatsResponse,
    TableStatusResponse,
)
from app.services.batch_committer import BatchCommitter
from app.services.spreadsheet_ingestion_service import (
    SpreadsheetIngestionService,
    get_spreadsheet_ingestion_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/delivery-data", tags=["delivery-data"])


@router.post("/import", response_model=DeliveryImportSummaryResponse, response_model_by_alias=True)
async def import_spreadsheet(
    file: UploadFile = Depends(get_spreadsheet_upload),
    ingestion_service: SpreadsheetIngestionService = Depends(get_spreadsheet_ingestion_service),
    committer: BatchCommitter = Depends(get_batch_committer),
    settings: ImportSettings = Depends(get_import_settings),
) -> DeliveryImportSummaryResponse:
    """
    Import one spreadsheet of delivery shift records.
    """

    filename = file.filename
    try:
        content = await file.read(settings.max_upload_bytes + 1)
    finally:
        await file.close()

    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Uploaded file exceeds configured size limit.",
        )

    def _log_progress(percent: int, processed: int, total: int) -> None:
        logger.info("Import progress file=%r %d%% (%d/%d)", filename, percent, processed, total)

    try:
        summary = await ingestion_service.import_file(content, committer, _log_progress)
    except SpreadsheetParseError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Could not read file: {exc}",
        ) from exc
    except EmptyResultError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid data found in the file.",
        ) from exc

    return DeliveryImportSummaryResponse(
        rows_read=summary.rows_read,
        rows_skipped=summary.rows_skipped,
        success=summary.result.success_count,
        errors=summary.result.error_count,
        error_details=summary.result.error_details,
    )


@router.get("/table-status", response_model=TableStatusResponse)
async def table_status(
    repository: DeliveryRecordRepository = Depends(get_delivery_repository),
) -> TableStatusResponse:
    result = await repository.check_table()
    return TableStatusResponse(exists=result.exists, error=result.error)


@router.get("/stats", response_model=DeliveryStatsResponse)
async def delivery_stats(
    repository: DeliveryRecordRepository = Depends(get_delivery_repository),
) -> DeliveryStatsResponse:
    try:
        stats = await repository.get_stats()
    except DeliveryPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to read delivery statistics.",
        ) from exc
    return DeliveryStatsResponse(
        total_records=stats.total_records,
        total_ofertadas=stats.total_ofertadas,
        total_aceitas=stats.total_aceitas,
        total_rejeitadas=stats.total_rejeitadas,
        total_completadas=stats.total_completadas,
    )


@router.delete("", response_model=ClearDataResponse)
async def clear_delivery_data(
    repository: DeliveryRecordRepository = Depends(get_delivery_repository),
) -> ClearDataResponse:
    """
    Remove every stored delivery record.
    """

    try:
        removed = await repository.clear_all()
    except DeliveryPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to clear delivery records.",
        ) from exc
    message = "Table was already empty." if removed == 0 else f"{removed} records removed."
    return ClearDataResponse(removed=removed, message=message)
