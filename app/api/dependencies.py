"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation and service wiring.
"""

from __future__ import annotations

from fastapi import Depends, File, HTTPException, UploadFile, status

from app.config import ImportSettings, get_import_settings
from app.repositories.delivery_record_repository import DeliveryRecordRepository
from app.services.batch_committer import BatchCommitter

SPREADSHEET_EXTENSIONS = (".xlsx", ".xls")
SPREADSHEET_CONTENT_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
}


def get_spreadsheet_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is a spreadsheet by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    is_spreadsheet_filename = filename.endswith(SPREADSHEET_EXTENSIONS)
    is_spreadsheet_content_type = content_type in SPREADSHEET_CONTENT_TYPES

    if not is_spreadsheet_filename and not is_spreadsheet_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only .xlsx or .xls files are allowed.",
        )

    return file


def get_delivery_repository() -> DeliveryRecordRepository:
    return DeliveryRecordRepository()


def get_batch_committer(
    repository: DeliveryRecordRepository = Depends(get_delivery_repository),
    settings: ImportSettings = Depends(get_import_settings),
) -> BatchCommitter:
    return BatchCommitter(
        repository,
        batch_size=settings.batch_size,
        pause_seconds=settings.pause_seconds,
    )
