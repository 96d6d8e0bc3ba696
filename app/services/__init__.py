"""
app/services package marker.
"""

from app.services.batch_committer import BatchCommitter, TwoTierInsertPolicy
from app.services.spreadsheet_ingestion_service import (
    SpreadsheetIngestionService,
    get_spreadsheet_ingestion_service,
)

__all__ = [
    "BatchCommitter",
    "TwoTierInsertPolicy",
    "SpreadsheetIngestionService",
    "get_spreadsheet_ingestion_service",
]
