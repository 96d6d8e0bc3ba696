"""
app/domain package marker.
"""

from app.domain.delivery_record import (
    BatchResult,
    DeliveryRecord,
    DeliveryStats,
    ImportSummary,
    IngestionReport,
    InsertOutcome,
    TableStatus,
)

__all__ = [
    "BatchResult",
    "DeliveryRecord",
    "DeliveryStats",
    "ImportSummary",
    "IngestionReport",
    "InsertOutcome",
    "TableStatus",
]
