"""
app/schemas package marker.
"""

from app.schemas.delivery_import import (
    ClearDataResponse,
    DeliveryImportSummaryResponse,
    DeliveryStatsResponse,
    TableStatusResponse,
)

__all__ = [
    "ClearDataResponse",
    "DeliveryImportSummaryResponse",
    "DeliveryStatsResponse",
    "TableStatusResponse",
]
