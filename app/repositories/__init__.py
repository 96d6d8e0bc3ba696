"""
app/repositories package marker.
"""

from app.repositories.delivery_record_repository import DeliveryRecordRepository, DeliveryRecordStorage

__all__ = [
    "DeliveryRecordRepository",
    "DeliveryRecordStorage",
]
