"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.delivery_data import DeliveryData

__all__ = [
    "DeliveryData",
]
