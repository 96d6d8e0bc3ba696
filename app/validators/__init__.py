"""
app/validators package marker.
"""

from app.validators.delivery_row_validator import DeliveryRowValidator

__all__ = [
    "DeliveryRowValidator",
]
