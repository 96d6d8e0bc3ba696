"""
app/api/routers package marker.
"""

from app.api.routers.delivery_import import router as delivery_import_router

__all__ = [
    "delivery_import_router",
]
