"""
app/schemas/delivery_import.py

Response schemas for delivery import endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DeliveryImportSummaryResponse(BaseModel):
    """
    API response model for one spreadsheet import.

    `success`, `errors` and `errorDetails` keep the field names the dashboard
    front end already reads.
    """

    model_config = ConfigDict(populate_by_name=True)

    rows_read: int = Field(..., ge=0)
    rows_skipped: int = Field(..., ge=0)
    success: int = Field(..., ge=0)
    errors: int = Field(..., ge=0)
    error_details: list[str] = Field(default_factory=list, alias="errorDetails")


class TableStatusResponse(BaseModel):
    exists: bool
    error: str | None = None


class DeliveryStatsResponse(BaseModel):
    """
    Ride counter totals across every stored record.
    """

    total_records: int = Field(..., ge=0)
    total_ofertadas: int = Field(..., ge=0)
    total_aceitas: int = Field(..., ge=0)
    total_rejeitadas: int = Field(..., ge=0)
    total_completadas: int = Field(..., ge=0)


class ClearDataResponse(BaseModel):
    removed: int = Field(..., ge=0)
    message: str
