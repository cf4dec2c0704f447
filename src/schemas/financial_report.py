"""Financial report Pydantic schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.models.financial_report import FinancialReportType, ReportStatus


class FinancialReportCreate(BaseModel):
    """Schema for recording a financial report.

    Either structured ``data`` or the ``storage_key`` of an uploaded file is required.
    """

    type: FinancialReportType
    fiscal_year: int = Field(..., ge=1900, le=2100)
    period: str = Field(..., min_length=1, max_length=20, description="e.g. Q1, H2, FY, 2026-03")
    data: dict[str, Any] | None = None
    storage_key: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def _check_content(self) -> "FinancialReportCreate":
        if self.data is None and not self.storage_key:
            raise ValueError("Either data or storage_key must be provided")
        return self


class FinancialReportUpdate(BaseModel):
    """Schema for editing a draft report."""

    type: FinancialReportType | None = None
    fiscal_year: int | None = Field(default=None, ge=1900, le=2100)
    period: str | None = Field(default=None, min_length=1, max_length=20)
    data: dict[str, Any] | None = None


class FinancialReportFile(BaseModel):
    """Schema for attaching an uploaded file to a report."""

    storage_key: str = Field(..., min_length=1, max_length=500)


class FinancialReportResponse(BaseModel):
    """Schema for financial report API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    type: FinancialReportType
    fiscal_year: int
    period: str
    data: dict[str, Any] | None = None
    storage_key: str | None = None
    status: ReportStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None
