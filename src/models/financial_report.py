"""Financial report type definitions."""

from datetime import datetime
from enum import Enum
from typing import Any, TypedDict


class FinancialReportType(str, Enum):
    """Financial report kinds."""

    PROFIT_LOSS = "PROFIT_LOSS"
    BALANCE_SHEET = "BALANCE_SHEET"
    CASH_FLOW = "CASH_FLOW"
    BUDGET_VS_ACTUAL = "BUDGET_VS_ACTUAL"
    CUSTOM = "CUSTOM"


class ReportStatus(str, Enum):
    """Financial report status values. FINAL reports are read-only."""

    DRAFT = "DRAFT"
    FINAL = "FINAL"


class FinancialReport(TypedDict):
    """Financial report table row representation.

    ``data`` holds structured figures; ``storage_key`` points at an uploaded
    PDF or spreadsheet in blob storage. At least one of them is set.
    """

    id: str
    company_id: str
    type: FinancialReportType
    fiscal_year: int
    period: str
    data: dict[str, Any] | None
    storage_key: str | None
    status: ReportStatus
    created_at: datetime
