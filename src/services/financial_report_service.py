"""Financial report business logic service."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import InvalidStateError, NotFoundError, ValidationError
from src.core.supabase import get_supabase_client
from src.models.financial_report import FinancialReportType, ReportStatus
from src.schemas.financial_report import FinancialReportCreate, FinancialReportUpdate

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FinancialReportService:
    """Service for financial report metadata.

    Reports start as DRAFT. Once finalized they can no longer be edited,
    re-filed or deleted.
    """

    def __init__(self) -> None:
        """Initialize financial report service with Supabase client."""
        self.client = get_supabase_client()

    async def list_reports(
        self,
        company_id: UUID,
        report_type: FinancialReportType | None = None,
        fiscal_year: int | None = None,
        period: str | None = None,
        status: ReportStatus | None = None,
    ) -> list[dict[str, Any]]:
        """List reports, latest fiscal year first."""
        query = (
            self.client.table("financial_reports")
            .select("*")
            .eq("company_id", str(company_id))
        )
        if report_type:
            query = query.eq("type", report_type.value)
        if fiscal_year:
            query = query.eq("fiscal_year", fiscal_year)
        if period:
            query = query.eq("period", period)
        if status:
            query = query.eq("status", status.value)

        return query.order("fiscal_year", desc=True).order("created_at", desc=True).execute().data or []

    async def get_report(self, company_id: UUID, report_id: UUID) -> dict[str, Any]:
        """Get a report scoped to the company.

        Raises:
            NotFoundError: If absent or in another company.
        """
        response = (
            self.client.table("financial_reports")
            .select("*")
            .eq("id", str(report_id))
            .eq("company_id", str(company_id))
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            raise NotFoundError("Financial report not found")
        return response.data

    async def create_report(self, company_id: UUID, data: FinancialReportCreate) -> dict[str, Any]:
        response = (
            self.client.table("financial_reports")
            .insert(
                {
                    "company_id": str(company_id),
                    "type": data.type.value,
                    "fiscal_year": data.fiscal_year,
                    "period": data.period,
                    "data": data.data,
                    "storage_key": data.storage_key,
                    "status": ReportStatus.DRAFT.value,
                }
            )
            .execute()
        )
        report = response.data[0]
        logger.info(
            "Financial report %s (%s %s) created in company %s",
            report["id"], data.period, data.fiscal_year, company_id,
        )
        return report

    async def update_report(
        self,
        company_id: UUID,
        report_id: UUID,
        data: FinancialReportUpdate,
    ) -> dict[str, Any]:
        """Edit a draft report."""
        report = await self._draft(company_id, report_id)

        update = data.model_dump(exclude_unset=True, mode="json")
        if not update:
            raise ValidationError("Nothing to update")
        return self._write(report["id"], update)

    async def attach_file(self, company_id: UUID, report_id: UUID, storage_key: str) -> dict[str, Any]:
        """Point a draft report at an uploaded file."""
        report = await self._draft(company_id, report_id)
        return self._write(report["id"], {"storage_key": storage_key})

    async def finalize_report(self, company_id: UUID, report_id: UUID) -> dict[str, Any]:
        """Mark a report FINAL.

        Raises:
            InvalidStateError: If it is already final.
        """
        report = await self._draft(company_id, report_id)
        logger.info("Financial report %s finalized", report["id"])
        return self._write(report["id"], {"status": ReportStatus.FINAL.value})

    async def delete_report(self, company_id: UUID, report_id: UUID) -> None:
        report = await self._draft(company_id, report_id)
        self.client.table("financial_reports").delete().eq("id", report["id"]).execute()

    async def _draft(self, company_id: UUID, report_id: UUID) -> dict[str, Any]:
        report = await self.get_report(company_id, report_id)
        if report["status"] == ReportStatus.FINAL.value:
            raise InvalidStateError("Financial report is finalized")
        return report

    def _write(self, report_id: str, update: dict[str, Any]) -> dict[str, Any]:
        response = (
            self.client.table("financial_reports")
            .update({**update, "updated_at": _now()})
            .eq("id", report_id)
            .execute()
        )
        return response.data[0]
