"""Financial report API routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.deps import require_permission
from src.models.financial_report import FinancialReportType, ReportStatus
from src.schemas.auth import UserContext
from src.schemas.financial_report import (
    FinancialReportCreate,
    FinancialReportFile,
    FinancialReportResponse,
    FinancialReportUpdate,
)
from src.services.financial_report_service import FinancialReportService

router = APIRouter(prefix="/companies/{company_id}/financial-reports", tags=["financial-reports"])

ViewUser = Annotated[UserContext, Depends(require_permission("financials.view"))]
EditUser = Annotated[UserContext, Depends(require_permission("financials.edit"))]


@router.get("", response_model=list[FinancialReportResponse], summary="List financial reports")
async def list_reports(
    company_id: UUID,
    user: ViewUser,
    report_type: FinancialReportType | None = None,
    fiscal_year: int | None = None,
    period: str | None = None,
    report_status: ReportStatus | None = None,
) -> list[FinancialReportResponse]:
    reports = await FinancialReportService().list_reports(
        company_id,
        report_type=report_type,
        fiscal_year=fiscal_year,
        period=period,
        status=report_status,
    )
    return [FinancialReportResponse(**r) for r in reports]


@router.post(
    "",
    response_model=FinancialReportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create financial report",
)
async def create_report(company_id: UUID, data: FinancialReportCreate, user: EditUser) -> FinancialReportResponse:
    report = await FinancialReportService().create_report(company_id, data)
    return FinancialReportResponse(**report)


@router.get("/{report_id}", response_model=FinancialReportResponse, summary="Get financial report")
async def get_report(company_id: UUID, report_id: UUID, user: ViewUser) -> FinancialReportResponse:
    report = await FinancialReportService().get_report(company_id, report_id)
    return FinancialReportResponse(**report)


@router.put(
    "/{report_id}",
    response_model=FinancialReportResponse,
    summary="Update financial report",
    description="Finalized reports are read-only.",
)
async def update_report(
    company_id: UUID,
    report_id: UUID,
    data: FinancialReportUpdate,
    user: EditUser,
) -> FinancialReportResponse:
    report = await FinancialReportService().update_report(company_id, report_id, data)
    return FinancialReportResponse(**report)


@router.put(
    "/{report_id}/file",
    response_model=FinancialReportResponse,
    summary="Attach report file",
    description="Records the storage key of a file already uploaded to blob storage.",
)
async def attach_report_file(
    company_id: UUID,
    report_id: UUID,
    data: FinancialReportFile,
    user: Annotated[UserContext, Depends(require_permission("financials.manage_pdfs"))],
) -> FinancialReportResponse:
    report = await FinancialReportService().attach_file(company_id, report_id, data.storage_key)
    return FinancialReportResponse(**report)


@router.post("/{report_id}/finalize", response_model=FinancialReportResponse, summary="Finalize financial report")
async def finalize_report(company_id: UUID, report_id: UUID, user: EditUser) -> FinancialReportResponse:
    report = await FinancialReportService().finalize_report(company_id, report_id)
    return FinancialReportResponse(**report)


@router.delete(
    "/{report_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete financial report",
)
async def delete_report(company_id: UUID, report_id: UUID, user: EditUser) -> None:
    await FinancialReportService().delete_report(company_id, report_id)
