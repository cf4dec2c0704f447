"""OKR API routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.deps import require_permission
from src.models.okr import OkrPeriodStatus
from src.schemas.auth import UserContext
from src.schemas.okr import (
    KeyResultCreate,
    KeyResultResponse,
    KeyResultUpdate,
    ObjectiveCreate,
    ObjectiveResponse,
    ObjectiveUpdate,
    OkrPeriodCreate,
    OkrPeriodDetailResponse,
    OkrPeriodResponse,
    OkrPeriodUpdate,
)
from src.services.okr_service import OkrService

router = APIRouter(prefix="/companies/{company_id}", tags=["okrs"])

ViewUser = Annotated[UserContext, Depends(require_permission("okrs.view"))]
CreateUser = Annotated[UserContext, Depends(require_permission("okrs.create"))]
EditUser = Annotated[UserContext, Depends(require_permission("okrs.edit"))]
DeleteUser = Annotated[UserContext, Depends(require_permission("okrs.delete"))]
CloseUser = Annotated[UserContext, Depends(require_permission("okrs.close"))]


# Periods


@router.get("/okr-periods", response_model=list[OkrPeriodResponse], summary="List OKR periods")
async def list_periods(company_id: UUID, user: ViewUser) -> list[OkrPeriodResponse]:
    periods = await OkrService().list_periods(company_id)
    return [OkrPeriodResponse(**p) for p in periods]


@router.post(
    "/okr-periods",
    response_model=OkrPeriodDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create OKR period",
)
async def create_period(company_id: UUID, data: OkrPeriodCreate, user: CreateUser) -> OkrPeriodDetailResponse:
    period = await OkrService().create_period(company_id, data)
    return OkrPeriodDetailResponse(**period)


@router.get("/okr-periods/{period_id}", response_model=OkrPeriodDetailResponse, summary="Get OKR period")
async def get_period(company_id: UUID, period_id: UUID, user: ViewUser) -> OkrPeriodDetailResponse:
    """Get a period with objectives, key results and computed progress."""
    period = await OkrService().get_period(company_id, period_id)
    return OkrPeriodDetailResponse(**period)


@router.put("/okr-periods/{period_id}", response_model=OkrPeriodDetailResponse, summary="Update OKR period")
async def update_period(
    company_id: UUID,
    period_id: UUID,
    data: OkrPeriodUpdate,
    user: EditUser,
) -> OkrPeriodDetailResponse:
    period = await OkrService().update_period(company_id, period_id, data)
    return OkrPeriodDetailResponse(**period)


@router.post("/okr-periods/{period_id}/close", response_model=OkrPeriodDetailResponse, summary="Close OKR period")
async def close_period(company_id: UUID, period_id: UUID, user: CloseUser) -> OkrPeriodDetailResponse:
    period = await OkrService().set_period_status(company_id, period_id, OkrPeriodStatus.CLOSED)
    return OkrPeriodDetailResponse(**period)


@router.post("/okr-periods/{period_id}/reopen", response_model=OkrPeriodDetailResponse, summary="Reopen OKR period")
async def reopen_period(company_id: UUID, period_id: UUID, user: CloseUser) -> OkrPeriodDetailResponse:
    period = await OkrService().set_period_status(company_id, period_id, OkrPeriodStatus.OPEN)
    return OkrPeriodDetailResponse(**period)


@router.delete(
    "/okr-periods/{period_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete OKR period",
)
async def delete_period(company_id: UUID, period_id: UUID, user: DeleteUser) -> None:
    await OkrService().delete_period(company_id, period_id)


# Objectives


@router.post(
    "/okr-periods/{period_id}/objectives",
    response_model=ObjectiveResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create objective",
)
async def create_objective(
    company_id: UUID,
    period_id: UUID,
    data: ObjectiveCreate,
    user: CreateUser,
) -> ObjectiveResponse:
    objective = await OkrService().create_objective(company_id, period_id, data)
    return ObjectiveResponse(**objective)


@router.put("/objectives/{objective_id}", response_model=ObjectiveResponse, summary="Update objective")
async def update_objective(
    company_id: UUID,
    objective_id: UUID,
    data: ObjectiveUpdate,
    user: EditUser,
) -> ObjectiveResponse:
    objective = await OkrService().update_objective(company_id, objective_id, data)
    return ObjectiveResponse(**objective)


@router.delete(
    "/objectives/{objective_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete objective",
)
async def delete_objective(company_id: UUID, objective_id: UUID, user: DeleteUser) -> None:
    await OkrService().delete_objective(company_id, objective_id)


# Key results


@router.post(
    "/objectives/{objective_id}/key-results",
    response_model=KeyResultResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create key result",
)
async def create_key_result(
    company_id: UUID,
    objective_id: UUID,
    data: KeyResultCreate,
    user: CreateUser,
) -> KeyResultResponse:
    key_result = await OkrService().create_key_result(company_id, objective_id, data)
    return KeyResultResponse(**key_result)


@router.put(
    "/key-results/{key_result_id}",
    response_model=KeyResultResponse,
    summary="Update key result",
    description="Also used to record progress through current_value.",
)
async def update_key_result(
    company_id: UUID,
    key_result_id: UUID,
    data: KeyResultUpdate,
    user: EditUser,
) -> KeyResultResponse:
    key_result = await OkrService().update_key_result(company_id, key_result_id, data)
    return KeyResultResponse(**key_result)


@router.delete(
    "/key-results/{key_result_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete key result",
)
async def delete_key_result(company_id: UUID, key_result_id: UUID, user: DeleteUser) -> None:
    await OkrService().delete_key_result(company_id, key_result_id)
