"""Resolution API routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.deps import require_permission
from src.models.resolution import ResolutionCategory, ResolutionStatus
from src.schemas.auth import UserContext
from src.schemas.resolution import (
    NextNumberResponse,
    ResolutionCreate,
    ResolutionResponse,
    ResolutionStatusUpdate,
    ResolutionUpdate,
)
from src.services.resolution_service import ResolutionService

router = APIRouter(prefix="/companies/{company_id}/resolutions", tags=["resolutions"])

ViewUser = Annotated[UserContext, Depends(require_permission("resolutions.view"))]


@router.get("", response_model=list[ResolutionResponse], summary="List resolutions")
async def list_resolutions(
    company_id: UUID,
    user: ViewUser,
    resolution_status: ResolutionStatus | None = None,
    category: ResolutionCategory | None = None,
    year: int | None = None,
) -> list[ResolutionResponse]:
    """List resolutions, newest first."""
    resolutions = await ResolutionService().list_resolutions(
        company_id, status=resolution_status, category=category, year=year
    )
    return [ResolutionResponse(**r) for r in resolutions]


@router.post(
    "",
    response_model=ResolutionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create resolution",
)
async def create_resolution(
    company_id: UUID,
    data: ResolutionCreate,
    user: Annotated[UserContext, Depends(require_permission("resolutions.create"))],
) -> ResolutionResponse:
    """Create a resolution numbered ``RES-<year>-<nnn>``."""
    resolution = await ResolutionService().create_resolution(company_id, data)
    return ResolutionResponse(**resolution)


@router.get("/next-number", response_model=NextNumberResponse, summary="Preview next resolution number")
async def get_next_number(company_id: UUID, user: ViewUser, year: int | None = None) -> NextNumberResponse:
    return NextNumberResponse(number=await ResolutionService().next_number(company_id, year))


@router.get("/{resolution_id}", response_model=ResolutionResponse, summary="Get resolution")
async def get_resolution(company_id: UUID, resolution_id: UUID, user: ViewUser) -> ResolutionResponse:
    resolution = await ResolutionService().get_resolution(company_id, resolution_id)
    return ResolutionResponse(**resolution)


@router.put(
    "/{resolution_id}",
    response_model=ResolutionResponse,
    summary="Update resolution",
    description="Title, content and status are frozen once the resolution has passed.",
)
async def update_resolution(
    company_id: UUID,
    resolution_id: UUID,
    data: ResolutionUpdate,
    user: Annotated[UserContext, Depends(require_permission("resolutions.edit"))],
) -> ResolutionResponse:
    resolution = await ResolutionService().update_resolution(company_id, resolution_id, data)
    return ResolutionResponse(**resolution)


@router.put("/{resolution_id}/status", response_model=ResolutionResponse, summary="Change resolution status")
async def update_resolution_status(
    company_id: UUID,
    resolution_id: UUID,
    data: ResolutionStatusUpdate,
    user: Annotated[UserContext, Depends(require_permission("resolutions.change_status"))],
) -> ResolutionResponse:
    resolution = await ResolutionService().update_status(company_id, resolution_id, data.status)
    return ResolutionResponse(**resolution)


@router.delete(
    "/{resolution_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete resolution",
    description="Only drafts can be deleted.",
)
async def delete_resolution(
    company_id: UUID,
    resolution_id: UUID,
    user: Annotated[UserContext, Depends(require_permission("resolutions.delete"))],
) -> None:
    await ResolutionService().delete_resolution(company_id, resolution_id)
