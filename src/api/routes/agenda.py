"""Agenda item API routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.deps import Notifier, require_permission
from src.schemas.auth import UserContext
from src.schemas.meeting import (
    AgendaItemCreate,
    AgendaItemResponse,
    AgendaItemUpdate,
    ReorderRequest,
)
from src.services.agenda_service import AgendaService

router = APIRouter(prefix="/companies/{company_id}/meetings/{meeting_id}/agenda", tags=["agenda"])

ViewUser = Annotated[UserContext, Depends(require_permission("meetings.view", "meetings.view_all"))]
EditUser = Annotated[UserContext, Depends(require_permission("meetings.edit"))]


@router.get("", response_model=list[AgendaItemResponse], summary="List agenda items")
async def list_agenda_items(company_id: UUID, meeting_id: UUID, user: ViewUser) -> list[AgendaItemResponse]:
    """List a meeting's agenda in order."""
    items = await AgendaService().list_items(company_id, meeting_id)
    return [AgendaItemResponse(**i) for i in items]


@router.post(
    "",
    response_model=AgendaItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add agenda item",
)
async def create_agenda_item(
    company_id: UUID,
    meeting_id: UUID,
    data: AgendaItemCreate,
    user: EditUser,
    notifier: Notifier,
) -> AgendaItemResponse:
    """Append an item to the agenda."""
    item = await AgendaService(notifier).create_item(company_id, meeting_id, data, user.user_id)
    return AgendaItemResponse(**item)


@router.put("/reorder", response_model=list[AgendaItemResponse], summary="Reorder agenda")
async def reorder_agenda_items(
    company_id: UUID,
    meeting_id: UUID,
    data: ReorderRequest,
    user: EditUser,
    notifier: Notifier,
) -> list[AgendaItemResponse]:
    """Reorder the agenda. Every id must belong to this meeting."""
    items = await AgendaService(notifier).reorder_items(company_id, meeting_id, data.ids)
    return [AgendaItemResponse(**i) for i in items]


@router.put("/{item_id}", response_model=AgendaItemResponse, summary="Update agenda item")
async def update_agenda_item(
    company_id: UUID,
    meeting_id: UUID,
    item_id: UUID,
    data: AgendaItemUpdate,
    user: EditUser,
    notifier: Notifier,
) -> AgendaItemResponse:
    item = await AgendaService(notifier).update_item(company_id, meeting_id, item_id, data)
    return AgendaItemResponse(**item)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete agenda item")
async def delete_agenda_item(
    company_id: UUID,
    meeting_id: UUID,
    item_id: UUID,
    user: EditUser,
    notifier: Notifier,
) -> None:
    await AgendaService(notifier).delete_item(company_id, meeting_id, item_id)
