"""Meeting note API routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.deps import Notifier, require_permission
from src.schemas.auth import UserContext
from src.schemas.meeting import (
    MeetingNoteCreate,
    MeetingNoteResponse,
    MeetingNoteUpdate,
    ReorderRequest,
)
from src.services.note_service import NoteService

router = APIRouter(prefix="/companies/{company_id}/meetings/{meeting_id}/notes", tags=["notes"])

ViewUser = Annotated[UserContext, Depends(require_permission("meetings.view", "meetings.view_all"))]
EditUser = Annotated[UserContext, Depends(require_permission("meetings.edit"))]


@router.get("", response_model=list[MeetingNoteResponse], summary="List meeting notes")
async def list_notes(company_id: UUID, meeting_id: UUID, user: ViewUser) -> list[MeetingNoteResponse]:
    """List a meeting's notes in order."""
    notes = await NoteService().list_notes(company_id, meeting_id)
    return [MeetingNoteResponse(**n) for n in notes]


@router.post(
    "",
    response_model=MeetingNoteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add meeting note",
)
async def create_note(
    company_id: UUID,
    meeting_id: UUID,
    data: MeetingNoteCreate,
    user: EditUser,
    notifier: Notifier,
) -> MeetingNoteResponse:
    note = await NoteService(notifier).create_note(company_id, meeting_id, data, user.user_id)
    return MeetingNoteResponse(**note)


@router.put("/reorder", response_model=list[MeetingNoteResponse], summary="Reorder notes")
async def reorder_notes(
    company_id: UUID,
    meeting_id: UUID,
    data: ReorderRequest,
    user: EditUser,
    notifier: Notifier,
) -> list[MeetingNoteResponse]:
    notes = await NoteService(notifier).reorder_notes(company_id, meeting_id, data.ids)
    return [MeetingNoteResponse(**n) for n in notes]


@router.get("/{note_id}", response_model=MeetingNoteResponse, summary="Get meeting note")
async def get_note(company_id: UUID, meeting_id: UUID, note_id: UUID, user: ViewUser) -> MeetingNoteResponse:
    note = await NoteService().get_note(company_id, meeting_id, note_id)
    return MeetingNoteResponse(**note)


@router.put("/{note_id}", response_model=MeetingNoteResponse, summary="Update meeting note")
async def update_note(
    company_id: UUID,
    meeting_id: UUID,
    note_id: UUID,
    data: MeetingNoteUpdate,
    user: EditUser,
    notifier: Notifier,
) -> MeetingNoteResponse:
    note = await NoteService(notifier).update_note(company_id, meeting_id, note_id, data)
    return MeetingNoteResponse(**note)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete meeting note")
async def delete_note(
    company_id: UUID,
    meeting_id: UUID,
    note_id: UUID,
    user: EditUser,
    notifier: Notifier,
) -> None:
    await NoteService(notifier).delete_note(company_id, meeting_id, note_id)
