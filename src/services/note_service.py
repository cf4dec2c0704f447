"""Meeting note business logic service."""

import logging
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import NotFoundError
from src.core.supabase import get_supabase_client
from src.realtime.events import NOTE_CREATED, NOTE_DELETED, NOTE_UPDATED, NOTES_REORDERED
from src.realtime.notifier import NoopRoomNotifier, RoomNotifier, notify_room
from src.schemas.meeting import MeetingNoteCreate, MeetingNoteUpdate
from src.services.meeting_lifecycle import ensure_mutable
from src.services.meeting_service import MeetingService
from src.services.ordering import apply_order, next_order, verify_scoped_ids

logger = logging.getLogger(__name__)


class NoteService:
    """Service for the ordered notes taken during a meeting."""

    def __init__(self, notifier: RoomNotifier | None = None) -> None:
        """Initialize note service with Supabase client and room notifier."""
        self.client = get_supabase_client()
        self.notifier = notifier or NoopRoomNotifier()
        self.meetings = MeetingService(notifier=self.notifier)

    async def list_notes(self, company_id: UUID, meeting_id: UUID) -> list[dict[str, Any]]:
        """List a meeting's notes in order."""
        meeting = await self.meetings.get_meeting(company_id, meeting_id)
        response = (
            self.client.table("meeting_notes")
            .select("*")
            .eq("meeting_id", meeting["id"])
            .order("order")
            .execute()
        )
        return response.data or []

    async def get_note(self, company_id: UUID, meeting_id: UUID, note_id: UUID) -> dict[str, Any]:
        """Get one note of a meeting."""
        meeting = await self.meetings.get_meeting(company_id, meeting_id)
        return await self._get_note(meeting["id"], note_id)

    async def create_note(
        self,
        company_id: UUID,
        meeting_id: UUID,
        data: MeetingNoteCreate,
        user_id: str,
    ) -> dict[str, Any]:
        """Append a note to the meeting."""
        meeting = await self.meetings.get_meeting(company_id, meeting_id)
        ensure_mutable(meeting["status"])

        response = (
            self.client.table("meeting_notes")
            .insert(
                {
                    "meeting_id": meeting["id"],
                    "content": data.content,
                    "order": next_order(self.client, "meeting_notes", "meeting_id", meeting["id"]),
                    "created_by_id": user_id,
                }
            )
            .execute()
        )
        note = response.data[0]

        await notify_room(self.notifier, meeting["id"], NOTE_CREATED, note)
        return note

    async def update_note(
        self,
        company_id: UUID,
        meeting_id: UUID,
        note_id: UUID,
        data: MeetingNoteUpdate,
    ) -> dict[str, Any]:
        """Replace a note's content."""
        meeting = await self.meetings.get_meeting(company_id, meeting_id)
        ensure_mutable(meeting["status"])
        note = await self._get_note(meeting["id"], note_id)

        response = (
            self.client.table("meeting_notes")
            .update({"content": data.content})
            .eq("id", note["id"])
            .execute()
        )
        note = response.data[0]

        await notify_room(self.notifier, meeting["id"], NOTE_UPDATED, note)
        return note

    async def delete_note(self, company_id: UUID, meeting_id: UUID, note_id: UUID) -> None:
        """Delete a note."""
        meeting = await self.meetings.get_meeting(company_id, meeting_id)
        ensure_mutable(meeting["status"])
        note = await self._get_note(meeting["id"], note_id)

        self.client.table("meeting_notes").delete().eq("id", note["id"]).execute()
        await notify_room(self.notifier, meeting["id"], NOTE_DELETED, {"id": note["id"]})

    async def reorder_notes(
        self,
        company_id: UUID,
        meeting_id: UUID,
        note_ids: list[UUID],
    ) -> list[dict[str, Any]]:
        """Set each note's order to its position in ``note_ids``."""
        meeting = await self.meetings.get_meeting(company_id, meeting_id)
        ensure_mutable(meeting["status"])

        ids = [str(n) for n in note_ids]
        verify_scoped_ids(self.client, "meeting_notes", "meeting_id", meeting["id"], ids, "note")
        apply_order(self.client, "meeting_notes", ids)

        await notify_room(self.notifier, meeting["id"], NOTES_REORDERED, {"noteIds": ids})
        return await self.list_notes(company_id, meeting_id)

    async def _get_note(self, meeting_id: str, note_id: UUID | str) -> dict[str, Any]:
        response = (
            self.client.table("meeting_notes")
            .select("*")
            .eq("id", str(note_id))
            .eq("meeting_id", meeting_id)
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            raise NotFoundError("Note not found")
        return response.data
