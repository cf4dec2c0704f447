"""Agenda item business logic service."""

import logging
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import NotFoundError
from src.core.supabase import get_supabase_client
from src.realtime.events import AGENDA_CREATED, AGENDA_DELETED, AGENDA_REORDERED, AGENDA_UPDATED
from src.realtime.notifier import NoopRoomNotifier, RoomNotifier, notify_room
from src.schemas.meeting import AgendaItemCreate, AgendaItemUpdate
from src.services.meeting_lifecycle import ensure_mutable
from src.services.meeting_service import MeetingService
from src.services.ordering import apply_order, next_order, verify_scoped_ids

logger = logging.getLogger(__name__)


class AgendaService:
    """Service for a meeting's ordered agenda."""

    def __init__(self, notifier: RoomNotifier | None = None) -> None:
        """Initialize agenda service with Supabase client and room notifier."""
        self.client = get_supabase_client()
        self.notifier = notifier or NoopRoomNotifier()
        self.meetings = MeetingService(notifier=self.notifier)

    async def list_items(self, company_id: UUID, meeting_id: UUID) -> list[dict[str, Any]]:
        """List agenda items in order."""
        meeting = await self.meetings.get_meeting(company_id, meeting_id)
        response = (
            self.client.table("agenda_items")
            .select("*")
            .eq("meeting_id", meeting["id"])
            .order("order")
            .execute()
        )
        return response.data or []

    async def create_item(
        self,
        company_id: UUID,
        meeting_id: UUID,
        data: AgendaItemCreate,
        user_id: str,
    ) -> dict[str, Any]:
        """Append an agenda item to the meeting.

        Raises:
            InvalidStateError: If the meeting is COMPLETED or CANCELLED.
        """
        meeting = await self.meetings.get_meeting(company_id, meeting_id)
        ensure_mutable(meeting["status"])

        response = (
            self.client.table("agenda_items")
            .insert(
                {
                    "meeting_id": meeting["id"],
                    "title": data.title,
                    "description": data.description,
                    "duration": data.duration,
                    "notes": None,
                    "order": next_order(self.client, "agenda_items", "meeting_id", meeting["id"]),
                    "created_by_id": user_id,
                }
            )
            .execute()
        )
        item = response.data[0]

        await notify_room(self.notifier, meeting["id"], AGENDA_CREATED, item)
        return item

    async def update_item(
        self,
        company_id: UUID,
        meeting_id: UUID,
        item_id: UUID,
        data: AgendaItemUpdate,
    ) -> dict[str, Any]:
        """Edit an agenda item.

        Raises:
            NotFoundError: If the item is not part of this meeting.
        """
        meeting = await self.meetings.get_meeting(company_id, meeting_id)
        ensure_mutable(meeting["status"])
        item = await self._get_item(meeting["id"], item_id)

        update = data.model_dump(exclude_unset=True)
        if not update:
            return item

        response = (
            self.client.table("agenda_items")
            .update(update)
            .eq("id", item["id"])
            .execute()
        )
        item = response.data[0]

        await notify_room(self.notifier, meeting["id"], AGENDA_UPDATED, item)
        return item

    async def delete_item(self, company_id: UUID, meeting_id: UUID, item_id: UUID) -> None:
        """Delete an agenda item. Decisions and action items under it are detached."""
        meeting = await self.meetings.get_meeting(company_id, meeting_id)
        ensure_mutable(meeting["status"])
        item = await self._get_item(meeting["id"], item_id)

        self.client.table("decisions").update({"agenda_item_id": None}).eq("agenda_item_id", item["id"]).execute()
        self.client.table("action_items").update({"agenda_item_id": None}).eq("agenda_item_id", item["id"]).execute()
        self.client.table("agenda_items").delete().eq("id", item["id"]).execute()

        await notify_room(self.notifier, meeting["id"], AGENDA_DELETED, {"id": item["id"]})
        logger.info("Agenda item %s deleted from meeting %s", item["id"], meeting["id"])

    async def reorder_items(
        self,
        company_id: UUID,
        meeting_id: UUID,
        item_ids: list[UUID],
    ) -> list[dict[str, Any]]:
        """Set each item's order to its position in ``item_ids``.

        Raises:
            ValidationError: If any id is duplicated or not in this meeting.
        """
        meeting = await self.meetings.get_meeting(company_id, meeting_id)
        ensure_mutable(meeting["status"])

        ids = [str(i) for i in item_ids]
        verify_scoped_ids(self.client, "agenda_items", "meeting_id", meeting["id"], ids, "agenda item")
        apply_order(self.client, "agenda_items", ids)

        await notify_room(self.notifier, meeting["id"], AGENDA_REORDERED, {"itemIds": ids})
        return await self.list_items(company_id, meeting_id)

    async def _get_item(self, meeting_id: str, item_id: UUID | str) -> dict[str, Any]:
        response = (
            self.client.table("agenda_items")
            .select("*")
            .eq("id", str(item_id))
            .eq("meeting_id", meeting_id)
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            raise NotFoundError("Agenda item not found")
        return response.data
