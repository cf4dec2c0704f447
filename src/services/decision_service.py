"""Decision business logic service."""

import logging
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import NotFoundError, ValidationError
from src.core.supabase import get_supabase_client
from src.realtime.events import (
    DECISION_CREATED,
    DECISION_DELETED,
    DECISION_REORDERED,
    DECISION_UPDATED,
)
from src.realtime.notifier import NoopRoomNotifier, RoomNotifier, notify_room
from src.schemas.meeting import DecisionCreate, DecisionUpdate
from src.services.meeting_lifecycle import ensure_mutable
from src.services.meeting_service import MeetingService
from src.services.ordering import apply_order, next_order, verify_scoped_ids
from src.services.vote_service import VoteService, empty_tally

logger = logging.getLogger(__name__)


class DecisionService:
    """Service for the decisions recorded in a meeting.

    Decisions stop accepting edits once their meeting is COMPLETED or
    CANCELLED. Outcomes are normally written by meeting completion.
    """

    def __init__(self, notifier: RoomNotifier | None = None) -> None:
        """Initialize decision service with Supabase client and room notifier."""
        self.client = get_supabase_client()
        self.notifier = notifier or NoopRoomNotifier()
        self.meetings = MeetingService(notifier=self.notifier)

    async def list_decisions(self, company_id: UUID, meeting_id: UUID) -> list[dict[str, Any]]:
        """List a meeting's decisions in order, each with its tally."""
        meeting = await self.meetings.get_meeting(company_id, meeting_id)
        decisions = (
            self.client.table("decisions")
            .select("*")
            .eq("meeting_id", meeting["id"])
            .order("order")
            .execute()
        ).data or []
        tallies = await VoteService().get_tallies([d["id"] for d in decisions])
        return [{**d, "tally": tallies[d["id"]]} for d in decisions]

    async def create_decision(
        self,
        company_id: UUID,
        meeting_id: UUID,
        data: DecisionCreate,
        user_id: str,
    ) -> dict[str, Any]:
        """Add a decision at the end of the meeting's list.

        Raises:
            NotFoundError: If the agenda item is not part of this meeting.
            InvalidStateError: If the meeting is COMPLETED or CANCELLED.
        """
        meeting = await self.meetings.get_meeting(company_id, meeting_id)
        ensure_mutable(meeting["status"])

        if data.agenda_item_id is not None:
            item = (
                self.client.table("agenda_items")
                .select("id")
                .eq("id", str(data.agenda_item_id))
                .eq("meeting_id", meeting["id"])
                .maybe_single()
                .execute()
            )
            if not item or not item.data:
                raise NotFoundError("Agenda item not found in this meeting")

        response = (
            self.client.table("decisions")
            .insert(
                {
                    "meeting_id": meeting["id"],
                    "agenda_item_id": str(data.agenda_item_id) if data.agenda_item_id else None,
                    "created_by_id": user_id,
                    "title": data.title,
                    "description": data.description,
                    "outcome": None,
                    "order": next_order(self.client, "decisions", "meeting_id", meeting["id"]),
                }
            )
            .execute()
        )
        decision = {**response.data[0], "tally": empty_tally()}

        await notify_room(self.notifier, meeting["id"], DECISION_CREATED, decision)
        logger.info("Decision %s added to meeting %s", decision["id"], meeting["id"])
        return decision

    async def update_decision(
        self,
        company_id: UUID,
        meeting_id: UUID,
        decision_id: UUID,
        data: DecisionUpdate,
    ) -> dict[str, Any]:
        """Edit a decision's title, description or outcome."""
        meeting = await self.meetings.get_meeting(company_id, meeting_id)
        ensure_mutable(meeting["status"])
        await self._get_decision(meeting["id"], decision_id)

        update = data.model_dump(exclude_unset=True, mode="json")
        if not update:
            raise ValidationError("Nothing to update")

        response = (
            self.client.table("decisions")
            .update(update)
            .eq("id", str(decision_id))
            .execute()
        )
        decision = {**response.data[0], "tally": await VoteService().get_tally(decision_id)}

        await notify_room(self.notifier, meeting["id"], DECISION_UPDATED, decision)
        return decision

    async def delete_decision(self, company_id: UUID, meeting_id: UUID, decision_id: UUID) -> None:
        """Delete a decision and its votes."""
        meeting = await self.meetings.get_meeting(company_id, meeting_id)
        ensure_mutable(meeting["status"])
        await self._get_decision(meeting["id"], decision_id)

        self.client.table("votes").delete().eq("decision_id", str(decision_id)).execute()
        self.client.table("decisions").delete().eq("id", str(decision_id)).execute()

        await notify_room(self.notifier, meeting["id"], DECISION_DELETED, {"id": str(decision_id)})
        logger.info("Decision %s deleted from meeting %s", decision_id, meeting["id"])

    async def reorder_decisions(
        self,
        company_id: UUID,
        meeting_id: UUID,
        decision_ids: list[UUID],
    ) -> list[dict[str, Any]]:
        """Set each decision's order to its position in ``decision_ids``.

        Raises:
            ValidationError: If any id is not a decision of this meeting.
        """
        meeting = await self.meetings.get_meeting(company_id, meeting_id)
        ensure_mutable(meeting["status"])

        ids = [str(d) for d in decision_ids]
        verify_scoped_ids(self.client, "decisions", "meeting_id", meeting["id"], ids, "decision")
        apply_order(self.client, "decisions", ids)

        await notify_room(self.notifier, meeting["id"], DECISION_REORDERED, {"decisionIds": ids})
        return await self.list_decisions(company_id, meeting_id)

    async def _get_decision(self, meeting_id: str, decision_id: UUID | str) -> dict[str, Any]:
        response = (
            self.client.table("decisions")
            .select("*")
            .eq("id", str(decision_id))
            .eq("meeting_id", meeting_id)
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            raise NotFoundError("Decision not found")
        return response.data

