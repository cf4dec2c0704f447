"""Vote casting and tally aggregation."""

import logging
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import AuthorizationError, InvalidStateError, NotFoundError
from src.core.supabase import get_supabase_client
from src.models.meeting import DecisionOutcome, VoteChoice
from src.realtime.events import VOTE_UPDATED
from src.realtime.notifier import NoopRoomNotifier, RoomNotifier, notify_room
from src.services.meeting_lifecycle import can_vote
from src.services.permission_service import PermissionService

logger = logging.getLogger(__name__)


def empty_tally() -> dict[str, int]:
    return {"for": 0, "against": 0, "abstain": 0}


def outcome_for(tally: dict[str, int]) -> DecisionOutcome:
    """Derive a decision outcome from its tally. Ties and no votes are TABLED."""
    if tally["for"] > tally["against"]:
        return DecisionOutcome.PASSED
    if tally["against"] > tally["for"]:
        return DecisionOutcome.REJECTED
    return DecisionOutcome.TABLED


class VoteService:
    """Service for votes and their tallies.

    A user holds at most one vote per decision; casting again overwrites it
    through an upsert on (decision_id, user_id). The tally is recomputed from
    storage after each write and is not read in the same transaction, so a
    broadcast tally may be superseded by the next one.
    """

    def __init__(self, notifier: RoomNotifier | None = None) -> None:
        """Initialize vote service with Supabase client."""
        self.client = get_supabase_client()
        self.notifier = notifier or NoopRoomNotifier()

    async def cast_vote(
        self,
        decision_id: UUID | str,
        user_id: str,
        vote: VoteChoice,
        meeting_id: UUID | str | None = None,
        company_id: UUID | str | None = None,
    ) -> dict[str, Any]:
        """Record a user's vote on a decision and broadcast the new tally.

        Legality is re-checked from fresh reads on every call: the caller
        must be an active member of the meeting's company, the meeting must
        be IN_PROGRESS, and the caller must be a present attendee.

        Args:
            decision_id: Decision being voted on.
            user_id: Voter.
            vote: FOR, AGAINST or ABSTAIN.
            meeting_id: When given, the decision must belong to this meeting.
            company_id: When given, the meeting must belong to this company.

        Returns:
            dict: ``vote`` (stored row), ``tally`` and ``meeting_id``.

        Raises:
            NotFoundError: Decision or meeting missing, or outside the given scope.
            AuthorizationError: Caller is not a member or not a present attendee.
            InvalidStateError: Meeting is not IN_PROGRESS.
        """
        decision = await self._get_decision(decision_id)
        if meeting_id is not None and decision["meeting_id"] != str(meeting_id):
            raise NotFoundError("Decision not found")

        meeting = (
            self.client.table("meetings")
            .select("*")
            .eq("id", decision["meeting_id"])
            .maybe_single()
            .execute()
        )
        if not meeting or not meeting.data:
            raise NotFoundError("Meeting not found")
        meeting = meeting.data
        if company_id is not None and meeting["company_id"] != str(company_id):
            raise NotFoundError("Decision not found")

        membership = await PermissionService().get_role(user_id, meeting["company_id"])
        if not membership:
            raise AuthorizationError("Not a member of this company")

        if not can_vote(meeting["status"]):
            raise InvalidStateError("Voting is only allowed during in-progress meetings")

        attendee = (
            self.client.table("meeting_attendees")
            .select("*")
            .eq("meeting_id", meeting["id"])
            .eq("member_id", membership["id"])
            .maybe_single()
            .execute()
        )
        if not attendee or not attendee.data or not attendee.data.get("is_present"):
            raise AuthorizationError("Only present attendees can vote")

        response = (
            self.client.table("votes")
            .upsert(
                {"decision_id": decision["id"], "user_id": user_id, "vote": VoteChoice(vote).value},
                on_conflict="decision_id,user_id",
            )
            .execute()
        )
        stored = response.data[0]

        tally = await self.get_tally(decision["id"])
        logger.info("User %s voted %s on decision %s", user_id, VoteChoice(vote).value, decision["id"])

        await notify_room(
            self.notifier,
            meeting["id"],
            VOTE_UPDATED,
            {
                "decisionId": decision["id"],
                "voterId": user_id,
                "vote": VoteChoice(vote).value,
                "tally": tally,
            },
        )

        return {"vote": stored, "tally": tally, "meeting_id": meeting["id"]}

    async def get_tally(self, decision_id: UUID | str) -> dict[str, int]:
        """Count FOR/AGAINST/ABSTAIN votes for one decision."""
        return (await self.get_tallies([decision_id])).get(str(decision_id), empty_tally())

    async def get_tallies(self, decision_ids: list[UUID | str]) -> dict[str, dict[str, int]]:
        """Count votes for several decisions with one query."""
        ids = [str(d) for d in decision_ids]
        if not ids:
            return {}

        votes = (
            self.client.table("votes")
            .select("decision_id, vote")
            .in_("decision_id", ids)
            .execute()
        ).data or []

        tallies = {decision_id: empty_tally() for decision_id in ids}
        for row in votes:
            key = VoteChoice(row["vote"]).value.lower()
            tallies[row["decision_id"]][key] += 1
        return tallies

    async def _get_decision(self, decision_id: UUID | str) -> dict[str, Any]:
        response = (
            self.client.table("decisions")
            .select("*")
            .eq("id", str(decision_id))
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            raise NotFoundError("Decision not found")
        return response.data
