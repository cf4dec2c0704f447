"""Meeting business logic: CRUD, attendees and lifecycle transitions."""

import json
import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from src.core.supabase import get_supabase_client
from src.models.company import MembershipStatus
from src.models.meeting import MeetingStatus
from src.realtime.events import ATTENDANCE_UPDATED, MEETING_STATUS_UPDATED
from src.realtime.notifier import NoopRoomNotifier, RoomNotifier, notify_room
from src.schemas.meeting import MeetingCreate, MeetingUpdate
from src.services.company_service import CompanyService
from src.services.email_service import EmailService
from src.services.meeting_lifecycle import (
    LifecycleAction,
    action_for_status,
    check_transition,
    ensure_mutable,
    legal_sources,
)
from src.services.permission_service import PermissionService
from src.services.vote_service import VoteService, outcome_for

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class MeetingService:
    """Service for meetings, their attendees and their lifecycle."""

    def __init__(self, notifier: RoomNotifier | None = None) -> None:
        """Initialize meeting service with Supabase client and room notifier."""
        self.client = get_supabase_client()
        self.notifier = notifier or NoopRoomNotifier()

    # Lookups

    async def get_meeting_by_id(self, meeting_id: UUID | str) -> dict[str, Any]:
        """Get a meeting without company scoping.

        Raises:
            NotFoundError: If the meeting does not exist.
        """
        response = (
            self.client.table("meetings")
            .select("*")
            .eq("id", str(meeting_id))
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            raise NotFoundError("Meeting not found")
        return response.data

    async def get_meeting(self, company_id: UUID | str, meeting_id: UUID | str) -> dict[str, Any]:
        """Get a meeting scoped to a company.

        A meeting in another company is reported as missing.

        Raises:
            NotFoundError: If absent or in another company.
        """
        meeting = await self.get_meeting_by_id(meeting_id)
        if meeting["company_id"] != str(company_id):
            raise NotFoundError("Meeting not found")
        return meeting

    async def get_meeting_detail(self, company_id: UUID, meeting_id: UUID) -> dict[str, Any]:
        """Get a meeting with attendees, agenda items, decisions (with tallies) and summary."""
        meeting = await self.get_meeting(company_id, meeting_id)

        agenda_items = (
            self.client.table("agenda_items")
            .select("*")
            .eq("meeting_id", meeting["id"])
            .order("order")
            .execute()
        ).data or []

        decisions = (
            self.client.table("decisions")
            .select("*")
            .eq("meeting_id", meeting["id"])
            .order("order")
            .execute()
        ).data or []
        tallies = await VoteService().get_tallies([d["id"] for d in decisions])

        summary = (
            self.client.table("meeting_summaries")
            .select("content")
            .eq("meeting_id", meeting["id"])
            .maybe_single()
            .execute()
        )

        return {
            **meeting,
            "attendees": await self.list_attendees(meeting["id"]),
            "agenda_items": agenda_items,
            "decisions": [{**d, "tally": tallies[d["id"]]} for d in decisions],
            "summary": json.loads(summary.data["content"]) if summary and summary.data else None,
        }

    async def list_meetings(
        self,
        company_id: UUID,
        status: MeetingStatus | None = None,
        upcoming: bool = False,
        past: bool = False,
    ) -> list[dict[str, Any]]:
        """List a company's meetings, newest first.

        Args:
            company_id: The company's UUID.
            status: Only meetings in this status.
            upcoming: Scheduled in the future and SCHEDULED or IN_PROGRESS.
            past: Scheduled in the past, or COMPLETED.
        """
        query = (
            self.client.table("meetings")
            .select("*")
            .eq("company_id", str(company_id))
        )

        if status:
            query = query.eq("status", status.value)

        if upcoming:
            query = query.gte("scheduled_at", _now()).in_(
                "status",
                [MeetingStatus.SCHEDULED.value, MeetingStatus.IN_PROGRESS.value],
            )

        meetings = query.order("scheduled_at", desc=True).execute().data or []

        if past:
            now = datetime.now(timezone.utc)
            meetings = [
                m
                for m in meetings
                if m["status"] == MeetingStatus.COMPLETED.value
                or datetime.fromisoformat(m["scheduled_at"].replace("Z", "+00:00")) < now
            ]

        return meetings

    # CRUD

    async def create_meeting(
        self,
        company_id: UUID,
        user_id: str,
        data: MeetingCreate,
    ) -> dict[str, Any]:
        """Create a SCHEDULED meeting with attendees and agenda items.

        The creator is always added as an attendee.

        Raises:
            ValidationError: If any attendee id is not an active member of the company.
        """
        creator = await CompanyService().get_membership(company_id, user_id)
        member_ids = [str(m) for m in data.attendee_ids]
        if creator and creator["id"] not in member_ids:
            member_ids.append(creator["id"])
        await self._verify_members(company_id, member_ids)

        meeting = (
            self.client.table("meetings")
            .insert(
                {
                    "company_id": str(company_id),
                    "title": data.title,
                    "description": data.description,
                    "scheduled_at": data.scheduled_at.isoformat(),
                    "duration": data.duration,
                    "location": data.location,
                    "video_link": data.video_link,
                    "status": MeetingStatus.SCHEDULED.value,
                    "started_at": None,
                    "ended_at": None,
                    "notes": None,
                }
            )
            .execute()
        ).data[0]

        if member_ids:
            self.client.table("meeting_attendees").insert(
                [
                    {"meeting_id": meeting["id"], "member_id": member_id, "is_present": False}
                    for member_id in member_ids
                ]
            ).execute()

        if data.agenda_items:
            self.client.table("agenda_items").insert(
                [
                    {
                        "meeting_id": meeting["id"],
                        "title": item.title,
                        "description": item.description,
                        "duration": item.duration,
                        "notes": None,
                        "order": index,
                        "created_by_id": user_id,
                    }
                    for index, item in enumerate(data.agenda_items)
                ]
            ).execute()

        logger.info("Meeting %s created in company %s by %s", meeting["id"], company_id, user_id)
        return await self.get_meeting_detail(company_id, meeting["id"])

    async def update_meeting(
        self,
        company_id: UUID,
        meeting_id: UUID,
        data: MeetingUpdate,
    ) -> dict[str, Any]:
        """Edit meeting details.

        Raises:
            InvalidStateError: If the meeting is COMPLETED or CANCELLED.
        """
        meeting = await self.get_meeting(company_id, meeting_id)
        ensure_mutable(meeting["status"])

        update = data.model_dump(exclude_unset=True, mode="json")
        if not update:
            return meeting

        update["updated_at"] = _now()

        response = (
            self.client.table("meetings")
            .update(update)
            .eq("id", meeting["id"])
            .execute()
        )
        return response.data[0]

    async def update_notes(self, company_id: UUID, meeting_id: UUID, notes: str) -> dict[str, Any]:
        """Replace the meeting's free-text notes."""
        meeting = await self.get_meeting(company_id, meeting_id)
        ensure_mutable(meeting["status"])

        response = (
            self.client.table("meetings")
            .update({"notes": notes, "updated_at": _now()})
            .eq("id", meeting["id"])
            .execute()
        )
        return response.data[0]

    async def delete_meeting(self, company_id: UUID, meeting_id: UUID) -> None:
        """Delete a meeting and everything attached to it.

        Action items raised in the meeting are kept and detached.

        Raises:
            InvalidStateError: If the meeting is live.
        """
        meeting = await self.get_meeting(company_id, meeting_id)
        if meeting["status"] in (MeetingStatus.IN_PROGRESS.value, MeetingStatus.PAUSED.value):
            raise InvalidStateError("Cannot delete a meeting while it is live")

        decision_ids = [
            d["id"]
            for d in (
                self.client.table("decisions").select("id").eq("meeting_id", meeting["id"]).execute()
            ).data or []
        ]
        if decision_ids:
            self.client.table("votes").delete().in_("decision_id", decision_ids).execute()

        self.client.table("action_items").update(
            {"meeting_id": None, "agenda_item_id": None}
        ).eq("meeting_id", meeting["id"]).execute()

        for table in ("decisions", "agenda_items", "meeting_notes", "meeting_attendees", "meeting_summaries"):
            self.client.table(table).delete().eq("meeting_id", meeting["id"]).execute()

        self.client.table("meetings").delete().eq("id", meeting["id"]).execute()
        logger.info("Meeting %s deleted from company %s", meeting["id"], company_id)

    # Attendees

    async def list_attendees(self, meeting_id: UUID | str) -> list[dict[str, Any]]:
        """Attendees of a meeting with their member's user id and user record."""
        attendees = (
            self.client.table("meeting_attendees")
            .select("*")
            .eq("meeting_id", str(meeting_id))
            .execute()
        ).data or []
        if not attendees:
            return []

        members = (
            self.client.table("company_members")
            .select("id, user_id")
            .in_("id", [a["member_id"] for a in attendees])
            .execute()
        ).data or []
        user_by_member = {m["id"]: m["user_id"] for m in members}
        users = await CompanyService().get_users(list(user_by_member.values()))

        result = []
        for attendee in attendees:
            user_id = user_by_member.get(attendee["member_id"])
            result.append({**attendee, "user_id": user_id, "user": users.get(user_id) if user_id else None})
        return result

    async def add_attendees(
        self,
        company_id: UUID,
        meeting_id: UUID,
        member_ids: list[UUID],
    ) -> list[dict[str, Any]]:
        """Add company members to a meeting. Existing attendees are left untouched.

        Members added while the meeting is live are marked present.

        Raises:
            ValidationError: If any id is not an active member of the company.
            InvalidStateError: If the meeting is COMPLETED or CANCELLED.
        """
        meeting = await self.get_meeting(company_id, meeting_id)
        ensure_mutable(meeting["status"])

        ids = list(dict.fromkeys(str(m) for m in member_ids))
        await self._verify_members(company_id, ids)

        is_present = meeting["status"] in (MeetingStatus.IN_PROGRESS.value, MeetingStatus.PAUSED.value)
        self.client.table("meeting_attendees").upsert(
            [{"meeting_id": meeting["id"], "member_id": member_id, "is_present": is_present} for member_id in ids],
            on_conflict="meeting_id,member_id",
            ignore_duplicates=True,
        ).execute()

        return await self.list_attendees(meeting["id"])

    async def mark_attendance(
        self,
        company_id: UUID,
        meeting_id: UUID,
        attendee_id: UUID,
        is_present: bool,
    ) -> dict[str, Any]:
        """Set one attendee's presence and broadcast it.

        Raises:
            NotFoundError: If the attendee is not part of this meeting.
            InvalidStateError: If the meeting is COMPLETED or CANCELLED.
        """
        meeting = await self.get_meeting(company_id, meeting_id)
        ensure_mutable(meeting["status"])

        response = (
            self.client.table("meeting_attendees")
            .update({"is_present": is_present})
            .eq("id", str(attendee_id))
            .eq("meeting_id", meeting["id"])
            .execute()
        )
        if not response.data:
            raise NotFoundError("Attendee not found")
        attendee = response.data[0]

        member = await CompanyService().get_member(company_id, attendee["member_id"])
        await notify_room(
            self.notifier,
            meeting["id"],
            ATTENDANCE_UPDATED,
            {"meetingId": meeting["id"], "userId": member["user_id"], "isPresent": is_present},
        )
        return {**attendee, "user_id": member["user_id"]}

    async def update_own_attendance(
        self,
        meeting_id: UUID | str,
        user_id: str,
        is_present: bool,
    ) -> dict[str, Any]:
        """Set the caller's own presence, creating their attendee link if needed.

        Raises:
            NotFoundError: If the meeting does not exist.
            AuthorizationError: If the caller is not an active member of its company.
            InvalidStateError: If the meeting is COMPLETED or CANCELLED.
        """
        meeting = await self.get_meeting_by_id(meeting_id)

        membership = await PermissionService().get_role(user_id, meeting["company_id"])
        if not membership:
            raise AuthorizationError("Not a member of this company")

        ensure_mutable(meeting["status"])

        response = (
            self.client.table("meeting_attendees")
            .upsert(
                {"meeting_id": meeting["id"], "member_id": membership["id"], "is_present": is_present},
                on_conflict="meeting_id,member_id",
            )
            .execute()
        )

        await notify_room(
            self.notifier,
            meeting["id"],
            ATTENDANCE_UPDATED,
            {"meetingId": meeting["id"], "userId": user_id, "isPresent": is_present},
        )
        logger.info("User %s attendance set to %s for meeting %s", user_id, is_present, meeting["id"])
        return response.data[0]

    # Lifecycle

    async def apply_status(self, meeting_id: UUID | str, status: MeetingStatus) -> dict[str, Any]:
        """Move a meeting to a requested status through the state machine."""
        meeting = await self.get_meeting_by_id(meeting_id)
        action = action_for_status(meeting["status"], status)
        return await self.transition(meeting["company_id"], meeting["id"], action)

    async def transition(
        self,
        company_id: UUID | str,
        meeting_id: UUID | str,
        action: LifecycleAction,
    ) -> dict[str, Any]:
        """Apply a lifecycle action and its side effects.

        The status write only matches rows still in a legal source state, so
        of two concurrent transitions only one can win. The loser re-reads the
        meeting and fails with an error describing its fresh state.

        Side effects after the write:
            start: every attendee is marked present.
            complete: decision outcomes from tallies, then the persisted
                summary, then best-effort summary emails.

        Raises:
            NotFoundError: If the meeting is absent or in another company.
            InvalidStateError: If the action is illegal from the current status.
        """
        meeting = await self.get_meeting(company_id, meeting_id)
        target = check_transition(meeting["status"], action)

        update: dict[str, Any] = {"status": target.value, "updated_at": _now()}
        if action == LifecycleAction.START and not meeting.get("started_at"):
            update["started_at"] = _now()
        if action == LifecycleAction.COMPLETE:
            update["ended_at"] = _now()

        response = (
            self.client.table("meetings")
            .update(update)
            .eq("id", meeting["id"])
            .in_("status", [s.value for s in legal_sources(action)])
            .execute()
        )

        if not response.data:
            fresh = await self.get_meeting(company_id, meeting_id)
            check_transition(fresh["status"], action)
            raise InvalidStateError("Meeting status changed concurrently; retry")

        updated = response.data[0]
        logger.info("Meeting %s: %s -> %s", updated["id"], meeting["status"], target.value)

        if action == LifecycleAction.START:
            self.client.table("meeting_attendees").update({"is_present": True}).eq(
                "meeting_id", updated["id"]
            ).execute()
        elif action == LifecycleAction.COMPLETE:
            await self._finalize(updated)

        await notify_room(
            self.notifier,
            updated["id"],
            MEETING_STATUS_UPDATED,
            {"meetingId": updated["id"], "status": target.value, "updatedAt": updated.get("updated_at")},
        )
        return updated

    async def _finalize(self, meeting: dict[str, Any]) -> None:
        decisions = (
            self.client.table("decisions")
            .select("*")
            .eq("meeting_id", meeting["id"])
            .order("order")
            .execute()
        ).data or []
        tallies = await VoteService().get_tallies([d["id"] for d in decisions])

        for decision in decisions:
            outcome = outcome_for(tallies[decision["id"]])
            self.client.table("decisions").update({"outcome": outcome.value}).eq("id", decision["id"]).execute()
            decision["outcome"] = outcome.value

        summary = await self._build_summary(meeting, decisions, tallies)
        self.client.table("meeting_summaries").upsert(
            {"meeting_id": meeting["id"], "content": json.dumps(summary, indent=2, default=str)},
            on_conflict="meeting_id",
        ).execute()

        try:
            await self._send_summary_emails(meeting, summary)
        except Exception as e:
            logger.error("Summary emails for meeting %s failed: %s", meeting["id"], e)

    async def _build_summary(
        self,
        meeting: dict[str, Any],
        decisions: list[dict[str, Any]],
        tallies: dict[str, dict[str, int]],
    ) -> dict[str, Any]:
        attendees = await self.list_attendees(meeting["id"])
        agenda_items = (
            self.client.table("agenda_items")
            .select("*")
            .eq("meeting_id", meeting["id"])
            .order("order")
            .execute()
        ).data or []

        def _decision(d: dict[str, Any]) -> dict[str, Any]:
            return {"title": d["title"], "outcome": d.get("outcome"), "votes": tallies[d["id"]]}

        def _name(attendee: dict[str, Any]) -> str:
            user = attendee.get("user") or {}
            name = " ".join(p for p in (user.get("first_name"), user.get("last_name")) if p)
            return name or user.get("email") or attendee.get("user_id") or "Unknown"

        return {
            "title": meeting["title"],
            "date": meeting["scheduled_at"],
            "duration": meeting["duration"],
            "attendees": [{"name": _name(a), "present": bool(a["is_present"])} for a in attendees],
            "agendaItems": [
                {
                    "title": item["title"],
                    "notes": item.get("notes"),
                    "decisions": [_decision(d) for d in decisions if d.get("agenda_item_id") == item["id"]],
                }
                for item in agenda_items
            ],
            "decisions": [_decision(d) for d in decisions],
        }

    async def _send_summary_emails(self, meeting: dict[str, Any], summary: dict[str, Any]) -> None:
        attendees = await self.list_attendees(meeting["id"])
        emails = [a["user"]["email"] for a in attendees if a.get("user") and a["user"].get("email")]
        if not emails:
            return

        company = await CompanyService().get_company(meeting["company_id"])
        company_name = company["name"] if company else ""
        email_service = EmailService()

        for email in emails:
            await email_service.send_meeting_summary_email(
                to_email=email,
                company_name=company_name,
                summary=summary,
                notes=meeting.get("notes"),
            )

    async def _verify_members(self, company_id: UUID | str, member_ids: list[str]) -> None:
        if not member_ids:
            return
        members = (
            self.client.table("company_members")
            .select("id")
            .eq("company_id", str(company_id))
            .eq("status", MembershipStatus.ACTIVE.value)
            .in_("id", member_ids)
            .execute()
        ).data or []
        if len(members) != len(set(member_ids)):
            raise ValidationError("One or more members not found in company")
