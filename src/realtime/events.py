"""Real-time event names, inbound payloads and outbound frame builders.

Inbound frames are ``{"event", "data", "ack"}``. The server answers each with
either an ack frame or an error frame carrying the same ``ack`` id, and pushes
room broadcasts as ``{"event", "data"}``.
"""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.models.meeting import MeetingStatus, VoteChoice

# Inbound
MEETING_JOIN = "meeting:join"
MEETING_LEAVE = "meeting:leave"
VOTE_CAST = "vote:cast"
ATTENDANCE_UPDATE = "attendance:update"
MEETING_STATUS = "meeting:status"

# Room broadcasts
ATTENDEE_JOINED = "attendee:joined"
ATTENDEE_LEFT = "attendee:left"
VOTE_UPDATED = "vote:updated"
ATTENDANCE_UPDATED = "attendance:updated"
MEETING_STATUS_UPDATED = "meeting:status:updated"

AGENDA_CREATED = "agenda:created"
AGENDA_UPDATED = "agenda:updated"
AGENDA_DELETED = "agenda:deleted"
AGENDA_REORDERED = "agenda:reordered"
DECISION_CREATED = "decision:created"
DECISION_UPDATED = "decision:updated"
DECISION_DELETED = "decision:deleted"
DECISION_REORDERED = "decision:reordered"
ACTION_ITEM_CREATED = "actionItem:created"
ACTION_ITEM_UPDATED = "actionItem:updated"
ACTION_ITEM_DELETED = "actionItem:deleted"
ACTION_ITEM_REORDERED = "actionItem:reordered"
NOTE_CREATED = "note:created"
NOTE_UPDATED = "note:updated"
NOTE_DELETED = "note:deleted"
NOTES_REORDERED = "notes:reordered"


class InboundFrame(BaseModel):
    """Envelope of every client message."""

    event: str
    data: dict[str, Any] = Field(default_factory=dict)
    ack: str | int | None = None


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class JoinMeetingPayload(_Payload):
    meeting_id: UUID = Field(alias="meetingId")


class LeaveMeetingPayload(_Payload):
    meeting_id: UUID = Field(alias="meetingId")


class CastVotePayload(_Payload):
    decision_id: UUID = Field(alias="decisionId")
    vote: VoteChoice


class AttendancePayload(_Payload):
    meeting_id: UUID = Field(alias="meetingId")
    is_present: bool = Field(alias="isPresent")


class MeetingStatusPayload(_Payload):
    meeting_id: UUID = Field(alias="meetingId")
    status: MeetingStatus


def ack_frame(ack: str | int | None, data: dict[str, Any]) -> dict[str, Any]:
    return {"event": "ack", "ack": ack, "data": data}


def error_frame(ack: str | int | None, error_type: str, message: str) -> dict[str, Any]:
    return {"event": "error", "ack": ack, "error": {"type": error_type, "message": message}}


def event_frame(event: str, data: Any) -> dict[str, Any]:
    return {"event": event, "data": data}
