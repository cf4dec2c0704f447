"""Meeting, attendee, agenda, decision, vote and note type definitions."""

from datetime import datetime
from enum import Enum
from typing import TypedDict


class MeetingStatus(str, Enum):
    """Meeting lifecycle states."""

    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class VoteChoice(str, Enum):
    """Vote values."""

    FOR = "FOR"
    AGAINST = "AGAINST"
    ABSTAIN = "ABSTAIN"


class DecisionOutcome(str, Enum):
    """Outcome recorded on a decision when its meeting completes."""

    PASSED = "PASSED"
    REJECTED = "REJECTED"
    TABLED = "TABLED"


class Meeting(TypedDict):
    """Meeting table row representation."""

    id: str
    company_id: str
    title: str
    description: str | None
    scheduled_at: datetime
    duration: int
    location: str | None
    video_link: str | None
    status: MeetingStatus
    started_at: datetime | None
    ended_at: datetime | None
    notes: str | None
    created_at: datetime
    updated_at: datetime


class MeetingAttendee(TypedDict):
    """Link between a company member and a meeting, carrying presence."""

    id: str
    meeting_id: str
    member_id: str
    is_present: bool


class AgendaItem(TypedDict):
    """Agenda item row."""

    id: str
    meeting_id: str
    title: str
    description: str | None
    duration: int | None
    notes: str | None
    order: int
    created_by_id: str


class Decision(TypedDict):
    """Decision row. ``outcome`` stays null until the meeting completes."""

    id: str
    meeting_id: str
    agenda_item_id: str | None
    created_by_id: str
    title: str
    description: str | None
    outcome: DecisionOutcome | None
    order: int


class Vote(TypedDict):
    """Vote row, unique per (decision_id, user_id)."""

    id: str
    decision_id: str
    user_id: str
    vote: VoteChoice


class MeetingNote(TypedDict):
    """Ordered note attached to a meeting."""

    id: str
    meeting_id: str
    content: str
    order: int
    created_by_id: str


class MeetingSummary(TypedDict):
    """Persisted JSON summary generated on completion."""

    id: str
    meeting_id: str
    content: str
