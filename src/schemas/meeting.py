"""Meeting, attendee, agenda, decision, vote and note Pydantic schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.models.meeting import DecisionOutcome, MeetingStatus, VoteChoice
from src.schemas.company import MemberUser


class AgendaItemInput(BaseModel):
    """Agenda item supplied inline when creating a meeting."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    duration: int | None = Field(default=None, ge=0, description="Minutes")


class MeetingCreate(BaseModel):
    """Schema for creating a meeting."""

    title: str = Field(..., min_length=1, max_length=255, description="Meeting title")
    description: str | None = Field(default=None, description="Meeting description")
    scheduled_at: datetime = Field(..., description="Scheduled start time")
    duration: int = Field(default=60, gt=0, description="Planned duration in minutes")
    location: str | None = Field(default=None, max_length=255)
    video_link: str | None = Field(default=None, max_length=2048)
    attendee_ids: list[UUID] = Field(default_factory=list, description="Company member ids to invite")
    agenda_items: list[AgendaItemInput] = Field(default_factory=list)


class MeetingUpdate(BaseModel):
    """Schema for editing meeting details. Status changes go through lifecycle endpoints."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    scheduled_at: datetime | None = None
    duration: int | None = Field(default=None, gt=0)
    location: str | None = Field(default=None, max_length=255)
    video_link: str | None = Field(default=None, max_length=2048)


class MeetingResponse(BaseModel):
    """Schema for meeting API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    title: str
    description: str | None = None
    scheduled_at: datetime
    duration: int
    location: str | None = None
    video_link: str | None = None
    status: MeetingStatus
    started_at: datetime | None = None
    ended_at: datetime | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AttendeeResponse(BaseModel):
    """Meeting attendee with the member's user info."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    meeting_id: UUID
    member_id: UUID
    is_present: bool = False
    user_id: str | None = None
    user: MemberUser | None = None


class AgendaItemCreate(BaseModel):
    """Schema for adding an agenda item."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    duration: int | None = Field(default=None, ge=0, description="Minutes")


class AgendaItemUpdate(BaseModel):
    """Schema for editing an agenda item."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    duration: int | None = Field(default=None, ge=0)
    notes: str | None = None


class AgendaItemResponse(BaseModel):
    """Schema for agenda item API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    meeting_id: UUID
    title: str
    description: str | None = None
    duration: int | None = None
    notes: str | None = None
    order: int
    created_by_id: str | None = None


class DecisionCreate(BaseModel):
    """Schema for recording a decision to be voted on."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    agenda_item_id: UUID | None = None


class DecisionUpdate(BaseModel):
    """Schema for editing a decision before its meeting completes."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    outcome: DecisionOutcome | None = None


class DecisionResponse(BaseModel):
    """Schema for decision API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    meeting_id: UUID
    agenda_item_id: UUID | None = None
    created_by_id: str | None = None
    title: str
    description: str | None = None
    outcome: DecisionOutcome | None = None
    order: int
    tally: dict[str, int] = Field(default_factory=lambda: {"for": 0, "against": 0, "abstain": 0})


class MeetingDetailResponse(MeetingResponse):
    """Meeting with attendees, agenda, decisions and summary."""

    attendees: list[AttendeeResponse] = Field(default_factory=list)
    agenda_items: list[AgendaItemResponse] = Field(default_factory=list)
    decisions: list[DecisionResponse] = Field(default_factory=list)
    summary: dict[str, Any] | None = None


class AttendeesAdd(BaseModel):
    """Schema for adding attendees by company member id."""

    member_ids: list[UUID] = Field(..., min_length=1)


class AttendanceUpdate(BaseModel):
    """Schema for marking an attendee present or absent."""

    is_present: bool


class MeetingNotesUpdate(BaseModel):
    """Schema for replacing the meeting's free-text notes."""

    notes: str


class ReorderRequest(BaseModel):
    """Ids in their new order."""

    ids: list[UUID] = Field(..., min_length=1)


class VoteCreate(BaseModel):
    """Schema for casting a vote."""

    vote: VoteChoice


class VoteResponse(BaseModel):
    """The stored vote and the decision's tally after it."""

    vote: dict[str, Any]
    tally: dict[str, int]


class MeetingNoteCreate(BaseModel):
    """Schema for adding a meeting note."""

    content: str = Field(..., min_length=1)


class MeetingNoteUpdate(BaseModel):
    """Schema for editing a meeting note."""

    content: str = Field(..., min_length=1)


class MeetingNoteResponse(BaseModel):
    """Schema for meeting note API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    meeting_id: UUID
    content: str
    order: int
    created_by_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
