"""Meeting API routes: CRUD, attendees, lifecycle, decisions and votes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.deps import Notifier, require_permission
from src.models.meeting import MeetingStatus
from src.schemas.auth import UserContext
from src.schemas.meeting import (
    AttendanceUpdate,
    AttendeeResponse,
    AttendeesAdd,
    DecisionCreate,
    DecisionResponse,
    DecisionUpdate,
    MeetingCreate,
    MeetingDetailResponse,
    MeetingNotesUpdate,
    MeetingResponse,
    MeetingUpdate,
    ReorderRequest,
    VoteCreate,
    VoteResponse,
)
from src.services.decision_service import DecisionService
from src.services.meeting_lifecycle import LifecycleAction
from src.services.meeting_service import MeetingService
from src.services.vote_service import VoteService

router = APIRouter(prefix="/companies/{company_id}/meetings", tags=["meetings"])

ViewUser = Annotated[UserContext, Depends(require_permission("meetings.view", "meetings.view_all"))]
EditUser = Annotated[UserContext, Depends(require_permission("meetings.edit"))]
LiveUser = Annotated[UserContext, Depends(require_permission("meetings.start_live"))]


@router.post(
    "",
    response_model=MeetingDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a meeting",
    description="Schedules a meeting with attendees and agenda. Requires meetings.create.",
)
async def create_meeting(
    company_id: UUID,
    data: MeetingCreate,
    user: Annotated[UserContext, Depends(require_permission("meetings.create"))],
    notifier: Notifier,
) -> MeetingDetailResponse:
    """Create a SCHEDULED meeting.

    Args:
        company_id: The company's UUID.
        data: Meeting details, attendee member ids and inline agenda items.
        user: The authorized user context.
        notifier: Room notifier for live updates.

    Returns:
        MeetingDetailResponse: The meeting with attendees and agenda.
    """
    meeting = await MeetingService(notifier).create_meeting(company_id, user.user_id, data)
    return MeetingDetailResponse(**meeting)


@router.get(
    "",
    response_model=list[MeetingResponse],
    summary="List meetings",
    description="Lists a company's meetings, newest first.",
)
async def list_meetings(
    company_id: UUID,
    user: ViewUser,
    meeting_status: MeetingStatus | None = None,
    upcoming: bool = False,
    past: bool = False,
) -> list[MeetingResponse]:
    """List meetings with optional status and time filters."""
    meetings = await MeetingService().list_meetings(
        company_id,
        status=meeting_status,
        upcoming=upcoming,
        past=past,
    )
    return [MeetingResponse(**m) for m in meetings]


@router.get(
    "/{meeting_id}",
    response_model=MeetingDetailResponse,
    summary="Get meeting details",
)
async def get_meeting(company_id: UUID, meeting_id: UUID, user: ViewUser) -> MeetingDetailResponse:
    """Get a meeting with attendees, agenda, decisions and tallies."""
    meeting = await MeetingService().get_meeting_detail(company_id, meeting_id)
    return MeetingDetailResponse(**meeting)


@router.put(
    "/{meeting_id}",
    response_model=MeetingResponse,
    summary="Update meeting details",
)
async def update_meeting(
    company_id: UUID,
    meeting_id: UUID,
    data: MeetingUpdate,
    user: EditUser,
) -> MeetingResponse:
    """Edit a meeting's details. Closed meetings are read-only."""
    meeting = await MeetingService().update_meeting(company_id, meeting_id, data)
    return MeetingResponse(**meeting)


@router.delete(
    "/{meeting_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a meeting",
    description="Deletes a meeting that is not live. Requires meetings.delete.",
)
async def delete_meeting(
    company_id: UUID,
    meeting_id: UUID,
    user: Annotated[UserContext, Depends(require_permission("meetings.delete"))],
) -> None:
    """Delete a meeting and its agenda, decisions, votes and notes."""
    await MeetingService().delete_meeting(company_id, meeting_id)


@router.put(
    "/{meeting_id}/notes",
    response_model=MeetingResponse,
    summary="Replace meeting notes",
)
async def update_meeting_notes(
    company_id: UUID,
    meeting_id: UUID,
    data: MeetingNotesUpdate,
    user: EditUser,
) -> MeetingResponse:
    """Replace the meeting's free-text notes."""
    meeting = await MeetingService().update_notes(company_id, meeting_id, data.notes)
    return MeetingResponse(**meeting)


# Attendees


@router.post(
    "/{meeting_id}/attendees",
    response_model=list[AttendeeResponse],
    summary="Add attendees",
)
async def add_attendees(
    company_id: UUID,
    meeting_id: UUID,
    data: AttendeesAdd,
    user: EditUser,
) -> list[AttendeeResponse]:
    """Add company members to a meeting."""
    attendees = await MeetingService().add_attendees(company_id, meeting_id, data.member_ids)
    return [AttendeeResponse(**a) for a in attendees]


@router.put(
    "/{meeting_id}/attendees/{attendee_id}",
    response_model=AttendeeResponse,
    summary="Mark attendance",
)
async def mark_attendance(
    company_id: UUID,
    meeting_id: UUID,
    attendee_id: UUID,
    data: AttendanceUpdate,
    user: EditUser,
    notifier: Notifier,
) -> AttendeeResponse:
    """Mark an attendee present or absent and broadcast the change."""
    attendee = await MeetingService(notifier).mark_attendance(company_id, meeting_id, attendee_id, data.is_present)
    return AttendeeResponse(**attendee)


# Lifecycle


async def _transition(
    company_id: UUID,
    meeting_id: UUID,
    action: LifecycleAction,
    notifier: Notifier,
) -> MeetingResponse:
    meeting = await MeetingService(notifier).transition(company_id, meeting_id, action)
    return MeetingResponse(**meeting)


@router.post("/{meeting_id}/start", response_model=MeetingResponse, summary="Start meeting")
async def start_meeting(company_id: UUID, meeting_id: UUID, user: LiveUser, notifier: Notifier) -> MeetingResponse:
    """SCHEDULED -> IN_PROGRESS. Every attendee is marked present."""
    return await _transition(company_id, meeting_id, LifecycleAction.START, notifier)


@router.post("/{meeting_id}/pause", response_model=MeetingResponse, summary="Pause meeting")
async def pause_meeting(company_id: UUID, meeting_id: UUID, user: LiveUser, notifier: Notifier) -> MeetingResponse:
    """IN_PROGRESS -> PAUSED."""
    return await _transition(company_id, meeting_id, LifecycleAction.PAUSE, notifier)


@router.post("/{meeting_id}/resume", response_model=MeetingResponse, summary="Resume meeting")
async def resume_meeting(company_id: UUID, meeting_id: UUID, user: LiveUser, notifier: Notifier) -> MeetingResponse:
    """PAUSED -> IN_PROGRESS."""
    return await _transition(company_id, meeting_id, LifecycleAction.RESUME, notifier)


@router.post("/{meeting_id}/complete", response_model=MeetingResponse, summary="Complete meeting")
async def complete_meeting(company_id: UUID, meeting_id: UUID, user: LiveUser, notifier: Notifier) -> MeetingResponse:
    """IN_PROGRESS or PAUSED -> COMPLETED. Outcomes and the summary are written."""
    return await _transition(company_id, meeting_id, LifecycleAction.COMPLETE, notifier)


@router.post("/{meeting_id}/cancel", response_model=MeetingResponse, summary="Cancel meeting")
async def cancel_meeting(company_id: UUID, meeting_id: UUID, user: LiveUser, notifier: Notifier) -> MeetingResponse:
    """Any non-terminal status -> CANCELLED."""
    return await _transition(company_id, meeting_id, LifecycleAction.CANCEL, notifier)


# Decisions


@router.post(
    "/{meeting_id}/decisions",
    response_model=DecisionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add decision",
)
async def create_decision(
    company_id: UUID,
    meeting_id: UUID,
    data: DecisionCreate,
    user: EditUser,
    notifier: Notifier,
) -> DecisionResponse:
    """Record a decision to be voted on."""
    decision = await DecisionService(notifier).create_decision(company_id, meeting_id, data, user.user_id)
    return DecisionResponse(**decision)


@router.put(
    "/{meeting_id}/decisions/reorder",
    response_model=list[DecisionResponse],
    summary="Reorder decisions",
)
async def reorder_decisions(
    company_id: UUID,
    meeting_id: UUID,
    data: ReorderRequest,
    user: EditUser,
    notifier: Notifier,
) -> list[DecisionResponse]:
    """Reorder a meeting's decisions."""
    decisions = await DecisionService(notifier).reorder_decisions(company_id, meeting_id, data.ids)
    return [DecisionResponse(**d) for d in decisions]


@router.put(
    "/{meeting_id}/decisions/{decision_id}",
    response_model=DecisionResponse,
    summary="Update decision",
)
async def update_decision(
    company_id: UUID,
    meeting_id: UUID,
    decision_id: UUID,
    data: DecisionUpdate,
    user: EditUser,
    notifier: Notifier,
) -> DecisionResponse:
    """Edit a decision."""
    decision = await DecisionService(notifier).update_decision(company_id, meeting_id, decision_id, data)
    return DecisionResponse(**decision)


@router.delete(
    "/{meeting_id}/decisions/{decision_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete decision",
)
async def delete_decision(
    company_id: UUID,
    meeting_id: UUID,
    decision_id: UUID,
    user: EditUser,
    notifier: Notifier,
) -> None:
    """Delete a decision and its votes."""
    await DecisionService(notifier).delete_decision(company_id, meeting_id, decision_id)


@router.post(
    "/{meeting_id}/decisions/{decision_id}/votes",
    response_model=VoteResponse,
    summary="Cast vote",
    description="Casts or changes the caller's vote. The meeting must be in progress.",
)
async def cast_vote(
    company_id: UUID,
    meeting_id: UUID,
    decision_id: UUID,
    data: VoteCreate,
    user: ViewUser,
    notifier: Notifier,
) -> VoteResponse:
    """Cast a vote on a decision.

    Args:
        company_id: The company's UUID.
        meeting_id: The meeting the decision belongs to.
        decision_id: The decision's UUID.
        data: The vote choice.
        user: The authorized user context.
        notifier: Room notifier for the tally broadcast.

    Returns:
        VoteResponse: The stored vote and the new tally.
    """
    result = await VoteService(notifier).cast_vote(
        decision_id,
        user.user_id,
        data.vote,
        meeting_id=meeting_id,
        company_id=company_id,
    )
    return VoteResponse(vote=result["vote"], tally=result["tally"])
