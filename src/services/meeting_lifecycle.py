"""Meeting lifecycle state machine.

Pure transition rules. Persistence, side effects and compare-and-set writes
live in :mod:`src.services.meeting_service`.

    SCHEDULED -> IN_PROGRESS <-> PAUSED -> COMPLETED
    SCHEDULED | IN_PROGRESS | PAUSED -> CANCELLED

COMPLETED and CANCELLED are terminal.
"""

from enum import Enum

from src.api.middleware.error_handler import InvalidStateError
from src.models.meeting import MeetingStatus


class LifecycleAction(str, Enum):
    """Operations that change a meeting's status."""

    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    COMPLETE = "complete"
    CANCEL = "cancel"


TERMINAL_STATUSES = frozenset({MeetingStatus.COMPLETED, MeetingStatus.CANCELLED})

# action -> (legal source statuses, target status)
TRANSITIONS: dict[LifecycleAction, tuple[frozenset[MeetingStatus], MeetingStatus]] = {
    LifecycleAction.START: (
        frozenset({MeetingStatus.SCHEDULED, MeetingStatus.PAUSED}),
        MeetingStatus.IN_PROGRESS,
    ),
    LifecycleAction.PAUSE: (
        frozenset({MeetingStatus.IN_PROGRESS}),
        MeetingStatus.PAUSED,
    ),
    LifecycleAction.RESUME: (
        frozenset({MeetingStatus.PAUSED}),
        MeetingStatus.IN_PROGRESS,
    ),
    LifecycleAction.COMPLETE: (
        frozenset({MeetingStatus.SCHEDULED, MeetingStatus.IN_PROGRESS, MeetingStatus.PAUSED}),
        MeetingStatus.COMPLETED,
    ),
    LifecycleAction.CANCEL: (
        frozenset({MeetingStatus.SCHEDULED, MeetingStatus.IN_PROGRESS, MeetingStatus.PAUSED}),
        MeetingStatus.CANCELLED,
    ),
}


def legal_sources(action: LifecycleAction) -> frozenset[MeetingStatus]:
    return TRANSITIONS[action][0]


def target_status(action: LifecycleAction) -> MeetingStatus:
    return TRANSITIONS[action][1]


def check_transition(current: MeetingStatus | str, action: LifecycleAction) -> MeetingStatus:
    """Validate a transition from ``current``.

    Returns:
        MeetingStatus: The status the meeting moves to.

    Raises:
        InvalidStateError: If the action is illegal from ``current``.
    """
    current = MeetingStatus(current)
    sources, target = TRANSITIONS[action]
    if current in sources:
        return target

    if current == target:
        message = f"Meeting is already {current.value}"
    else:
        message = f"Cannot {action.value} a meeting that is {current.value}"
    raise InvalidStateError(message)


def action_for_status(current: MeetingStatus | str, requested: MeetingStatus | str) -> LifecycleAction:
    """Map a requested target status onto the lifecycle action that reaches it.

    Used by clients that set a status directly instead of naming an action.
    IN_PROGRESS means resume when paused and start otherwise. SCHEDULED is
    never a legal target.

    Raises:
        InvalidStateError: If no action leads to ``requested``.
    """
    current = MeetingStatus(current)
    requested = MeetingStatus(requested)

    if requested == MeetingStatus.IN_PROGRESS:
        return LifecycleAction.RESUME if current == MeetingStatus.PAUSED else LifecycleAction.START
    if requested == MeetingStatus.PAUSED:
        return LifecycleAction.PAUSE
    if requested == MeetingStatus.COMPLETED:
        return LifecycleAction.COMPLETE
    if requested == MeetingStatus.CANCELLED:
        return LifecycleAction.CANCEL
    raise InvalidStateError(f"Cannot move a meeting back to {requested.value}")


def is_terminal(status: MeetingStatus | str) -> bool:
    return MeetingStatus(status) in TERMINAL_STATUSES


def ensure_mutable(status: MeetingStatus | str) -> None:
    """Raise if a meeting in ``status`` no longer accepts changes."""
    if is_terminal(status):
        raise InvalidStateError(f"Meeting is {MeetingStatus(status).value} and can no longer be changed")


def can_vote(status: MeetingStatus | str) -> bool:
    return MeetingStatus(status) == MeetingStatus.IN_PROGRESS
