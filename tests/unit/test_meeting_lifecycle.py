"""Unit tests for the meeting lifecycle state machine."""

import pytest

from src.api.middleware.error_handler import InvalidStateError
from src.models.meeting import MeetingStatus
from src.services.meeting_lifecycle import (
    LifecycleAction,
    action_for_status,
    can_vote,
    check_transition,
    ensure_mutable,
    is_terminal,
)

LEGAL = [
    (MeetingStatus.SCHEDULED, LifecycleAction.START, MeetingStatus.IN_PROGRESS),
    (MeetingStatus.PAUSED, LifecycleAction.START, MeetingStatus.IN_PROGRESS),
    (MeetingStatus.IN_PROGRESS, LifecycleAction.PAUSE, MeetingStatus.PAUSED),
    (MeetingStatus.PAUSED, LifecycleAction.RESUME, MeetingStatus.IN_PROGRESS),
    (MeetingStatus.SCHEDULED, LifecycleAction.COMPLETE, MeetingStatus.COMPLETED),
    (MeetingStatus.IN_PROGRESS, LifecycleAction.COMPLETE, MeetingStatus.COMPLETED),
    (MeetingStatus.PAUSED, LifecycleAction.COMPLETE, MeetingStatus.COMPLETED),
    (MeetingStatus.SCHEDULED, LifecycleAction.CANCEL, MeetingStatus.CANCELLED),
    (MeetingStatus.IN_PROGRESS, LifecycleAction.CANCEL, MeetingStatus.CANCELLED),
    (MeetingStatus.PAUSED, LifecycleAction.CANCEL, MeetingStatus.CANCELLED),
]


class TestCheckTransition:
    """Tests for check_transition."""

    @pytest.mark.parametrize("current,action,expected", LEGAL)
    def test_legal_transitions(
        self, current: MeetingStatus, action: LifecycleAction, expected: MeetingStatus
    ) -> None:
        """Test that every legal transition returns its target."""
        assert check_transition(current, action) == expected

    @pytest.mark.parametrize(
        "current,action",
        [
            (current, action)
            for current in MeetingStatus
            for action in LifecycleAction
            if (current, action) not in {(c, a) for c, a, _ in LEGAL}
        ],
    )
    def test_illegal_transitions_raise(self, current: MeetingStatus, action: LifecycleAction) -> None:
        """Test that every other combination is rejected."""
        with pytest.raises(InvalidStateError):
            check_transition(current, action)

    def test_accepts_raw_status_strings(self) -> None:
        """Test that stored status strings are accepted."""
        assert check_transition("SCHEDULED", LifecycleAction.START) == MeetingStatus.IN_PROGRESS

    def test_already_in_target_message(self) -> None:
        """Test the message when the meeting is already in the target status."""
        with pytest.raises(InvalidStateError) as exc_info:
            check_transition(MeetingStatus.COMPLETED, LifecycleAction.COMPLETE)

        assert "already COMPLETED" in exc_info.value.message

    def test_terminal_source_message(self) -> None:
        """Test the message when acting on a terminal meeting."""
        with pytest.raises(InvalidStateError) as exc_info:
            check_transition(MeetingStatus.CANCELLED, LifecycleAction.COMPLETE)

        assert exc_info.value.message == "Cannot complete a meeting that is CANCELLED"
        assert exc_info.value.status_code == 409


class TestActionForStatus:
    """Tests for action_for_status."""

    def test_in_progress_from_scheduled_is_start(self) -> None:
        assert action_for_status("SCHEDULED", "IN_PROGRESS") == LifecycleAction.START

    def test_in_progress_from_paused_is_resume(self) -> None:
        assert action_for_status("PAUSED", "IN_PROGRESS") == LifecycleAction.RESUME

    @pytest.mark.parametrize(
        "requested,action",
        [
            ("PAUSED", LifecycleAction.PAUSE),
            ("COMPLETED", LifecycleAction.COMPLETE),
            ("CANCELLED", LifecycleAction.CANCEL),
        ],
    )
    def test_direct_mappings(self, requested: str, action: LifecycleAction) -> None:
        assert action_for_status("IN_PROGRESS", requested) == action

    def test_scheduled_is_never_a_target(self) -> None:
        """Test that moving back to SCHEDULED is rejected."""
        with pytest.raises(InvalidStateError):
            action_for_status("IN_PROGRESS", "SCHEDULED")


class TestStatusPredicates:
    """Tests for is_terminal, ensure_mutable and can_vote."""

    @pytest.mark.parametrize("status", [MeetingStatus.COMPLETED, MeetingStatus.CANCELLED])
    def test_terminal_statuses(self, status: MeetingStatus) -> None:
        assert is_terminal(status)
        with pytest.raises(InvalidStateError):
            ensure_mutable(status)

    @pytest.mark.parametrize(
        "status",
        [MeetingStatus.SCHEDULED, MeetingStatus.IN_PROGRESS, MeetingStatus.PAUSED],
    )
    def test_open_statuses(self, status: MeetingStatus) -> None:
        assert not is_terminal(status)
        ensure_mutable(status)

    def test_only_in_progress_allows_voting(self) -> None:
        """Test that voting is legal in exactly one status."""
        assert [s for s in MeetingStatus if can_vote(s)] == [MeetingStatus.IN_PROGRESS]
