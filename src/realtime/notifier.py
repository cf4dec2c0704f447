"""Room notifier port used by request handlers to reach live meeting rooms."""

import logging
from typing import Any, Protocol
from uuid import UUID

from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)


class RoomNotifier(Protocol):
    """Anything that can push an event to every connection in a meeting room."""

    async def emit_to_room(self, meeting_id: str, event: str, payload: Any) -> None:
        """Send ``event`` with ``payload`` to the meeting's room."""
        ...


class NoopRoomNotifier:
    """Notifier for contexts where real-time delivery is unavailable."""

    async def emit_to_room(self, meeting_id: str, event: str, payload: Any) -> None:
        logger.debug("Real-time unavailable; dropped %s for meeting %s", event, meeting_id)


async def notify_room(
    notifier: RoomNotifier,
    meeting_id: UUID | str,
    event: str,
    payload: Any,
) -> bool:
    """Push an event to a meeting room without ever failing the caller.

    Every fire-and-forget emission in the application goes through here, so
    delivery failures are logged in one place and never propagate into the
    business operation that triggered them.

    Args:
        notifier: Destination port.
        meeting_id: Meeting whose room receives the event.
        event: Event name, e.g. ``decision:created``.
        payload: Mutated entity or id-only payload.

    Returns:
        bool: True if the notifier accepted the event.
    """
    try:
        await notifier.emit_to_room(str(meeting_id), event, jsonable_encoder(payload))
        return True
    except Exception as e:
        logger.error("Failed to emit %s to meeting %s: %s", event, meeting_id, e)
        return False
