"""Live meeting WebSocket gateway.

The single place where connected clients change and observe meeting state.
Every event is re-authorized against fresh storage reads through
:class:`PermissionService`; nothing the client believes about the meeting is
trusted.
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable
from uuid import uuid4

from fastapi import WebSocket, WebSocketDisconnect, status
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from src.api.middleware.auth import AuthError, decode_jwt, extract_bearer_token
from src.api.middleware.error_handler import APIError, AuthorizationError
from src.core.config import get_settings
from src.models.company import MemberRole
from src.realtime.events import (
    ATTENDANCE_UPDATE,
    ATTENDEE_JOINED,
    ATTENDEE_LEFT,
    MEETING_JOIN,
    MEETING_LEAVE,
    MEETING_STATUS,
    VOTE_CAST,
    AttendancePayload,
    CastVotePayload,
    InboundFrame,
    JoinMeetingPayload,
    LeaveMeetingPayload,
    MeetingStatusPayload,
    ack_frame,
    error_frame,
    event_frame,
)
from src.realtime.room_registry import RoomRegistry
from src.schemas.auth import UserContext
from src.services.meeting_service import MeetingService
from src.services.permission_service import PermissionService
from src.services.vote_service import VoteService

logger = logging.getLogger(__name__)


class GatewayConnection:
    """An accepted WebSocket bound to one verified user for its whole life."""

    def __init__(self, websocket: WebSocket, user: UserContext) -> None:
        self.id = uuid4().hex
        self.websocket = websocket
        self.user_id = user.user_id
        self.session_id = user.session_id
        self.closed = False
        self._send_lock = asyncio.Lock()

    async def send(self, frame: dict[str, Any]) -> bool:
        """Send one JSON frame. Returns False once the socket is gone."""
        if self.closed:
            return False
        async with self._send_lock:
            try:
                await self.websocket.send_json(jsonable_encoder(frame))
                return True
            except Exception as e:
                logger.debug("Send to connection %s failed: %s", self.id, e)
                self.closed = True
                return False


Handler = Callable[[GatewayConnection, Any], Awaitable[dict[str, Any]]]


class MeetingsGateway:
    """Authenticates sockets, dispatches meeting events and broadcasts results.

    Also implements the room notifier port, so request handlers push their
    fire-and-forget updates through :meth:`emit_to_room`.
    """

    def __init__(self, registry: RoomRegistry | None = None) -> None:
        self.registry = registry or RoomRegistry()
        self._connections: dict[str, GatewayConnection] = {}
        self._handlers: dict[str, tuple[type[BaseModel], Handler]] = {
            MEETING_JOIN: (JoinMeetingPayload, self.handle_join),
            MEETING_LEAVE: (LeaveMeetingPayload, self.handle_leave),
            VOTE_CAST: (CastVotePayload, self.handle_vote),
            ATTENDANCE_UPDATE: (AttendancePayload, self.handle_attendance),
            MEETING_STATUS: (MeetingStatusPayload, self.handle_status),
        }

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    # Connection lifecycle

    async def authenticate(self, websocket: WebSocket) -> UserContext | None:
        """Verify the handshake credential.

        The token comes from the ``token`` query parameter or an
        ``Authorization: Bearer`` header. Verification is bounded by
        ``realtime_auth_timeout_seconds``.

        Returns:
            UserContext | None: The verified user, or None to reject.
        """
        token = websocket.query_params.get("token") or extract_bearer_token(
            websocket.headers.get("authorization")
        )
        if not token:
            logger.warning("WebSocket rejected: no token")
            return None

        timeout = get_settings().realtime_auth_timeout_seconds
        try:
            payload = await asyncio.wait_for(asyncio.to_thread(decode_jwt, token), timeout=timeout)
        except AuthError as e:
            logger.warning("WebSocket rejected: %s", e.message)
            return None
        except asyncio.TimeoutError:
            logger.warning("WebSocket rejected: token verification timed out after %ss", timeout)
            return None

        return payload.to_user_context()

    async def serve(self, websocket: WebSocket) -> None:
        """Run one client connection until it goes away.

        Unauthenticated sockets are closed with 1008 before they are accepted.
        Each inbound event runs as its own task, so a slow event does not
        hold up the next one. On disconnect the connection is removed from
        every room first; in-flight handlers are then allowed to finish their
        storage writes, with their replies suppressed.
        """
        user = await self.authenticate(websocket)
        if user is None:
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Authentication required")
            return

        await websocket.accept()
        connection = GatewayConnection(websocket, user)
        self._connections[connection.id] = connection
        logger.info("Connection %s opened (user %s)", connection.id, connection.user_id)

        pending: set[asyncio.Task[None]] = set()
        try:
            while True:
                message = await websocket.receive_text()
                task = asyncio.create_task(self.dispatch(connection, message))
                pending.add(task)
                task.add_done_callback(pending.discard)
        except WebSocketDisconnect:
            pass
        except Exception as e:
            logger.error("Connection %s receive loop failed: %s", connection.id, e)
        finally:
            await self.disconnect(connection)
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

    async def disconnect(self, connection: GatewayConnection) -> None:
        """Drop a connection from every room and tell each room once."""
        connection.closed = True
        self._connections.pop(connection.id, None)

        affected = await self.registry.remove_user(connection.user_id, connection)
        for meeting_id in affected:
            await self.emit_to_room(
                meeting_id,
                ATTENDEE_LEFT,
                {"userId": connection.user_id, "meetingId": meeting_id},
            )
        logger.info("Connection %s closed (user %s)", connection.id, connection.user_id)

    # Dispatch

    async def dispatch(self, connection: GatewayConnection, message: str) -> None:
        """Decode, authorize and run one inbound event, then reply to its sender."""
        ack: str | int | None = None
        try:
            frame = InboundFrame.model_validate(json.loads(message))
            ack = frame.ack

            entry = self._handlers.get(frame.event)
            if entry is None:
                await connection.send(error_frame(ack, "validation_error", f"Unknown event: {frame.event}"))
                return

            payload_model, handler = entry
            payload = payload_model.model_validate(frame.data)
            result = await handler(connection, payload)

        except (json.JSONDecodeError, PydanticValidationError) as e:
            await connection.send(error_frame(ack, "validation_error", _validation_message(e)))
        except APIError as e:
            logger.info("Event from %s rejected: %s %s", connection.user_id, e.error_type, e.message)
            await connection.send(error_frame(ack, e.error_type, e.message))
        except Exception:
            logger.exception("Event handler failed for connection %s", connection.id)
            await connection.send(error_frame(ack, "internal_error", "Internal server error"))
        else:
            await connection.send(ack_frame(ack, result))

    # Event handlers

    async def handle_join(self, connection: GatewayConnection, payload: JoinMeetingPayload) -> dict[str, Any]:
        meeting_id = str(payload.meeting_id)
        meeting = await MeetingService(notifier=self).get_meeting_by_id(meeting_id)

        if not await PermissionService().get_role(connection.user_id, meeting["company_id"]):
            raise AuthorizationError("Access denied to this meeting")

        occupants, added = await self.registry.join(meeting_id, connection.user_id, connection)
        # Announce only a new occupant; a second tab or a join racing a disconnect stays silent
        if added:
            await self._broadcast(
                meeting_id,
                event_frame(ATTENDEE_JOINED, {"userId": connection.user_id, "meetingId": meeting_id}),
                exclude_user_id=connection.user_id,
            )
            logger.info("User %s joined meeting %s", connection.user_id, meeting_id)

        return {"success": True, "meetingId": meeting_id, "currentAttendees": occupants}

    async def handle_leave(self, connection: GatewayConnection, payload: LeaveMeetingPayload) -> dict[str, Any]:
        meeting_id = str(payload.meeting_id)
        if await self.registry.leave(meeting_id, connection.user_id, connection):
            await self.emit_to_room(
                meeting_id,
                ATTENDEE_LEFT,
                {"userId": connection.user_id, "meetingId": meeting_id},
            )
            logger.info("User %s left meeting %s", connection.user_id, meeting_id)
        return {"success": True}

    async def handle_vote(self, connection: GatewayConnection, payload: CastVotePayload) -> dict[str, Any]:
        result = await VoteService(notifier=self).cast_vote(
            payload.decision_id,
            connection.user_id,
            payload.vote,
        )
        return {"success": True, "vote": result["vote"], "tally": result["tally"]}

    async def handle_attendance(self, connection: GatewayConnection, payload: AttendancePayload) -> dict[str, Any]:
        await MeetingService(notifier=self).update_own_attendance(
            payload.meeting_id,
            connection.user_id,
            payload.is_present,
        )
        return {"success": True}

    async def handle_status(self, connection: GatewayConnection, payload: MeetingStatusPayload) -> dict[str, Any]:
        meetings = MeetingService(notifier=self)
        meeting = await meetings.get_meeting_by_id(payload.meeting_id)

        allowed = await PermissionService().has_role(
            connection.user_id,
            meeting["company_id"],
            [MemberRole.OWNER, MemberRole.ADMIN],
        )
        if not allowed:
            raise AuthorizationError("Admin access required")

        updated = await meetings.apply_status(meeting["id"], payload.status)
        logger.info("Meeting %s set to %s by %s", meeting["id"], payload.status.value, connection.user_id)
        return {"success": True, "meeting": updated}

    # Broadcast

    async def emit_to_room(self, meeting_id: str, event: str, payload: Any) -> None:
        """Send an event to every open connection in a meeting room."""
        await self._broadcast(meeting_id, event_frame(event, payload))

    async def _broadcast(
        self,
        meeting_id: str,
        frame: dict[str, Any],
        exclude_user_id: str | None = None,
    ) -> None:
        connections = await self.registry.connections(meeting_id, exclude_user_id=exclude_user_id)
        if not connections:
            logger.debug("No live connections in meeting %s for %s", meeting_id, frame["event"])
            return
        await asyncio.gather(*(conn.send(frame) for conn in connections))


def _validation_message(error: Exception) -> str:
    if isinstance(error, PydanticValidationError):
        return "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
            for err in error.errors()
        ) or "Invalid payload"
    return "Malformed JSON frame"
