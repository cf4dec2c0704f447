"""Live meeting room registry.

Tracks which users are connected to which meeting room and, for each user,
the transport connections that put them there. Occupancy and transport
membership live in one structure behind one lock, so a user is listed as an
occupant exactly while at least one of their connections is in the room.
"""

import asyncio
import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class RoomConnection(Protocol):
    """The parts of a transport connection the registry relies on."""

    id: str
    closed: bool


class RoomRegistry:
    """In-memory meeting_id -> user_id -> connections mapping.

    Owned by the gateway and injected where needed. Empty rooms are dropped
    eagerly; an absent room and an empty room are equivalent.
    """

    def __init__(self) -> None:
        self._rooms: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    async def join(
        self,
        meeting_id: str,
        user_id: str,
        connection: RoomConnection | None = None,
    ) -> tuple[list[str], bool]:
        """Add a user (and optionally one of their connections) to a room.

        Idempotent. A connection already marked closed is not added, so a
        join that finishes after its socket dropped cannot leave a stale entry.

        Returns:
            tuple[list[str], bool]: Current occupants after the join, and
            whether this call made the user an occupant.
        """
        async with self._lock:
            if connection is not None and connection.closed:
                return self._occupants(meeting_id), False

            users = self._rooms.setdefault(meeting_id, {})
            added = user_id not in users
            connections = users.setdefault(user_id, {})
            if connection is not None:
                connections[connection.id] = connection
            return self._occupants(meeting_id), added

    async def leave(
        self,
        meeting_id: str,
        user_id: str,
        connection: RoomConnection | None = None,
    ) -> bool:
        """Remove a user's connection from a room.

        Without a connection the user is removed outright. With one, the user
        stays an occupant while other connections of theirs remain.

        Returns:
            bool: True if the user is no longer an occupant because of this call.
        """
        async with self._lock:
            return self._discard(meeting_id, user_id, connection)

    async def remove_user(
        self,
        user_id: str,
        connection: RoomConnection | None = None,
    ) -> list[str]:
        """Remove a user (or one of their connections) from every room.

        Returns:
            list[str]: Meeting ids the user stopped occupying.
        """
        async with self._lock:
            affected = []
            for meeting_id in list(self._rooms):
                if self._discard(meeting_id, user_id, connection):
                    affected.append(meeting_id)
            return affected

    async def connections(self, meeting_id: str, exclude_user_id: str | None = None) -> list[Any]:
        """Snapshot the open connections in a room."""
        async with self._lock:
            users = self._rooms.get(meeting_id, {})
            return [
                conn
                for user_id, conns in users.items()
                if user_id != exclude_user_id
                for conn in conns.values()
                if not conn.closed
            ]

    def occupants(self, meeting_id: str) -> list[str]:
        """Users currently in a room."""
        return self._occupants(meeting_id)

    def rooms_for(self, user_id: str) -> list[str]:
        """Meetings a user currently occupies."""
        return [meeting_id for meeting_id, users in self._rooms.items() if user_id in users]

    def room_count(self) -> int:
        return len(self._rooms)

    def _occupants(self, meeting_id: str) -> list[str]:
        return sorted(self._rooms.get(meeting_id, {}))

    def _discard(
        self,
        meeting_id: str,
        user_id: str,
        connection: RoomConnection | None,
    ) -> bool:
        # Caller holds the lock.
        users = self._rooms.get(meeting_id)
        if not users or user_id not in users:
            return False

        if connection is not None:
            users[user_id].pop(connection.id, None)
            if users[user_id]:
                return False

        del users[user_id]
        if not users:
            del self._rooms[meeting_id]
        logger.debug("User %s removed from meeting room %s", user_id, meeting_id)
        return True
