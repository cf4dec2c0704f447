"""Unit tests for RoomRegistry."""

import asyncio
from dataclasses import dataclass

import pytest

from src.realtime.room_registry import RoomRegistry


@dataclass
class StubConnection:
    id: str
    closed: bool = False


@pytest.fixture
def registry() -> RoomRegistry:
    return RoomRegistry()


class TestJoin:
    """Tests for join."""

    @pytest.mark.asyncio
    async def test_join_returns_occupants(self, registry: RoomRegistry) -> None:
        """Test that join returns every user in the room."""
        await registry.join("m1", "alice", StubConnection("c1"))
        occupants, added = await registry.join("m1", "bob", StubConnection("c2"))

        assert occupants == ["alice", "bob"]
        assert added is True

    @pytest.mark.asyncio
    async def test_join_is_idempotent(self, registry: RoomRegistry) -> None:
        """Test that joining twice lists the user once."""
        conn = StubConnection("c1")
        await registry.join("m1", "alice", conn)
        occupants, added = await registry.join("m1", "alice", conn)

        assert occupants == ["alice"]
        assert added is False
        assert len(await registry.connections("m1")) == 1

    @pytest.mark.asyncio
    async def test_closed_connection_is_not_added(self, registry: RoomRegistry) -> None:
        """Test that a join finishing after disconnect leaves no entry."""
        occupants, added = await registry.join("m1", "alice", StubConnection("c1", closed=True))

        assert occupants == []
        assert added is False
        assert registry.room_count() == 0

    @pytest.mark.asyncio
    async def test_second_connection_is_not_a_new_occupant(self, registry: RoomRegistry) -> None:
        """Test that another tab of a present user is added without counting as a join."""
        await registry.join("m1", "alice", StubConnection("c1"))
        occupants, added = await registry.join("m1", "alice", StubConnection("c2"))

        assert occupants == ["alice"]
        assert added is False
        assert len(await registry.connections("m1")) == 2


class TestLeave:
    """Tests for leave and remove_user."""

    @pytest.mark.asyncio
    async def test_last_connection_leaving_removes_user(self, registry: RoomRegistry) -> None:
        conn = StubConnection("c1")
        await registry.join("m1", "alice", conn)

        assert await registry.leave("m1", "alice", conn) is True
        assert registry.occupants("m1") == []
        assert registry.room_count() == 0

    @pytest.mark.asyncio
    async def test_user_stays_while_another_connection_remains(self, registry: RoomRegistry) -> None:
        """Test that a second tab keeps the user in the room."""
        tab1, tab2 = StubConnection("c1"), StubConnection("c2")
        await registry.join("m1", "alice", tab1)
        await registry.join("m1", "alice", tab2)

        assert await registry.leave("m1", "alice", tab1) is False
        assert registry.occupants("m1") == ["alice"]

    @pytest.mark.asyncio
    async def test_leave_unknown_room_is_noop(self, registry: RoomRegistry) -> None:
        assert await registry.leave("missing", "alice") is False

    @pytest.mark.asyncio
    async def test_remove_user_reports_affected_rooms(self, registry: RoomRegistry) -> None:
        """Test that disconnect cleanup covers every room once."""
        conn = StubConnection("c1")
        await registry.join("m1", "alice", conn)
        await registry.join("m2", "alice", conn)
        await registry.join("m2", "bob", StubConnection("c2"))

        affected = await registry.remove_user("alice", conn)

        assert sorted(affected) == ["m1", "m2"]
        assert registry.rooms_for("alice") == []
        assert registry.occupants("m2") == ["bob"]
        assert registry.room_count() == 1


class TestConnections:
    """Tests for connections."""

    @pytest.mark.asyncio
    async def test_excludes_user_and_closed_connections(self, registry: RoomRegistry) -> None:
        alice = StubConnection("c1")
        bob = StubConnection("c2")
        carol = StubConnection("c3")
        await registry.join("m1", "alice", alice)
        await registry.join("m1", "bob", bob)
        await registry.join("m1", "carol", carol)
        carol.closed = True

        connections = await registry.connections("m1", exclude_user_id="alice")

        assert connections == [bob]


class TestConcurrency:
    """Tests for concurrent registry mutations."""

    @pytest.mark.asyncio
    async def test_concurrent_joins_then_leaves_converge_to_empty(self, registry: RoomRegistry) -> None:
        connections = [(f"user_{i}", StubConnection(f"c{i}")) for i in range(50)]

        joins = await asyncio.gather(*(registry.join("m1", user, conn) for user, conn in connections))
        assert sum(added for _, added in joins) == 50
        assert len(registry.occupants("m1")) == 50

        leaves = await asyncio.gather(*(registry.leave("m1", user, conn) for user, conn in connections))

        assert all(leaves)
        assert registry.occupants("m1") == []
        assert registry.room_count() == 0

    @pytest.mark.asyncio
    async def test_interleaved_join_and_remove_leave_no_stale_rooms(self, registry: RoomRegistry) -> None:
        """Test that racing a join against disconnect cleanup ends with no entries."""
        conns = [StubConnection(f"c{i}") for i in range(20)]

        async def join_then_drop(i: int) -> None:
            await registry.join(f"m{i % 4}", f"user_{i}", conns[i])
            conns[i].closed = True
            await registry.remove_user(f"user_{i}", conns[i])

        await asyncio.gather(*(join_then_drop(i) for i in range(20)))

        assert registry.room_count() == 0
