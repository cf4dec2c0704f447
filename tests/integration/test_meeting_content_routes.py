"""Integration tests for agenda, note and action item endpoints."""

from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi.testclient import TestClient

from tests.conftest import ADMIN_ID, BOARD_MEMBER_ID, OBSERVER_ID, OWNER_ID, auth_headers
from tests.fakes import FakeSupabaseClient


def _meeting_url(board: dict[str, Any], meeting: dict[str, Any]) -> str:
    return f"/api/v1/companies/{board['company']['id']}/meetings/{meeting['id']}"


class TestAgenda:
    """Tests for agenda item endpoints."""

    def test_create_list_reorder(self, client: TestClient, board: dict[str, Any], seed_meeting: Any) -> None:
        url = f"{_meeting_url(board, seed_meeting())}/agenda"
        headers = auth_headers(BOARD_MEMBER_ID)

        first = client.post(url, json={"title": "Minutes"}, headers=headers)
        second = client.post(url, json={"title": "Budget", "duration": 30}, headers=headers)
        assert first.status_code == 201
        assert (first.json()["order"], second.json()["order"]) == (0, 1)

        reordered = client.put(
            f"{url}/reorder",
            json={"ids": [second.json()["id"], first.json()["id"]]},
            headers=headers,
        )
        assert [i["title"] for i in reordered.json()] == ["Budget", "Minutes"]

        listed = client.get(url, headers=auth_headers(OBSERVER_ID)).json()
        assert [i["title"] for i in listed] == ["Budget", "Minutes"]

    def test_reorder_rejects_foreign_ids(
        self, client: TestClient, board: dict[str, Any], seed_meeting: Any
    ) -> None:
        url = f"{_meeting_url(board, seed_meeting())}/agenda"
        item = client.post(url, json={"title": "Minutes"}, headers=auth_headers(OWNER_ID)).json()

        response = client.put(
            f"{url}/reorder",
            json={"ids": [item["id"], "00000000-0000-0000-0000-000000000000"]},
            headers=auth_headers(OWNER_ID),
        )

        assert response.status_code == 422

    def test_update_and_delete(
        self, client: TestClient, board: dict[str, Any], seed_meeting: Any, fake_db: FakeSupabaseClient
    ) -> None:
        url = f"{_meeting_url(board, seed_meeting())}/agenda"
        item = client.post(url, json={"title": "Minutes"}, headers=auth_headers(ADMIN_ID)).json()

        updated = client.put(f"{url}/{item['id']}", json={"notes": "Approved as read"}, headers=auth_headers(ADMIN_ID))
        assert updated.json()["notes"] == "Approved as read"

        assert client.delete(f"{url}/{item['id']}", headers=auth_headers(ADMIN_ID)).status_code == 204
        assert fake_db.rows("agenda_items") == []

    def test_observer_cannot_edit(self, client: TestClient, board: dict[str, Any], seed_meeting: Any) -> None:
        url = f"{_meeting_url(board, seed_meeting())}/agenda"

        response = client.post(url, json={"title": "Minutes"}, headers=auth_headers(OBSERVER_ID))

        assert response.status_code == 403

    def test_closed_meeting_agenda_is_frozen(
        self, client: TestClient, board: dict[str, Any], seed_meeting: Any
    ) -> None:
        url = f"{_meeting_url(board, seed_meeting(status='CANCELLED'))}/agenda"

        response = client.post(url, json={"title": "Late item"}, headers=auth_headers(OWNER_ID))

        assert response.status_code == 409


class TestNotes:
    """Tests for meeting note endpoints."""

    def test_note_lifecycle(self, client: TestClient, board: dict[str, Any], seed_meeting: Any) -> None:
        url = f"{_meeting_url(board, seed_meeting(status='IN_PROGRESS'))}/notes"
        headers = auth_headers(BOARD_MEMBER_ID)

        created = client.post(url, json={"content": "Motion seconded"}, headers=headers)
        assert created.status_code == 201
        note = created.json()
        assert note["created_by_id"] == BOARD_MEMBER_ID

        fetched = client.get(f"{url}/{note['id']}", headers=auth_headers(OBSERVER_ID))
        assert fetched.json()["content"] == "Motion seconded"

        updated = client.put(f"{url}/{note['id']}", json={"content": "Motion carried"}, headers=headers)
        assert updated.json()["content"] == "Motion carried"

        assert client.delete(f"{url}/{note['id']}", headers=headers).status_code == 204
        assert client.get(f"{url}/{note['id']}", headers=headers).status_code == 404

    def test_empty_content_rejected(self, client: TestClient, board: dict[str, Any], seed_meeting: Any) -> None:
        url = f"{_meeting_url(board, seed_meeting())}/notes"

        response = client.post(url, json={"content": ""}, headers=auth_headers(OWNER_ID))

        assert response.status_code == 422

    def test_reorder(self, client: TestClient, board: dict[str, Any], seed_meeting: Any) -> None:
        url = f"{_meeting_url(board, seed_meeting())}/notes"
        headers = auth_headers(OWNER_ID)
        a = client.post(url, json={"content": "A"}, headers=headers).json()
        b = client.post(url, json={"content": "B"}, headers=headers).json()

        response = client.put(f"{url}/reorder", json={"ids": [b["id"], a["id"]]}, headers=headers)

        assert [n["content"] for n in response.json()] == ["B", "A"]


class TestActionItems:
    """Tests for action item endpoints."""

    def _url(self, board: dict[str, Any]) -> str:
        return f"/api/v1/companies/{board['company']['id']}/action-items"

    def test_create_with_meeting_link(self, client: TestClient, board: dict[str, Any], seed_meeting: Any) -> None:
        meeting = seed_meeting()

        response = client.post(
            self._url(board),
            json={
                "title": "Circulate minutes",
                "assignee_id": BOARD_MEMBER_ID,
                "meeting_id": meeting["id"],
                "priority": "HIGH",
            },
            headers=auth_headers(ADMIN_ID),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "PENDING"
        assert body["meeting_id"] == meeting["id"]
        assert body["order"] == 0

    def test_assignee_must_be_member(self, client: TestClient, board: dict[str, Any]) -> None:
        response = client.post(
            self._url(board),
            json={"title": "Task", "assignee_id": "user_stranger"},
            headers=auth_headers(ADMIN_ID),
        )

        assert response.status_code == 422

    def test_visibility_is_scoped_without_view_all(self, client: TestClient, board: dict[str, Any]) -> None:
        """Test that board members only see items they created or are assigned."""
        admin = auth_headers(ADMIN_ID)
        client.post(self._url(board), json={"title": "Mine", "assignee_id": BOARD_MEMBER_ID}, headers=admin)
        client.post(self._url(board), json={"title": "Not mine", "assignee_id": ADMIN_ID}, headers=admin)

        board_view = client.get(self._url(board), headers=auth_headers(BOARD_MEMBER_ID)).json()
        admin_view = client.get(self._url(board), headers=admin).json()

        assert [i["title"] for i in board_view] == ["Mine"]
        assert {i["title"] for i in admin_view} == {"Mine", "Not mine"}

    def test_past_due_items_become_overdue(
        self, client: TestClient, board: dict[str, Any], fake_db: FakeSupabaseClient
    ) -> None:
        client.post(
            self._url(board),
            json={"title": "Late", "due_date": (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()},
            headers=auth_headers(ADMIN_ID),
        )

        items = client.get(self._url(board), headers=auth_headers(ADMIN_ID)).json()

        assert items[0]["status"] == "OVERDUE"
        assert fake_db.rows("action_items")[0]["status"] == "OVERDUE"

    def test_status_update_and_filter(self, client: TestClient, board: dict[str, Any]) -> None:
        admin = auth_headers(ADMIN_ID)
        item = client.post(self._url(board), json={"title": "Sign NDA"}, headers=admin).json()

        updated = client.put(f"{self._url(board)}/{item['id']}/status", json={"status": "COMPLETED"}, headers=admin)
        assert updated.json()["status"] == "COMPLETED"

        completed = client.get(self._url(board), params={"item_status": "COMPLETED"}, headers=admin).json()
        pending = client.get(self._url(board), params={"item_status": "PENDING"}, headers=admin).json()
        assert [i["id"] for i in completed] == [item["id"]]
        assert pending == []

    def test_observer_cannot_create_or_delete(self, client: TestClient, board: dict[str, Any]) -> None:
        item = client.post(self._url(board), json={"title": "Task"}, headers=auth_headers(ADMIN_ID)).json()

        assert client.post(self._url(board), json={"title": "X"}, headers=auth_headers(OBSERVER_ID)).status_code == 403
        assert client.delete(f"{self._url(board)}/{item['id']}", headers=auth_headers(OBSERVER_ID)).status_code == 403
        assert client.delete(f"{self._url(board)}/{item['id']}", headers=auth_headers(OWNER_ID)).status_code == 204
