"""Integration tests for folder, document, version and tag endpoints."""

from typing import Any

from fastapi.testclient import TestClient

from tests.conftest import BOARD_MEMBER_ID, OBSERVER_ID, OWNER_ID, auth_headers
from tests.fakes import FakeSupabaseClient


def _base(board: dict[str, Any]) -> str:
    return f"/api/v1/companies/{board['company']['id']}"


def _upload(client: TestClient, board: dict[str, Any], **fields: Any) -> dict[str, Any]:
    body = {
        "name": "Board pack.pdf",
        "storage_key": "acme/board-pack-v1.pdf",
        "mime_type": "application/pdf",
        "size": 2048,
        **fields,
    }
    response = client.post(f"{_base(board)}/documents", json=body, headers=auth_headers(BOARD_MEMBER_ID))
    assert response.status_code == 201
    return response.json()


class TestFolders:
    """Tests for folder endpoints."""

    def test_nested_folders(self, client: TestClient, board: dict[str, Any]) -> None:
        headers = auth_headers(BOARD_MEMBER_ID)
        parent = client.post(f"{_base(board)}/folders", json={"name": "Board"}, headers=headers).json()
        child = client.post(
            f"{_base(board)}/folders", json={"name": "2026", "parent_id": parent["id"]}, headers=headers
        ).json()

        renamed = client.put(f"{_base(board)}/folders/{child['id']}", json={"name": "FY2026"}, headers=headers)

        assert child["parent_id"] == parent["id"]
        assert renamed.json()["name"] == "FY2026"
        listed = client.get(f"{_base(board)}/folders", headers=auth_headers(OBSERVER_ID)).json()
        assert [f["name"] for f in listed] == ["Board", "FY2026"]

    def test_only_empty_folders_can_be_deleted(
        self, client: TestClient, board: dict[str, Any], fake_db: FakeSupabaseClient
    ) -> None:
        headers = auth_headers(OWNER_ID)
        parent = client.post(f"{_base(board)}/folders", json={"name": "Board"}, headers=headers).json()
        child = client.post(
            f"{_base(board)}/folders", json={"name": "2026", "parent_id": parent["id"]}, headers=headers
        ).json()
        document = _upload(client, board, folder_id=child["id"])

        assert client.delete(f"{_base(board)}/folders/{parent['id']}", headers=headers).status_code == 409
        assert client.delete(f"{_base(board)}/folders/{child['id']}", headers=headers).status_code == 409

        client.delete(f"{_base(board)}/documents/{document['id']}", headers=headers)
        assert client.delete(f"{_base(board)}/folders/{child['id']}", headers=headers).status_code == 204
        assert client.delete(f"{_base(board)}/folders/{parent['id']}", headers=headers).status_code == 204
        assert fake_db.rows("folders") == []


class TestDocuments:
    """Tests for document metadata endpoints."""

    def test_create_attaches_meeting(
        self, client: TestClient, board: dict[str, Any], seed_meeting: Any, fake_db: FakeSupabaseClient
    ) -> None:
        meeting = seed_meeting()

        document = _upload(client, board, type="MEETING", meeting_id=meeting["id"])

        assert document["version"] == 1
        assert document["uploader_id"] == BOARD_MEMBER_ID
        assert [v["version"] for v in document["versions"]] == [1]
        links = fake_db.rows("meeting_documents")
        assert [(link["meeting_id"], link["document_id"]) for link in links] == [(meeting["id"], document["id"])]

    def test_rejects_folder_from_another_company(
        self, client: TestClient, board: dict[str, Any], fake_db: FakeSupabaseClient
    ) -> None:
        other = fake_db.seed("companies", {"name": "Other Co"})[0]
        folder = fake_db.seed("folders", {"company_id": other["id"], "name": "Theirs", "parent_id": None})[0]

        response = client.post(
            f"{_base(board)}/documents",
            json={"name": "x.pdf", "storage_key": "x.pdf", "folder_id": folder["id"]},
            headers=auth_headers(OWNER_ID),
        )

        assert response.status_code == 422

    def test_new_version_keeps_history(self, client: TestClient, board: dict[str, Any]) -> None:
        document = _upload(client, board)

        response = client.post(
            f"{_base(board)}/documents/{document['id']}/versions",
            json={"storage_key": "acme/board-pack-v2.pdf", "size": 4096},
            headers=auth_headers(OWNER_ID),
        )

        updated = response.json()
        assert response.status_code == 201
        assert updated["version"] == 2
        assert updated["storage_key"] == "acme/board-pack-v2.pdf"
        assert updated["mime_type"] == "application/pdf"
        assert [(v["version"], v["uploader_id"]) for v in updated["versions"]] == [(2, OWNER_ID), (1, BOARD_MEMBER_ID)]

        download = client.get(
            f"{_base(board)}/documents/{document['id']}/download", headers=auth_headers(OBSERVER_ID)
        ).json()
        assert download == {
            "name": "Board pack.pdf",
            "storage_key": "acme/board-pack-v2.pdf",
            "mime_type": "application/pdf",
            "size": 4096,
            "version": 2,
        }

    def test_update_and_delete(
        self, client: TestClient, board: dict[str, Any], fake_db: FakeSupabaseClient
    ) -> None:
        document = _upload(client, board, type="FINANCIAL")
        url = f"{_base(board)}/documents/{document['id']}"

        updated = client.put(url, json={"name": "Q1 pack.pdf"}, headers=auth_headers(BOARD_MEMBER_ID))
        assert updated.json()["name"] == "Q1 pack.pdf"

        assert client.delete(url, headers=auth_headers(BOARD_MEMBER_ID)).status_code == 403
        assert client.delete(url, headers=auth_headers(OWNER_ID)).status_code == 204
        assert fake_db.rows("documents") == []
        assert fake_db.rows("document_versions") == []

    def test_observer_can_read_but_not_upload(self, client: TestClient, board: dict[str, Any]) -> None:
        document = _upload(client, board)

        assert client.get(
            f"{_base(board)}/documents/{document['id']}", headers=auth_headers(OBSERVER_ID)
        ).status_code == 200
        assert client.post(
            f"{_base(board)}/documents",
            json={"name": "x.pdf", "storage_key": "x.pdf"},
            headers=auth_headers(OBSERVER_ID),
        ).status_code == 403


class TestTags:
    """Tests for document tags."""

    def test_tag_filter_and_remove(self, client: TestClient, board: dict[str, Any]) -> None:
        tagged = _upload(client, board, name="Minutes.pdf")
        _upload(client, board, name="Other.pdf")
        url = f"{_base(board)}/documents/{tagged['id']}/tags"
        headers = auth_headers(BOARD_MEMBER_ID)

        first = client.post(url, json={"tags": ["q1", "board"]}, headers=headers)
        again = client.post(url, json={"tags": ["board", "q1", "final"]}, headers=headers)
        assert first.json()["tags"] == ["board", "q1"]
        assert again.json()["tags"] == ["board", "final", "q1"]

        listed = client.get(f"{_base(board)}/documents", params={"tag": "final"}, headers=headers).json()
        assert [d["name"] for d in listed] == ["Minutes.pdf"]

        removed = client.delete(f"{url}/final", headers=headers)
        assert removed.json()["tags"] == ["board", "q1"]
        assert client.delete(f"{url}/final", headers=headers).status_code == 404

    def test_unknown_tag_matches_nothing(self, client: TestClient, board: dict[str, Any]) -> None:
        _upload(client, board)

        listed = client.get(f"{_base(board)}/documents", params={"tag": "missing"}, headers=auth_headers(OWNER_ID))

        assert listed.json() == []
