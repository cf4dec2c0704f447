"""Integration tests for company, member and invitation endpoints."""

from typing import Any
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from tests.conftest import ADMIN_ID, BOARD_MEMBER_ID, OBSERVER_ID, OUTSIDER_ID, OWNER_ID, auth_headers
from tests.fakes import FakeSupabaseClient


class TestCreateCompany:
    """Tests for POST /api/v1/companies."""

    def test_creates_company_with_owner(self, client: TestClient, fake_db: FakeSupabaseClient) -> None:
        """Test that the creator becomes the OWNER."""
        response = client.post("/api/v1/companies", json={"name": "Globex"}, headers=auth_headers("user_founder"))

        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "Globex"
        assert body["role"] == "OWNER"
        members = fake_db.rows("company_members")
        assert [(m["user_id"], m["role"]) for m in members] == [("user_founder", "OWNER")]

    def test_requires_authentication(self, client: TestClient) -> None:
        response = client.post("/api/v1/companies", json={"name": "Globex"})

        assert response.status_code == 401
        assert response.json()["error"] == "http_error"

    def test_rejects_empty_name(self, client: TestClient) -> None:
        response = client.post("/api/v1/companies", json={"name": ""}, headers=auth_headers())

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"


class TestCompanyAccess:
    """Tests for reading and editing a company."""

    def test_lists_my_companies(self, client: TestClient, board: dict[str, Any]) -> None:
        response = client.get("/api/v1/companies", headers=auth_headers(OBSERVER_ID))

        assert response.status_code == 200
        assert [(c["name"], c["role"]) for c in response.json()] == [("Acme Holdings", "OBSERVER")]

    def test_member_reads_company(self, client: TestClient, board: dict[str, Any]) -> None:
        response = client.get(f"/api/v1/companies/{board['company']['id']}", headers=auth_headers(BOARD_MEMBER_ID))

        assert response.status_code == 200
        assert response.json()["name"] == "Acme Holdings"

    def test_outsider_forbidden(self, client: TestClient, board: dict[str, Any]) -> None:
        """Test that non-members get 403 in the error envelope."""
        response = client.get(f"/api/v1/companies/{board['company']['id']}", headers=auth_headers(OUTSIDER_ID))

        assert response.status_code == 403
        body = response.json()
        assert body["error"] == "authorization_error"
        assert body["statusCode"] == 403
        assert body["path"] == f"/api/v1/companies/{board['company']['id']}"

    def test_admin_renames_company(self, client: TestClient, board: dict[str, Any]) -> None:
        response = client.put(
            f"/api/v1/companies/{board['company']['id']}",
            json={"name": "Acme Group"},
            headers=auth_headers(ADMIN_ID),
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Acme Group"

    def test_board_member_cannot_rename(self, client: TestClient, board: dict[str, Any]) -> None:
        response = client.put(
            f"/api/v1/companies/{board['company']['id']}",
            json={"name": "Acme Group"},
            headers=auth_headers(BOARD_MEMBER_ID),
        )

        assert response.status_code == 403


class TestMembers:
    """Tests for member listing, role changes and removal."""

    def test_lists_members_with_users(self, client: TestClient, board: dict[str, Any]) -> None:
        response = client.get(
            f"/api/v1/companies/{board['company']['id']}/members",
            headers=auth_headers(OBSERVER_ID),
        )

        assert response.status_code == 200
        members = response.json()
        assert len(members) == 4
        assert all(m["user"]["email"].endswith("@example.com") for m in members)

    def test_owner_changes_role(self, client: TestClient, board: dict[str, Any]) -> None:
        member = board["members"]["OBSERVER"]

        response = client.put(
            f"/api/v1/companies/{board['company']['id']}/members/{member['id']}",
            json={"role": "BOARD_MEMBER"},
            headers=auth_headers(OWNER_ID),
        )

        assert response.status_code == 200
        assert response.json()["role"] == "BOARD_MEMBER"

    def test_admin_cannot_change_roles(self, client: TestClient, board: dict[str, Any]) -> None:
        member = board["members"]["OBSERVER"]

        response = client.put(
            f"/api/v1/companies/{board['company']['id']}/members/{member['id']}",
            json={"role": "ADMIN"},
            headers=auth_headers(ADMIN_ID),
        )

        assert response.status_code == 403

    def test_remove_member_marks_former(
        self, client: TestClient, board: dict[str, Any], fake_db: FakeSupabaseClient
    ) -> None:
        member = board["members"]["BOARD_MEMBER"]

        response = client.delete(
            f"/api/v1/companies/{board['company']['id']}/members/{member['id']}",
            headers=auth_headers(ADMIN_ID),
        )

        assert response.status_code == 204
        row = next(m for m in fake_db.rows("company_members") if m["id"] == member["id"])
        assert row["status"] == "FORMER"

        listed = client.get(
            f"/api/v1/companies/{board['company']['id']}/members",
            headers=auth_headers(OWNER_ID),
        ).json()
        assert BOARD_MEMBER_ID not in {m["user_id"] for m in listed}

    def test_admin_cannot_remove_owner(self, client: TestClient, board: dict[str, Any]) -> None:
        member = board["members"]["OWNER"]

        response = client.delete(
            f"/api/v1/companies/{board['company']['id']}/members/{member['id']}",
            headers=auth_headers(ADMIN_ID),
        )

        assert response.status_code == 403


class TestInvitations:
    """Tests for the invitation flow."""

    def test_invite_and_accept(
        self,
        client: TestClient,
        board: dict[str, Any],
        fake_db: FakeSupabaseClient,
        mock_resend: MagicMock,
    ) -> None:
        """Test the full invite, list and accept flow."""
        company_id = board["company"]["id"]

        created = client.post(
            f"/api/v1/companies/{company_id}/invitations",
            json={"email": "newcomer@example.com", "role": "OBSERVER"},
            headers=auth_headers(ADMIN_ID),
        )
        assert created.status_code == 201
        mock_resend.assert_called_once()
        assert mock_resend.call_args[0][0]["to"] == ["newcomer@example.com"]

        headers = auth_headers("user_newcomer", "newcomer@example.com")
        pending = client.get("/api/v1/invitations", headers=headers).json()
        assert [i["company_name"] for i in pending] == ["Acme Holdings"]

        accepted = client.post(f"/api/v1/invitations/{pending[0]['id']}/accept", headers=headers)
        assert accepted.status_code == 200
        assert accepted.json()["status"] == "accepted"

        companies = client.get("/api/v1/companies", headers=headers).json()
        assert [(c["name"], c["role"]) for c in companies] == [("Acme Holdings", "OBSERVER")]

    def test_invite_existing_member_conflicts(self, client: TestClient, board: dict[str, Any]) -> None:
        response = client.post(
            f"/api/v1/companies/{board['company']['id']}/invitations",
            json={"email": f"{OBSERVER_ID}@example.com"},
            headers=auth_headers(OWNER_ID),
        )

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_observer_cannot_invite(self, client: TestClient, board: dict[str, Any]) -> None:
        response = client.post(
            f"/api/v1/companies/{board['company']['id']}/invitations",
            json={"email": "someone@example.com"},
            headers=auth_headers(OBSERVER_ID),
        )

        assert response.status_code == 403

    def test_accept_with_other_email(self, client: TestClient, board: dict[str, Any]) -> None:
        created = client.post(
            f"/api/v1/companies/{board['company']['id']}/invitations",
            json={"email": "invitee@example.com"},
            headers=auth_headers(OWNER_ID),
        ).json()

        response = client.post(
            f"/api/v1/invitations/{created['id']}/accept",
            headers=auth_headers("user_other", "other@example.com"),
        )

        assert response.status_code == 422

    def test_decline(self, client: TestClient, board: dict[str, Any]) -> None:
        created = client.post(
            f"/api/v1/companies/{board['company']['id']}/invitations",
            json={"email": "invitee@example.com"},
            headers=auth_headers(OWNER_ID),
        ).json()

        response = client.post(
            f"/api/v1/invitations/{created['id']}/decline",
            headers=auth_headers("user_invitee", "invitee@example.com"),
        )

        assert response.status_code == 200
        assert response.json()["status"] == "declined"

        listed = client.get(
            f"/api/v1/companies/{board['company']['id']}/invitations",
            params={"invitation_status": "declined"},
            headers=auth_headers(OWNER_ID),
        ).json()
        assert [i["id"] for i in listed] == [created["id"]]
