"""Unit tests for InvitationService."""

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from src.api.middleware.error_handler import ConflictError, NotFoundError, ValidationError
from src.models.company import MemberRole
from src.schemas.company import InvitationCreate
from src.services.invitation_service import InvitationService
from tests.conftest import ADMIN_ID, OBSERVER_ID, OWNER_ID
from tests.fakes import FakeSupabaseClient


def _invite(fake_db: FakeSupabaseClient, company_id: str, email: str, **fields: Any) -> dict[str, Any]:
    return fake_db.seed(
        "invitations",
        {
            "company_id": company_id,
            "email": email,
            "role": "BOARD_MEMBER",
            "custom_role_id": None,
            "invited_by": OWNER_ID,
            "status": "pending",
            "expires_at": (datetime.now(timezone.utc) + timedelta(days=7)).isoformat(),
            "accepted_at": None,
            **fields,
        },
    )[0]


class TestCreateInvitation:
    """Tests for create_invitation."""

    @pytest.mark.asyncio
    async def test_creates_pending_invitation(self, fake_db: FakeSupabaseClient, board: dict[str, Any]) -> None:
        invitation = await InvitationService().create_invitation(
            board["company"]["id"],
            InvitationCreate(email="New.Director@Example.com", role=MemberRole.ADMIN),
            OWNER_ID,
        )

        assert invitation["email"] == "new.director@example.com"
        assert invitation["status"] == "pending"
        assert invitation["role"] == "ADMIN"

    @pytest.mark.asyncio
    async def test_existing_member_conflicts(self, fake_db: FakeSupabaseClient, board: dict[str, Any]) -> None:
        with pytest.raises(ConflictError):
            await InvitationService().create_invitation(
                board["company"]["id"], InvitationCreate(email=f"{ADMIN_ID}@example.com"), OWNER_ID
            )

    @pytest.mark.asyncio
    async def test_duplicate_pending_conflicts(self, fake_db: FakeSupabaseClient, board: dict[str, Any]) -> None:
        service = InvitationService()
        await service.create_invitation(board["company"]["id"], InvitationCreate(email="a@b.com"), OWNER_ID)

        with pytest.raises(ConflictError):
            await service.create_invitation(board["company"]["id"], InvitationCreate(email="a@b.com"), OWNER_ID)

    @pytest.mark.asyncio
    async def test_unknown_custom_role(self, fake_db: FakeSupabaseClient, board: dict[str, Any]) -> None:
        with pytest.raises(NotFoundError):
            await InvitationService().create_invitation(
                board["company"]["id"],
                InvitationCreate(email="a@b.com", custom_role_id="00000000-0000-0000-0000-000000000000"),
                OWNER_ID,
            )


class TestAcceptInvitation:
    """Tests for accept_invitation."""

    @pytest.mark.asyncio
    async def test_accept_creates_membership(self, fake_db: FakeSupabaseClient, board: dict[str, Any]) -> None:
        invitation = _invite(fake_db, board["company"]["id"], "new@example.com")

        accepted = await InvitationService().accept_invitation(invitation["id"], "user_new", "NEW@example.com")

        assert accepted["status"] == "accepted"
        membership = [m for m in fake_db.rows("company_members") if m["user_id"] == "user_new"]
        assert membership[0]["role"] == "BOARD_MEMBER"
        assert membership[0]["status"] == "ACTIVE"

    @pytest.mark.asyncio
    async def test_former_member_is_reactivated(self, fake_db: FakeSupabaseClient, board: dict[str, Any]) -> None:
        """Test that rejoining reuses the old membership row."""
        fake_db.table("company_members").update({"status": "FORMER"}).eq("user_id", OBSERVER_ID).execute()
        invitation = _invite(fake_db, board["company"]["id"], f"{OBSERVER_ID}@example.com", role="ADMIN")

        await InvitationService().accept_invitation(invitation["id"], OBSERVER_ID, f"{OBSERVER_ID}@example.com")

        rows = [m for m in fake_db.rows("company_members") if m["user_id"] == OBSERVER_ID]
        assert len(rows) == 1
        assert (rows[0]["status"], rows[0]["role"]) == ("ACTIVE", "ADMIN")

    @pytest.mark.asyncio
    async def test_email_mismatch(self, fake_db: FakeSupabaseClient, board: dict[str, Any]) -> None:
        invitation = _invite(fake_db, board["company"]["id"], "new@example.com")

        with pytest.raises(ValidationError):
            await InvitationService().accept_invitation(invitation["id"], "user_new", "other@example.com")

    @pytest.mark.asyncio
    async def test_expired_invitation_is_marked(self, fake_db: FakeSupabaseClient, board: dict[str, Any]) -> None:
        invitation = _invite(
            fake_db,
            board["company"]["id"],
            "late@example.com",
            expires_at=(datetime.now(timezone.utc) - timedelta(minutes=1)).isoformat(),
        )

        with pytest.raises(ValidationError):
            await InvitationService().accept_invitation(invitation["id"], "user_late", "late@example.com")

        assert fake_db.rows("invitations")[0]["status"] == "expired"

    @pytest.mark.asyncio
    async def test_decline(self, fake_db: FakeSupabaseClient, board: dict[str, Any]) -> None:
        invitation = _invite(fake_db, board["company"]["id"], "new@example.com")
        service = InvitationService()

        declined = await service.decline_invitation(invitation["id"], "new@example.com")

        assert declined["status"] == "declined"
        with pytest.raises(ValidationError):
            await service.accept_invitation(invitation["id"], "user_new", "new@example.com")

    @pytest.mark.asyncio
    async def test_list_user_invitations_has_company_name(
        self, fake_db: FakeSupabaseClient, board: dict[str, Any]
    ) -> None:
        _invite(fake_db, board["company"]["id"], "new@example.com")

        invitations = await InvitationService().list_user_invitations("New@Example.com")

        assert [i["company_name"] for i in invitations] == ["Acme Holdings"]
