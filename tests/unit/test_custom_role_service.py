"""Unit tests for CustomRoleService."""

from typing import Any

import pytest

from src.api.middleware.error_handler import CapacityError, ConflictError, NotFoundError
from src.schemas.company import CustomRoleCreate, CustomRoleUpdate
from src.services.custom_role_service import CustomRoleService
from tests.fakes import FakeSupabaseClient


class TestCreateRole:
    """Tests for create_role."""

    @pytest.mark.asyncio
    async def test_fifth_role_allowed_sixth_rejected(
        self, fake_db: FakeSupabaseClient, board: dict[str, Any]
    ) -> None:
        """Test the per-company cap of five custom roles."""
        service = CustomRoleService()
        company_id = board["company"]["id"]

        for i in range(5):
            role = await service.create_role(company_id, CustomRoleCreate(name=f"Role {i}"))
            assert role["member_count"] == 0

        with pytest.raises(CapacityError) as exc_info:
            await service.create_role(company_id, CustomRoleCreate(name="Role 5"))

        assert exc_info.value.error_type == "capacity_exceeded"
        assert len(fake_db.rows("custom_roles")) == 5

    @pytest.mark.asyncio
    async def test_duplicate_name_conflicts(self, fake_db: FakeSupabaseClient, board: dict[str, Any]) -> None:
        service = CustomRoleService()
        company_id = board["company"]["id"]
        await service.create_role(company_id, CustomRoleCreate(name="Treasurer"))

        with pytest.raises(ConflictError):
            await service.create_role(company_id, CustomRoleCreate(name="Treasurer"))

    @pytest.mark.asyncio
    async def test_cap_is_per_company(self, fake_db: FakeSupabaseClient, board: dict[str, Any]) -> None:
        """Test that another company's roles do not count."""
        other = fake_db.seed("companies", {"name": "Other Co"})[0]
        for i in range(5):
            fake_db.seed("custom_roles", {"company_id": other["id"], "name": f"Role {i}"})

        role = await CustomRoleService().create_role(board["company"]["id"], CustomRoleCreate(name="Role 0"))

        assert role["name"] == "Role 0"


class TestUpdateAndDeleteRole:
    """Tests for update_role, delete_role and list_roles."""

    @pytest.mark.asyncio
    async def test_rename(self, fake_db: FakeSupabaseClient, board: dict[str, Any]) -> None:
        service = CustomRoleService()
        company_id = board["company"]["id"]
        role = await service.create_role(company_id, CustomRoleCreate(name="Treasurer"))

        updated = await service.update_role(company_id, role["id"], CustomRoleUpdate(name="Finance Lead"))

        assert updated["name"] == "Finance Lead"

    @pytest.mark.asyncio
    async def test_rename_to_taken_name_conflicts(self, fake_db: FakeSupabaseClient, board: dict[str, Any]) -> None:
        service = CustomRoleService()
        company_id = board["company"]["id"]
        await service.create_role(company_id, CustomRoleCreate(name="Treasurer"))
        role = await service.create_role(company_id, CustomRoleCreate(name="Secretary"))

        with pytest.raises(ConflictError):
            await service.update_role(company_id, role["id"], CustomRoleUpdate(name="Treasurer"))

    @pytest.mark.asyncio
    async def test_delete_blocked_while_assigned(self, fake_db: FakeSupabaseClient, board: dict[str, Any]) -> None:
        """Test that a role held by a member cannot be deleted."""
        service = CustomRoleService()
        company_id = board["company"]["id"]
        role = await service.create_role(company_id, CustomRoleCreate(name="Treasurer"))
        fake_db.table("company_members").update({"custom_role_id": role["id"]}).eq(
            "id", board["members"]["OBSERVER"]["id"]
        ).execute()

        with pytest.raises(ConflictError):
            await service.delete_role(company_id, role["id"])

        listed = await service.list_roles(company_id)
        assert listed[0]["member_count"] == 1

    @pytest.mark.asyncio
    async def test_delete_removes_role_and_grants(self, fake_db: FakeSupabaseClient, board: dict[str, Any]) -> None:
        service = CustomRoleService()
        company_id = board["company"]["id"]
        role = await service.create_role(company_id, CustomRoleCreate(name="Treasurer"))
        fake_db.seed(
            "role_permissions",
            {"company_id": company_id, "role": None, "custom_role_id": role["id"], "permission_id": "p1", "granted": True},
        )

        await service.delete_role(company_id, role["id"])

        assert fake_db.rows("custom_roles") == []
        assert fake_db.rows("role_permissions") == []

    @pytest.mark.asyncio
    async def test_role_in_other_company_not_found(self, fake_db: FakeSupabaseClient, board: dict[str, Any]) -> None:
        other = fake_db.seed("companies", {"name": "Other Co"})[0]
        role = fake_db.seed("custom_roles", {"company_id": other["id"], "name": "Spy"})[0]

        with pytest.raises(NotFoundError):
            await CustomRoleService().delete_role(board["company"]["id"], role["id"])
