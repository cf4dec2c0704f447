"""Custom role business logic service."""

import logging
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import CapacityError, ConflictError, NotFoundError
from src.core.config import get_settings
from src.core.supabase import get_supabase_client
from src.schemas.company import CustomRoleCreate, CustomRoleUpdate

logger = logging.getLogger(__name__)


class CustomRoleService:
    """Service for company-defined roles.

    A company may hold at most ``max_custom_roles`` custom roles, names are
    unique per company, and a role referenced by any membership cannot be
    deleted.
    """

    def __init__(self) -> None:
        """Initialize custom role service with Supabase client."""
        self.client = get_supabase_client()
        self.max_custom_roles = get_settings().max_custom_roles

    async def list_roles(self, company_id: UUID) -> list[dict[str, Any]]:
        """List a company's custom roles with their member counts."""
        roles = (
            self.client.table("custom_roles")
            .select("*")
            .eq("company_id", str(company_id))
            .order("name")
            .execute()
        ).data or []

        if not roles:
            return []

        members = (
            self.client.table("company_members")
            .select("custom_role_id")
            .eq("company_id", str(company_id))
            .in_("custom_role_id", [r["id"] for r in roles])
            .execute()
        ).data or []

        counts: dict[str, int] = {}
        for m in members:
            counts[m["custom_role_id"]] = counts.get(m["custom_role_id"], 0) + 1

        return [{**r, "member_count": counts.get(r["id"], 0)} for r in roles]

    async def get_role(self, company_id: UUID, role_id: UUID) -> dict[str, Any]:
        """Get a custom role scoped to the company.

        Raises:
            NotFoundError: If absent or in another company.
        """
        response = (
            self.client.table("custom_roles")
            .select("*")
            .eq("id", str(role_id))
            .eq("company_id", str(company_id))
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            raise NotFoundError("Custom role not found")
        return response.data

    async def create_role(self, company_id: UUID, data: CustomRoleCreate) -> dict[str, Any]:
        """Create a custom role.

        Raises:
            CapacityError: If the company already has the maximum number of roles.
            ConflictError: If the name is taken in this company.
        """
        existing = (
            self.client.table("custom_roles")
            .select("id", count="exact")
            .eq("company_id", str(company_id))
            .execute()
        )
        if (existing.count or 0) >= self.max_custom_roles:
            raise CapacityError(
                f"Maximum of {self.max_custom_roles} custom roles allowed per company"
            )

        await self._ensure_name_available(company_id, data.name)

        response = (
            self.client.table("custom_roles")
            .insert(
                {
                    "company_id": str(company_id),
                    "name": data.name,
                    "description": data.description,
                }
            )
            .execute()
        )
        role = response.data[0]
        logger.info("Custom role %s (%s) created in company %s", role["id"], data.name, company_id)
        return {**role, "member_count": 0}

    async def update_role(
        self,
        company_id: UUID,
        role_id: UUID,
        data: CustomRoleUpdate,
    ) -> dict[str, Any]:
        """Rename or re-describe a custom role.

        Raises:
            NotFoundError: If the role is not in this company.
            ConflictError: If the new name is taken.
        """
        role = await self.get_role(company_id, role_id)

        update = data.model_dump(exclude_unset=True)
        if data.name and data.name != role["name"]:
            await self._ensure_name_available(company_id, data.name)

        if not update:
            return role

        response = (
            self.client.table("custom_roles")
            .update(update)
            .eq("id", str(role_id))
            .execute()
        )
        return response.data[0]

    async def delete_role(self, company_id: UUID, role_id: UUID) -> None:
        """Delete a custom role and its grants.

        Raises:
            NotFoundError: If the role is not in this company.
            ConflictError: If any membership still references the role.
        """
        await self.get_role(company_id, role_id)

        assigned = (
            self.client.table("company_members")
            .select("id")
            .eq("custom_role_id", str(role_id))
            .limit(1)
            .execute()
        )
        if assigned.data:
            raise ConflictError("Cannot delete role with assigned members. Reassign members first.")

        self.client.table("role_permissions").delete().eq("custom_role_id", str(role_id)).execute()
        self.client.table("custom_roles").delete().eq("id", str(role_id)).execute()
        logger.info("Custom role %s deleted from company %s", role_id, company_id)

    async def _ensure_name_available(self, company_id: UUID, name: str) -> None:
        response = (
            self.client.table("custom_roles")
            .select("id")
            .eq("company_id", str(company_id))
            .eq("name", name)
            .execute()
        )
        if response.data:
            raise ConflictError("A role with this name already exists")
