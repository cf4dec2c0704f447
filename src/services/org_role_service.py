"""Org chart business logic service."""

import logging
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import NotFoundError, ValidationError
from src.core.supabase import get_supabase_client
from src.schemas.org_role import OrgRoleCreate, OrgRoleUpdate, RolePosition
from src.services.ordering import verify_scoped_ids

logger = logging.getLogger(__name__)


class OrgRoleService:
    """Service for the company org chart.

    Roles form a forest through ``parent_id``; updates never introduce a cycle.
    """

    def __init__(self) -> None:
        """Initialize org role service with Supabase client."""
        self.client = get_supabase_client()

    async def list_roles(self, company_id: UUID) -> list[dict[str, Any]]:
        return (
            self.client.table("org_roles")
            .select("*")
            .eq("company_id", str(company_id))
            .order("created_at")
            .execute()
        ).data or []

    async def get_role(self, company_id: UUID, role_id: UUID | str) -> dict[str, Any]:
        """Get a role scoped to the company.

        Raises:
            NotFoundError: If absent or in another company.
        """
        response = (
            self.client.table("org_roles")
            .select("*")
            .eq("id", str(role_id))
            .eq("company_id", str(company_id))
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            raise NotFoundError("Role not found")
        return response.data

    async def create_role(self, company_id: UUID, data: OrgRoleCreate) -> dict[str, Any]:
        """Add a role, optionally under a parent in the same company."""
        if data.parent_id:
            await self._verify_parent(company_id, data.parent_id)

        row = data.model_dump(mode="json")
        row["company_id"] = str(company_id)
        response = self.client.table("org_roles").insert(row).execute()
        role = response.data[0]
        logger.info("Org role %s created in company %s", role["id"], company_id)
        return role

    async def update_role(self, company_id: UUID, role_id: UUID, data: OrgRoleUpdate) -> dict[str, Any]:
        """Edit a role or move it under another parent.

        Raises:
            ValidationError: If the new parent is the role itself, one of its
                descendants, or not in this company.
        """
        role = await self.get_role(company_id, role_id)

        update = data.model_dump(exclude_unset=True, mode="json")
        if not update:
            raise ValidationError("Nothing to update")

        parent_id = update.get("parent_id")
        if parent_id:
            if parent_id == role["id"]:
                raise ValidationError("Role cannot be its own parent")
            await self._verify_parent(company_id, UUID(parent_id))
            if role["id"] in await self._ancestors(company_id, parent_id):
                raise ValidationError("Cannot set a descendant as parent")

        response = (
            self.client.table("org_roles")
            .update(update)
            .eq("id", role["id"])
            .execute()
        )
        return response.data[0]

    async def delete_role(self, company_id: UUID, role_id: UUID) -> None:
        """Delete a role; its direct reports move up to its parent."""
        role = await self.get_role(company_id, role_id)
        self.client.table("org_roles").update({"parent_id": role.get("parent_id")}).eq(
            "parent_id", role["id"]
        ).execute()
        self.client.table("org_roles").delete().eq("id", role["id"]).execute()
        logger.info("Org role %s deleted from company %s", role["id"], company_id)

    async def update_positions(self, company_id: UUID, positions: list[RolePosition]) -> list[dict[str, Any]]:
        """Save canvas positions for a set of roles."""
        ids = [str(p.id) for p in positions]
        verify_scoped_ids(self.client, "org_roles", "company_id", str(company_id), ids, "role")
        for position in positions:
            self.client.table("org_roles").update(
                {"position_x": position.x, "position_y": position.y}
            ).eq("id", str(position.id)).execute()
        return await self.list_roles(company_id)

    async def _verify_parent(self, company_id: UUID, parent_id: UUID) -> None:
        try:
            await self.get_role(company_id, parent_id)
        except NotFoundError:
            raise ValidationError("Parent role not found in this company") from None

    async def _ancestors(self, company_id: UUID, role_id: str) -> set[str]:
        """Ids on the path from ``role_id`` up to its root, inclusive."""
        parents = {r["id"]: r.get("parent_id") for r in await self.list_roles(company_id)}
        seen: set[str] = set()
        current: str | None = role_id
        while current and current not in seen:
            seen.add(current)
            current = parents.get(current)
        return seen
