"""Company and membership business logic service."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import AuthorizationError, NotFoundError, ValidationError
from src.core.supabase import get_supabase_client
from src.models.company import MemberRole, MembershipStatus
from src.schemas.company import CompanyCreate, CompanyUpdate, MemberUpdate

logger = logging.getLogger(__name__)


class CompanyService:
    """Service for managing companies and their members."""

    def __init__(self) -> None:
        """Initialize company service with Supabase client."""
        self.client = get_supabase_client()

    async def create_company(self, data: CompanyCreate, owner_id: str) -> dict[str, Any]:
        """Create a new company and add the creator as OWNER.

        Args:
            data: Company creation data.
            owner_id: User id of the creator.

        Returns:
            dict: The created company data.
        """
        company_response = (
            self.client.table("companies")
            .insert({"name": data.name})
            .execute()
        )

        company = company_response.data[0]

        member_data = {
            "company_id": company["id"],
            "user_id": owner_id,
            "role": MemberRole.OWNER.value,
            "custom_role_id": None,
            "status": MembershipStatus.ACTIVE.value,
            "joined_at": datetime.now(timezone.utc).isoformat(),
        }

        self.client.table("company_members").insert(member_data).execute()
        logger.info("Company %s created by %s", company["id"], owner_id)

        return company

    async def get_company(self, company_id: UUID | str) -> dict[str, Any] | None:
        """Get a company by ID.

        Args:
            company_id: The company's UUID.

        Returns:
            dict | None: The company data or None if not found.
        """
        response = (
            self.client.table("companies")
            .select("*")
            .eq("id", str(company_id))
            .maybe_single()
            .execute()
        )

        return response.data if response and response.data else None

    async def update_company(self, company_id: UUID, data: CompanyUpdate) -> dict[str, Any]:
        """Update company settings.

        Raises:
            NotFoundError: If the company does not exist.
        """
        response = (
            self.client.table("companies")
            .update({"name": data.name})
            .eq("id", str(company_id))
            .execute()
        )
        if not response.data:
            raise NotFoundError("Company not found")
        return response.data[0]

    async def list_user_companies(self, user_id: str) -> list[dict[str, Any]]:
        """List companies where the user holds an ACTIVE membership.

        Each company dict carries the caller's ``role``.
        """
        memberships = (
            self.client.table("company_members")
            .select("company_id, role")
            .eq("user_id", user_id)
            .eq("status", MembershipStatus.ACTIVE.value)
            .execute()
        ).data or []

        if not memberships:
            return []

        roles = {m["company_id"]: m["role"] for m in memberships}
        companies = (
            self.client.table("companies")
            .select("*")
            .in_("id", list(roles))
            .order("name")
            .execute()
        ).data or []

        return [{**company, "role": roles.get(company["id"])} for company in companies]

    async def get_membership(self, company_id: UUID | str, user_id: str) -> dict[str, Any] | None:
        """Get a user's ACTIVE membership in a company."""
        response = (
            self.client.table("company_members")
            .select("*")
            .eq("company_id", str(company_id))
            .eq("user_id", user_id)
            .eq("status", MembershipStatus.ACTIVE.value)
            .maybe_single()
            .execute()
        )
        return response.data if response and response.data else None

    async def get_member(self, company_id: UUID | str, member_id: UUID | str) -> dict[str, Any]:
        """Get a membership by id, scoped to the company.

        Raises:
            NotFoundError: If absent or in another company.
        """
        response = (
            self.client.table("company_members")
            .select("*")
            .eq("id", str(member_id))
            .eq("company_id", str(company_id))
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            raise NotFoundError("Member not found")
        return response.data

    async def get_members(self, company_id: UUID | str, include_former: bool = False) -> list[dict[str, Any]]:
        """Get members of a company with their user records attached.

        Args:
            company_id: The company's UUID.
            include_former: Include FORMER memberships.

        Returns:
            list[dict]: Membership rows, each with a ``user`` key.
        """
        query = (
            self.client.table("company_members")
            .select("*")
            .eq("company_id", str(company_id))
        )
        if not include_former:
            query = query.eq("status", MembershipStatus.ACTIVE.value)

        members = query.order("joined_at").execute().data or []
        users = await self.get_users([m["user_id"] for m in members])

        return [{**m, "user": users.get(m["user_id"])} for m in members]

    async def get_users(self, user_ids: list[str]) -> dict[str, dict[str, Any]]:
        """Fetch user rows keyed by id."""
        if not user_ids:
            return {}
        response = (
            self.client.table("users")
            .select("id, email, first_name, last_name, image_url")
            .in_("id", list(set(user_ids)))
            .execute()
        )
        return {u["id"]: u for u in response.data or []}

    async def update_member(
        self,
        company_id: UUID,
        member_id: UUID,
        data: MemberUpdate,
        requester_id: str,
    ) -> dict[str, Any]:
        """Change a member's system role and/or custom role.

        Raises:
            NotFoundError: If the member or custom role is not in this company.
            AuthorizationError: If a non-owner touches an owner or grants OWNER.
        """
        member = await self.get_member(company_id, member_id)
        requester = await self.get_membership(company_id, requester_id)
        requester_is_owner = bool(requester) and requester["role"] == MemberRole.OWNER.value

        if member["role"] == MemberRole.OWNER.value and not requester_is_owner:
            raise AuthorizationError("Only owners can modify other owners")

        if data.role == MemberRole.OWNER and not requester_is_owner:
            raise AuthorizationError("Only owners can assign owner role")

        update: dict[str, Any] = {}
        if data.role is not None:
            update["role"] = data.role.value

        if "custom_role_id" in data.model_fields_set:
            if data.custom_role_id is not None:
                role = (
                    self.client.table("custom_roles")
                    .select("id")
                    .eq("id", str(data.custom_role_id))
                    .eq("company_id", str(company_id))
                    .maybe_single()
                    .execute()
                )
                if not role or not role.data:
                    raise NotFoundError("Custom role not found")
                update["custom_role_id"] = str(data.custom_role_id)
            else:
                update["custom_role_id"] = None

        if not update:
            raise ValidationError("Nothing to update")

        response = (
            self.client.table("company_members")
            .update(update)
            .eq("id", str(member_id))
            .execute()
        )
        logger.info("Member %s in company %s updated: %s", member_id, company_id, update)
        return response.data[0]

    async def remove_member(
        self,
        company_id: UUID,
        member_id: UUID,
        requester_id: str,
    ) -> dict[str, Any]:
        """Mark a member FORMER. Memberships are never hard-deleted.

        Raises:
            NotFoundError: If member not found.
            AuthorizationError: If a non-owner removes an owner.
            ValidationError: If removing yourself or the last owner.
        """
        member = await self.get_member(company_id, member_id)

        if member["user_id"] == requester_id:
            raise ValidationError("You cannot remove yourself from the company")

        if member["status"] != MembershipStatus.ACTIVE.value:
            raise NotFoundError("Member not found")

        if member["role"] == MemberRole.OWNER.value:
            requester = await self.get_membership(company_id, requester_id)
            if not requester or requester["role"] != MemberRole.OWNER.value:
                raise AuthorizationError("Only owners can remove other owners")

            owners = (
                self.client.table("company_members")
                .select("id", count="exact")
                .eq("company_id", str(company_id))
                .eq("role", MemberRole.OWNER.value)
                .eq("status", MembershipStatus.ACTIVE.value)
                .execute()
            )
            if (owners.count or 0) <= 1:
                raise ValidationError("Cannot remove the last owner of the company")

        response = (
            self.client.table("company_members")
            .update({"status": MembershipStatus.FORMER.value})
            .eq("id", str(member_id))
            .execute()
        )
        logger.info("Member %s in company %s marked FORMER", member_id, company_id)
        return response.data[0]
