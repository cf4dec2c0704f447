"""Invitation business logic service."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import ConflictError, NotFoundError, ValidationError
from src.core.config import get_settings
from src.core.supabase import get_supabase_client
from src.models.company import InvitationStatus, MembershipStatus
from src.schemas.company import InvitationCreate

logger = logging.getLogger(__name__)


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class InvitationService:
    """Service for managing company invitations."""

    def __init__(self) -> None:
        """Initialize invitation service with Supabase client."""
        self.client = get_supabase_client()
        self.expiration_days = get_settings().invitation_expiration_days

    async def create_invitation(
        self,
        company_id: UUID,
        data: InvitationCreate,
        invited_by: str,
    ) -> dict[str, Any]:
        """Create a new invitation to join a company.

        Args:
            company_id: The company's UUID.
            data: Invitation creation data.
            invited_by: User id of the inviter.

        Returns:
            dict: The created invitation data.

        Raises:
            ConflictError: If the email already belongs to an active member or
                has a pending invitation.
            NotFoundError: If the custom role is not in this company.
        """
        email = data.email.lower()

        user = (
            self.client.table("users")
            .select("id")
            .eq("email", email)
            .maybe_single()
            .execute()
        )
        if user and user.data:
            member = (
                self.client.table("company_members")
                .select("id")
                .eq("company_id", str(company_id))
                .eq("user_id", user.data["id"])
                .eq("status", MembershipStatus.ACTIVE.value)
                .execute()
            )
            if member.data:
                raise ConflictError("User is already a member of this company")

        pending = (
            self.client.table("invitations")
            .select("id")
            .eq("company_id", str(company_id))
            .eq("email", email)
            .eq("status", InvitationStatus.PENDING.value)
            .execute()
        )
        if pending.data:
            raise ConflictError("An invitation is already pending for this email")

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

        expires_at = datetime.now(timezone.utc) + timedelta(days=self.expiration_days)

        invitation_data = {
            "company_id": str(company_id),
            "email": email,
            "role": data.role.value,
            "custom_role_id": str(data.custom_role_id) if data.custom_role_id else None,
            "invited_by": invited_by,
            "status": InvitationStatus.PENDING.value,
            "expires_at": expires_at.isoformat(),
            "accepted_at": None,
        }

        response = (
            self.client.table("invitations")
            .insert(invitation_data)
            .execute()
        )
        logger.info("Invitation created for %s to company %s", email, company_id)
        return response.data[0]

    async def get_invitation(self, invitation_id: UUID) -> dict[str, Any] | None:
        """Get an invitation by ID.

        Args:
            invitation_id: The invitation's UUID.

        Returns:
            dict | None: The invitation data or None if not found.
        """
        response = (
            self.client.table("invitations")
            .select("*")
            .eq("id", str(invitation_id))
            .maybe_single()
            .execute()
        )

        return response.data if response and response.data else None

    async def list_company_invitations(
        self,
        company_id: UUID,
        status: InvitationStatus | None = None,
    ) -> list[dict[str, Any]]:
        """List all invitations for a company.

        Args:
            company_id: The company's UUID.
            status: Optional filter by invitation status.

        Returns:
            list[dict]: List of invitation data.
        """
        query = (
            self.client.table("invitations")
            .select("*")
            .eq("company_id", str(company_id))
        )

        if status:
            query = query.eq("status", status.value)

        response = query.order("created_at", desc=True).execute()

        return response.data or []

    async def list_user_invitations(self, email: str) -> list[dict[str, Any]]:
        """List all pending invitations for a user's email, with company names.

        Args:
            email: The user's email address.

        Returns:
            list[dict]: Pending invitations, each with ``company_name``.
        """
        invitations = (
            self.client.table("invitations")
            .select("*")
            .eq("email", email.lower())
            .eq("status", InvitationStatus.PENDING.value)
            .order("created_at", desc=True)
            .execute()
        ).data or []

        if not invitations:
            return []

        companies = (
            self.client.table("companies")
            .select("id, name")
            .in_("id", list({i["company_id"] for i in invitations}))
            .execute()
        ).data or []
        names = {c["id"]: c["name"] for c in companies}

        return [{**i, "company_name": names.get(i["company_id"], "Unknown")} for i in invitations]

    async def accept_invitation(
        self,
        invitation_id: UUID,
        user_id: str,
        user_email: str,
    ) -> dict[str, Any]:
        """Accept an invitation and join the company.

        A FORMER membership of the same user is reactivated rather than
        duplicated, keeping one membership per (user, company).

        Args:
            invitation_id: The invitation's UUID.
            user_id: The accepting user's id.
            user_email: The email of the accepting user.

        Returns:
            dict: The updated invitation data.

        Raises:
            NotFoundError: If invitation not found.
            ValidationError: If invitation expired, already used, or email mismatch.
            ConflictError: If the user is already an active member.
        """
        invitation = await self.get_invitation(invitation_id)

        if not invitation:
            raise NotFoundError("Invitation not found")

        if invitation["email"].lower() != user_email.lower():
            raise ValidationError("This invitation is for a different email address")

        if invitation["status"] != InvitationStatus.PENDING.value:
            raise ValidationError(f"Invitation has already been {invitation['status']}")

        if datetime.now(timezone.utc) > _parse(invitation["expires_at"]):
            self.client.table("invitations").update(
                {"status": InvitationStatus.EXPIRED.value}
            ).eq("id", str(invitation_id)).execute()

            raise ValidationError("Invitation has expired")

        await self._join_company(invitation, user_id)

        now = datetime.now(timezone.utc)
        response = (
            self.client.table("invitations")
            .update({
                "status": InvitationStatus.ACCEPTED.value,
                "accepted_at": now.isoformat(),
            })
            .eq("id", str(invitation_id))
            .execute()
        )

        logger.info("Invitation %s accepted by %s", invitation_id, user_id)
        return response.data[0]

    async def accept_pending_for_email(self, email: str, user_id: str) -> int:
        """Accept every unexpired pending invitation addressed to ``email``.

        Called when the identity provider reports a new user. Invitations the
        user cannot accept are skipped.

        Returns:
            int: Number of invitations accepted.
        """
        pending = (
            self.client.table("invitations")
            .select("*")
            .eq("email", email.lower())
            .eq("status", InvitationStatus.PENDING.value)
            .execute()
        ).data or []

        accepted = 0
        for invitation in pending:
            try:
                await self.accept_invitation(UUID(invitation["id"]), user_id, email)
                accepted += 1
            except (ConflictError, ValidationError) as e:
                logger.info("Skipped invitation %s for %s: %s", invitation["id"], email, e.message)
        return accepted

    async def decline_invitation(self, invitation_id: UUID, user_email: str) -> dict[str, Any]:
        """Decline an invitation.

        Args:
            invitation_id: The invitation's UUID.
            user_email: The email of the declining user.

        Returns:
            dict: The updated invitation data.

        Raises:
            NotFoundError: If invitation not found.
            ValidationError: If invitation is not pending or email mismatch.
        """
        invitation = await self.get_invitation(invitation_id)

        if not invitation:
            raise NotFoundError("Invitation not found")

        if invitation["email"].lower() != user_email.lower():
            raise ValidationError("This invitation is for a different email address")

        if invitation["status"] != InvitationStatus.PENDING.value:
            raise ValidationError(f"Invitation has already been {invitation['status']}")

        response = (
            self.client.table("invitations")
            .update({"status": InvitationStatus.DECLINED.value})
            .eq("id", str(invitation_id))
            .execute()
        )

        return response.data[0]

    async def _join_company(self, invitation: dict[str, Any], user_id: str) -> None:
        existing = (
            self.client.table("company_members")
            .select("*")
            .eq("company_id", invitation["company_id"])
            .eq("user_id", user_id)
            .maybe_single()
            .execute()
        )

        membership = {
            "role": invitation["role"],
            "custom_role_id": invitation.get("custom_role_id"),
            "status": MembershipStatus.ACTIVE.value,
            "joined_at": datetime.now(timezone.utc).isoformat(),
        }

        if existing and existing.data:
            if existing.data["status"] == MembershipStatus.ACTIVE.value:
                raise ConflictError("You are already a member of this company")
            self.client.table("company_members").update(membership).eq("id", existing.data["id"]).execute()
            return

        self.client.table("company_members").insert(
            {"company_id": invitation["company_id"], "user_id": user_id, **membership}
        ).execute()
