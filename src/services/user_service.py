"""User records mirrored from the identity provider."""

import logging
from typing import Any

from src.core.supabase import get_supabase_client
from src.models.company import MembershipStatus
from src.services.invitation_service import InvitationService

logger = logging.getLogger(__name__)


class UserService:
    """Service keeping the ``users`` table in step with the identity provider.

    Rows are written from identity webhooks and, as a fallback, provisioned
    just in time the first time an authenticated user reaches the API.
    """

    def __init__(self) -> None:
        """Initialize user service with Supabase client."""
        self.client = get_supabase_client()

    async def get_user(self, user_id: str) -> dict[str, Any] | None:
        response = (
            self.client.table("users")
            .select("*")
            .eq("id", user_id)
            .maybe_single()
            .execute()
        )
        return response.data if response and response.data else None

    async def ensure_user(self, user_id: str, email: str | None) -> None:
        """Create the user row if it is missing.

        Best-effort: a failure is logged and never blocks the request that
        triggered it, since the webhook may still create the row later.
        """
        try:
            if await self.get_user(user_id):
                return
            if not email:
                logger.warning("User %s has no email claim, skipping provisioning", user_id)
                return
            self.client.table("users").upsert(
                {"id": user_id, "email": email.lower()},
                on_conflict="id",
                ignore_duplicates=True,
            ).execute()
            logger.info("Provisioned user %s", user_id)
        except Exception as e:
            logger.warning("Failed to provision user %s: %s", user_id, e)

    async def upsert_from_identity(self, data: dict[str, Any]) -> dict[str, Any] | None:
        """Create or update a user from an identity provider payload.

        Returns:
            dict | None: The stored row, or None if the payload has no email.
        """
        email = _primary_email(data)
        if not email:
            logger.warning("User %s has no email address", data.get("id"))
            return None

        response = (
            self.client.table("users")
            .upsert(
                {
                    "id": data["id"],
                    "email": email.lower(),
                    "first_name": data.get("first_name"),
                    "last_name": data.get("last_name"),
                    "image_url": data.get("image_url"),
                },
                on_conflict="id",
            )
            .execute()
        )
        return response.data[0] if response.data else None

    async def handle_user_created(self, data: dict[str, Any]) -> None:
        """Store the new user and accept invitations waiting for their email."""
        user = await self.upsert_from_identity(data)
        if not user:
            return
        accepted = await InvitationService().accept_pending_for_email(user["email"], user["id"])
        logger.info("User %s created, %d pending invitations accepted", user["id"], accepted)

    async def handle_user_deleted(self, user_id: str) -> None:
        """Mark every membership of the user FORMER. Rows are kept for audit."""
        self.client.table("company_members").update(
            {"status": MembershipStatus.FORMER.value}
        ).eq("user_id", user_id).execute()
        logger.info("User %s marked as former in all companies", user_id)


def _primary_email(data: dict[str, Any]) -> str | None:
    addresses = data.get("email_addresses") or []
    primary_id = data.get("primary_email_address_id")
    for address in addresses:
        if address.get("id") == primary_id:
            return address.get("email_address")
    return addresses[0].get("email_address") if addresses else None
