"""Resolution business logic service."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import InvalidStateError, NotFoundError, ValidationError
from src.core.supabase import get_supabase_client
from src.models.resolution import ResolutionCategory, ResolutionStatus
from src.schemas.resolution import ResolutionCreate, ResolutionUpdate

logger = logging.getLogger(__name__)

# Fields frozen once a resolution has passed.
LOCKED_WHEN_PASSED = {"title", "content", "status"}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def format_number(year: int, sequence: int) -> str:
    """Format a resolution number, e.g. ``RES-2026-007``."""
    return f"RES-{year}-{sequence:03d}"


class ResolutionService:
    """Service for a company's numbered board resolutions."""

    def __init__(self) -> None:
        """Initialize resolution service with Supabase client."""
        self.client = get_supabase_client()

    async def list_resolutions(
        self,
        company_id: UUID,
        status: ResolutionStatus | None = None,
        category: ResolutionCategory | None = None,
        year: int | None = None,
    ) -> list[dict[str, Any]]:
        """List resolutions, newest first.

        Args:
            company_id: The company's UUID.
            status: Only resolutions in this status.
            category: Only resolutions in this category.
            year: Only resolutions numbered in this year.
        """
        query = (
            self.client.table("resolutions")
            .select("*")
            .eq("company_id", str(company_id))
        )
        if status:
            query = query.eq("status", status.value)
        if category:
            query = query.eq("category", category.value)
        if year:
            query = query.ilike("number", f"RES-{year}-%")

        return query.order("created_at", desc=True).execute().data or []

    async def get_resolution(self, company_id: UUID, resolution_id: UUID) -> dict[str, Any]:
        """Get a resolution scoped to the company.

        Raises:
            NotFoundError: If absent or in another company.
        """
        response = (
            self.client.table("resolutions")
            .select("*")
            .eq("id", str(resolution_id))
            .eq("company_id", str(company_id))
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            raise NotFoundError("Resolution not found")
        return response.data

    async def next_number(self, company_id: UUID, year: int | None = None) -> str:
        """Return the number the next resolution in ``year`` will get.

        Numbers run per company per calendar year, starting at 001.
        """
        year = year or datetime.now(timezone.utc).year
        latest = (
            self.client.table("resolutions")
            .select("number")
            .eq("company_id", str(company_id))
            .ilike("number", f"RES-{year}-%")
            .order("number", desc=True)
            .limit(1)
            .execute()
        )
        sequence = 1
        if latest.data:
            sequence = int(latest.data[0]["number"].rsplit("-", 1)[1]) + 1
        return format_number(year, sequence)

    async def create_resolution(self, company_id: UUID, data: ResolutionCreate) -> dict[str, Any]:
        """Create a resolution with the next number for the current year.

        Raises:
            ValidationError: If the decision is not in one of this company's meetings.
        """
        if data.decision_id:
            await self._verify_decision(company_id, data.decision_id)

        response = (
            self.client.table("resolutions")
            .insert(
                {
                    "company_id": str(company_id),
                    "decision_id": str(data.decision_id) if data.decision_id else None,
                    "number": await self.next_number(company_id),
                    "title": data.title,
                    "content": data.content,
                    "category": data.category.value,
                    "status": data.status.value,
                    "effective_date": data.effective_date.isoformat() if data.effective_date else None,
                }
            )
            .execute()
        )
        resolution = response.data[0]
        logger.info("Resolution %s created in company %s", resolution["number"], company_id)
        return resolution

    async def update_resolution(
        self,
        company_id: UUID,
        resolution_id: UUID,
        data: ResolutionUpdate,
    ) -> dict[str, Any]:
        """Edit a resolution.

        Raises:
            InvalidStateError: If the resolution has passed and the edit
                touches its title, content or status.
        """
        resolution = await self.get_resolution(company_id, resolution_id)

        update = data.model_dump(exclude_unset=True, mode="json")
        if not update:
            raise ValidationError("Nothing to update")
        if resolution["status"] == ResolutionStatus.PASSED.value and LOCKED_WHEN_PASSED & update.keys():
            raise InvalidStateError("A passed resolution cannot be changed")
        if update.get("decision_id"):
            await self._verify_decision(company_id, UUID(update["decision_id"]))
        update["updated_at"] = _now()

        response = (
            self.client.table("resolutions")
            .update(update)
            .eq("id", resolution["id"])
            .execute()
        )
        return response.data[0]

    async def update_status(
        self,
        company_id: UUID,
        resolution_id: UUID,
        status: ResolutionStatus,
    ) -> dict[str, Any]:
        """Move a resolution to another status. PASSED is final."""
        resolution = await self.get_resolution(company_id, resolution_id)
        if resolution["status"] == ResolutionStatus.PASSED.value:
            raise InvalidStateError("A passed resolution cannot change status")

        response = (
            self.client.table("resolutions")
            .update({"status": status.value, "updated_at": _now()})
            .eq("id", resolution["id"])
            .execute()
        )
        logger.info("Resolution %s moved to %s", resolution["number"], status.value)
        return response.data[0]

    async def delete_resolution(self, company_id: UUID, resolution_id: UUID) -> None:
        """Delete a draft resolution.

        Raises:
            InvalidStateError: If the resolution is no longer a draft.
        """
        resolution = await self.get_resolution(company_id, resolution_id)
        if resolution["status"] != ResolutionStatus.DRAFT.value:
            raise InvalidStateError("Only draft resolutions can be deleted")
        self.client.table("resolutions").delete().eq("id", resolution["id"]).execute()

    async def _verify_decision(self, company_id: UUID, decision_id: UUID) -> None:
        decision = (
            self.client.table("decisions")
            .select("meeting_id")
            .eq("id", str(decision_id))
            .maybe_single()
            .execute()
        )
        if decision and decision.data:
            meeting = (
                self.client.table("meetings")
                .select("id")
                .eq("id", decision.data["meeting_id"])
                .eq("company_id", str(company_id))
                .maybe_single()
                .execute()
            )
            if meeting and meeting.data:
                return
        raise ValidationError("Decision not found in this company")
