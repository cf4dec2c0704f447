"""OKR business logic service."""

import logging
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import InvalidStateError, NotFoundError, ValidationError
from src.core.supabase import get_supabase_client
from src.models.okr import MetricType, OkrPeriodStatus
from src.schemas.okr import (
    KeyResultCreate,
    KeyResultUpdate,
    ObjectiveCreate,
    ObjectiveUpdate,
    OkrPeriodCreate,
    OkrPeriodUpdate,
)
from src.services.ordering import next_order

logger = logging.getLogger(__name__)


def key_result_progress(key_result: dict[str, Any]) -> float:
    """Percent complete for a key result, clamped to 0..100."""
    current = float(key_result["current_value"])
    if key_result["metric_type"] == MetricType.BOOLEAN.value:
        return 100.0 if current >= 1 else 0.0

    start = float(key_result["start_value"])
    target = float(key_result["target_value"])
    if target == start:
        return 100.0 if current >= target else 0.0

    if key_result.get("inverse"):
        progress = (start - current) / (start - target) * 100
    else:
        progress = (current - start) / (target - start) * 100
    return min(100.0, max(0.0, progress))


def average(values: list[float]) -> float:
    """Mean of ``values``, or 0 when there are none."""
    return sum(values) / len(values) if values else 0.0


class OkrService:
    """Service for OKR periods, their objectives and key results.

    Progress is derived on read: key results from their values, objectives
    from their key results and a period's score from its objectives. Nothing
    under a CLOSED period can be written until it is reopened.
    """

    def __init__(self) -> None:
        """Initialize OKR service with Supabase client."""
        self.client = get_supabase_client()

    # Periods

    async def list_periods(self, company_id: UUID) -> list[dict[str, Any]]:
        """List a company's periods, latest start first, each with its score."""
        periods = (
            self.client.table("okr_periods")
            .select("*")
            .eq("company_id", str(company_id))
            .order("start_date", desc=True)
            .execute()
        ).data or []
        for period in periods:
            period["score"] = average([o["progress"] for o in self._objectives(period["id"])])
        return periods

    async def get_period(self, company_id: UUID, period_id: UUID | str) -> dict[str, Any]:
        """Get a period with its objectives, key results and progress.

        Raises:
            NotFoundError: If absent or in another company.
        """
        period = self._period_row(company_id, period_id)
        period["objectives"] = self._objectives(period["id"])
        period["score"] = average([o["progress"] for o in period["objectives"]])
        return period

    async def create_period(self, company_id: UUID, data: OkrPeriodCreate) -> dict[str, Any]:
        """Open a new period."""
        response = (
            self.client.table("okr_periods")
            .insert(
                {
                    "company_id": str(company_id),
                    "name": data.name,
                    "start_date": data.start_date.isoformat(),
                    "end_date": data.end_date.isoformat(),
                    "status": OkrPeriodStatus.OPEN.value,
                }
            )
            .execute()
        )
        period = response.data[0]
        logger.info("OKR period %s created in company %s", period["id"], company_id)
        return await self.get_period(company_id, period["id"])

    async def update_period(self, company_id: UUID, period_id: UUID, data: OkrPeriodUpdate) -> dict[str, Any]:
        """Rename or re-date an open period.

        Raises:
            InvalidStateError: If the period is closed.
            ValidationError: If the resulting end date is not after the start.
        """
        period = self._open_period(company_id, period_id)

        update = data.model_dump(exclude_unset=True, mode="json")
        if not update:
            raise ValidationError("Nothing to update")
        start = update.get("start_date", period["start_date"])
        end = update.get("end_date", period["end_date"])
        if str(end) <= str(start):
            raise ValidationError("end_date must be after start_date")

        self.client.table("okr_periods").update(update).eq("id", period["id"]).execute()
        return await self.get_period(company_id, period["id"])

    async def set_period_status(
        self,
        company_id: UUID,
        period_id: UUID,
        status: OkrPeriodStatus,
    ) -> dict[str, Any]:
        """Close or reopen a period."""
        period = self._period_row(company_id, period_id)
        self.client.table("okr_periods").update({"status": status.value}).eq("id", period["id"]).execute()
        logger.info("OKR period %s set to %s", period["id"], status.value)
        return await self.get_period(company_id, period["id"])

    async def delete_period(self, company_id: UUID, period_id: UUID) -> None:
        """Delete a period with its objectives and key results."""
        period = self._period_row(company_id, period_id)
        objective_ids = [
            o["id"]
            for o in self.client.table("objectives").select("id").eq("period_id", period["id"]).execute().data or []
        ]
        if objective_ids:
            self.client.table("key_results").delete().in_("objective_id", objective_ids).execute()
            self.client.table("objectives").delete().in_("id", objective_ids).execute()
        self.client.table("okr_periods").delete().eq("id", period["id"]).execute()

    # Objectives

    async def create_objective(self, company_id: UUID, period_id: UUID, data: ObjectiveCreate) -> dict[str, Any]:
        """Add an objective at the end of an open period."""
        period = self._open_period(company_id, period_id)
        response = (
            self.client.table("objectives")
            .insert(
                {
                    "period_id": period["id"],
                    "title": data.title,
                    "order": next_order(self.client, "objectives", "period_id", period["id"]),
                }
            )
            .execute()
        )
        return self._with_progress(response.data[0])

    async def update_objective(self, company_id: UUID, objective_id: UUID, data: ObjectiveUpdate) -> dict[str, Any]:
        objective = self._objective_row(company_id, objective_id, writable=True)
        response = (
            self.client.table("objectives")
            .update({"title": data.title})
            .eq("id", objective["id"])
            .execute()
        )
        return self._with_progress(response.data[0])

    async def delete_objective(self, company_id: UUID, objective_id: UUID) -> None:
        """Delete an objective and its key results."""
        objective = self._objective_row(company_id, objective_id, writable=True)
        self.client.table("key_results").delete().eq("objective_id", objective["id"]).execute()
        self.client.table("objectives").delete().eq("id", objective["id"]).execute()

    # Key results

    async def create_key_result(
        self,
        company_id: UUID,
        objective_id: UUID,
        data: KeyResultCreate,
    ) -> dict[str, Any]:
        """Add a key result; its current value starts at the start value unless given."""
        objective = self._objective_row(company_id, objective_id, writable=True)
        response = (
            self.client.table("key_results")
            .insert(
                {
                    "objective_id": objective["id"],
                    "title": data.title,
                    "metric_type": data.metric_type.value,
                    "start_value": data.start_value,
                    "target_value": data.target_value,
                    "current_value": data.start_value if data.current_value is None else data.current_value,
                    "inverse": data.inverse,
                    "comment": data.comment,
                    "order": next_order(self.client, "key_results", "objective_id", objective["id"]),
                }
            )
            .execute()
        )
        key_result = response.data[0]
        key_result["progress"] = key_result_progress(key_result)
        return key_result

    async def update_key_result(
        self,
        company_id: UUID,
        key_result_id: UUID,
        data: KeyResultUpdate,
    ) -> dict[str, Any]:
        """Edit a key result or record its current value."""
        key_result = self._key_result_row(company_id, key_result_id)

        update = data.model_dump(exclude_unset=True, mode="json")
        if not update:
            raise ValidationError("Nothing to update")

        response = (
            self.client.table("key_results")
            .update(update)
            .eq("id", key_result["id"])
            .execute()
        )
        key_result = response.data[0]
        key_result["progress"] = key_result_progress(key_result)
        return key_result

    async def delete_key_result(self, company_id: UUID, key_result_id: UUID) -> None:
        key_result = self._key_result_row(company_id, key_result_id)
        self.client.table("key_results").delete().eq("id", key_result["id"]).execute()

    # Lookups

    def _period_row(self, company_id: UUID, period_id: UUID | str) -> dict[str, Any]:
        response = (
            self.client.table("okr_periods")
            .select("*")
            .eq("id", str(period_id))
            .eq("company_id", str(company_id))
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            raise NotFoundError("OKR period not found")
        return response.data

    def _open_period(self, company_id: UUID, period_id: UUID | str) -> dict[str, Any]:
        period = self._period_row(company_id, period_id)
        if period["status"] == OkrPeriodStatus.CLOSED.value:
            raise InvalidStateError("OKR period is closed")
        return period

    def _objective_row(self, company_id: UUID, objective_id: UUID, writable: bool = False) -> dict[str, Any]:
        response = (
            self.client.table("objectives")
            .select("*")
            .eq("id", str(objective_id))
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            raise NotFoundError("Objective not found")
        try:
            if writable:
                self._open_period(company_id, response.data["period_id"])
            else:
                self._period_row(company_id, response.data["period_id"])
        except NotFoundError:
            raise NotFoundError("Objective not found") from None
        return response.data

    def _key_result_row(self, company_id: UUID, key_result_id: UUID) -> dict[str, Any]:
        response = (
            self.client.table("key_results")
            .select("*")
            .eq("id", str(key_result_id))
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            raise NotFoundError("Key result not found")
        try:
            self._objective_row(company_id, response.data["objective_id"], writable=True)
        except NotFoundError:
            raise NotFoundError("Key result not found") from None
        return response.data

    def _objectives(self, period_id: str) -> list[dict[str, Any]]:
        objectives = (
            self.client.table("objectives")
            .select("*")
            .eq("period_id", period_id)
            .order("order")
            .execute()
        ).data or []
        return [self._with_progress(o) for o in objectives]

    def _with_progress(self, objective: dict[str, Any]) -> dict[str, Any]:
        key_results = (
            self.client.table("key_results")
            .select("*")
            .eq("objective_id", objective["id"])
            .order("order")
            .execute()
        ).data or []
        for key_result in key_results:
            key_result["progress"] = key_result_progress(key_result)
        objective["key_results"] = key_results
        objective["progress"] = average([k["progress"] for k in key_results])
        return objective
