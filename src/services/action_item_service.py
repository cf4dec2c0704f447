"""Action item business logic service."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import NotFoundError, ValidationError
from src.core.supabase import get_supabase_client
from src.models.action_item import ActionItemStatus, Priority
from src.realtime.events import (
    ACTION_ITEM_CREATED,
    ACTION_ITEM_DELETED,
    ACTION_ITEM_REORDERED,
    ACTION_ITEM_UPDATED,
)
from src.realtime.notifier import NoopRoomNotifier, RoomNotifier, notify_room
from src.schemas.action_item import ActionItemCreate, ActionItemUpdate
from src.services.company_service import CompanyService
from src.services.ordering import apply_order, next_order, verify_scoped_ids

logger = logging.getLogger(__name__)

# Statuses that stop an item from becoming OVERDUE.
SETTLED_STATUSES = {ActionItemStatus.COMPLETED.value, ActionItemStatus.OVERDUE.value}


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class ActionItemService:
    """Service for company action items.

    Items raised in a meeting are pushed to that meeting's room when they
    change. Items past their due date are flipped to OVERDUE when read.
    """

    def __init__(self, notifier: RoomNotifier | None = None) -> None:
        """Initialize action item service with Supabase client and room notifier."""
        self.client = get_supabase_client()
        self.notifier = notifier or NoopRoomNotifier()

    async def list_items(
        self,
        company_id: UUID,
        status: ActionItemStatus | None = None,
        priority: Priority | None = None,
        assignee_id: str | None = None,
        meeting_id: UUID | None = None,
        involving_user_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """List a company's action items in order.

        Args:
            company_id: The company's UUID.
            status: Only items in this status.
            priority: Only items with this priority.
            assignee_id: Only items assigned to this user.
            meeting_id: Only items raised in this meeting.
            involving_user_id: Only items this user created or is assigned.
        """
        query = (
            self.client.table("action_items")
            .select("*")
            .eq("company_id", str(company_id))
        )
        if priority:
            query = query.eq("priority", priority.value)
        if assignee_id:
            query = query.eq("assignee_id", assignee_id)
        if meeting_id:
            query = query.eq("meeting_id", str(meeting_id))

        items = query.order("order").execute().data or []
        self._mark_overdue(items)

        if status:
            items = [i for i in items if i["status"] == status.value]
        if involving_user_id:
            items = [
                i for i in items
                if involving_user_id in (i.get("assignee_id"), i.get("created_by_id"))
            ]
        return items

    async def get_item(self, company_id: UUID, item_id: UUID) -> dict[str, Any]:
        """Get an action item scoped to the company.

        Raises:
            NotFoundError: If absent or in another company.
        """
        response = (
            self.client.table("action_items")
            .select("*")
            .eq("id", str(item_id))
            .eq("company_id", str(company_id))
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            raise NotFoundError("Action item not found")
        item = response.data
        self._mark_overdue([item])
        return item

    async def create_item(
        self,
        company_id: UUID,
        data: ActionItemCreate,
        user_id: str,
    ) -> dict[str, Any]:
        """Create an action item at the end of the company's list.

        Raises:
            ValidationError: If the assignee is not an active member, or the
                meeting or agenda item is not in this company.
        """
        if data.assignee_id:
            await self._verify_assignee(company_id, data.assignee_id)
        await self._verify_meeting_refs(company_id, data.meeting_id, data.agenda_item_id)

        response = (
            self.client.table("action_items")
            .insert(
                {
                    "company_id": str(company_id),
                    "meeting_id": str(data.meeting_id) if data.meeting_id else None,
                    "agenda_item_id": str(data.agenda_item_id) if data.agenda_item_id else None,
                    "title": data.title,
                    "description": data.description,
                    "assignee_id": data.assignee_id,
                    "due_date": data.due_date.isoformat() if data.due_date else None,
                    "priority": data.priority.value,
                    "status": data.status.value,
                    "order": next_order(self.client, "action_items", "company_id", str(company_id)),
                    "created_by_id": user_id,
                }
            )
            .execute()
        )
        item = response.data[0]
        logger.info("Action item %s created in company %s", item["id"], company_id)

        await self._notify(item, ACTION_ITEM_CREATED, item)
        return item

    async def update_item(
        self,
        company_id: UUID,
        item_id: UUID,
        data: ActionItemUpdate,
    ) -> dict[str, Any]:
        """Edit an action item's details."""
        item = await self.get_item(company_id, item_id)

        update = data.model_dump(exclude_unset=True, mode="json")
        if not update:
            raise ValidationError("Nothing to update")
        if update.get("assignee_id"):
            await self._verify_assignee(company_id, update["assignee_id"])

        response = (
            self.client.table("action_items")
            .update(update)
            .eq("id", item["id"])
            .execute()
        )
        item = response.data[0]

        await self._notify(item, ACTION_ITEM_UPDATED, item)
        return item

    async def update_status(
        self,
        company_id: UUID,
        item_id: UUID,
        status: ActionItemStatus,
    ) -> dict[str, Any]:
        """Change an action item's status."""
        item = await self.get_item(company_id, item_id)

        response = (
            self.client.table("action_items")
            .update({"status": status.value})
            .eq("id", item["id"])
            .execute()
        )
        item = response.data[0]

        await self._notify(item, ACTION_ITEM_UPDATED, item)
        return item

    async def delete_item(self, company_id: UUID, item_id: UUID) -> None:
        """Delete an action item."""
        item = await self.get_item(company_id, item_id)
        self.client.table("action_items").delete().eq("id", item["id"]).execute()
        await self._notify(item, ACTION_ITEM_DELETED, {"id": item["id"]})

    async def reorder_items(self, company_id: UUID, item_ids: list[UUID]) -> list[dict[str, Any]]:
        """Set each item's order to its position in ``item_ids``."""
        ids = [str(i) for i in item_ids]
        verify_scoped_ids(self.client, "action_items", "company_id", str(company_id), ids, "action item")
        apply_order(self.client, "action_items", ids)

        items = await self.list_items(company_id)
        meeting_ids = {i["meeting_id"] for i in items if i["id"] in ids and i.get("meeting_id")}
        for meeting_id in meeting_ids:
            await notify_room(self.notifier, meeting_id, ACTION_ITEM_REORDERED, {"actionItemIds": ids})
        return items

    async def _notify(self, item: dict[str, Any], event: str, payload: dict[str, Any]) -> None:
        if item.get("meeting_id"):
            await notify_room(self.notifier, item["meeting_id"], event, payload)

    def _mark_overdue(self, items: list[dict[str, Any]]) -> None:
        now = datetime.now(timezone.utc)
        overdue = [
            i for i in items
            if i.get("due_date") and i["status"] not in SETTLED_STATUSES and _parse(i["due_date"]) < now
        ]
        if not overdue:
            return

        ids = [i["id"] for i in overdue]
        self.client.table("action_items").update(
            {"status": ActionItemStatus.OVERDUE.value}
        ).in_("id", ids).execute()
        for item in overdue:
            item["status"] = ActionItemStatus.OVERDUE.value
        logger.info("Marked %d action items overdue", len(ids))

    async def _verify_assignee(self, company_id: UUID, assignee_id: str) -> None:
        if not await CompanyService().get_membership(company_id, assignee_id):
            raise ValidationError("Assignee is not a member of this company")

    async def _verify_meeting_refs(
        self,
        company_id: UUID,
        meeting_id: UUID | None,
        agenda_item_id: UUID | None,
    ) -> None:
        if agenda_item_id and not meeting_id:
            raise ValidationError("agenda_item_id requires meeting_id")
        if not meeting_id:
            return

        meeting = (
            self.client.table("meetings")
            .select("id")
            .eq("id", str(meeting_id))
            .eq("company_id", str(company_id))
            .maybe_single()
            .execute()
        )
        if not meeting or not meeting.data:
            raise ValidationError("Meeting not found in this company")

        if agenda_item_id:
            item = (
                self.client.table("agenda_items")
                .select("id")
                .eq("id", str(agenda_item_id))
                .eq("meeting_id", str(meeting_id))
                .maybe_single()
                .execute()
            )
            if not item or not item.data:
                raise ValidationError("Agenda item not found in this meeting")
