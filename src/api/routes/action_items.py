"""Action item API routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.deps import Notifier, require_permission
from src.models.action_item import ActionItemStatus, Priority
from src.schemas.action_item import (
    ActionItemCreate,
    ActionItemResponse,
    ActionItemStatusUpdate,
    ActionItemUpdate,
)
from src.schemas.auth import UserContext
from src.schemas.meeting import ReorderRequest
from src.services.action_item_service import ActionItemService
from src.services.permission_service import PermissionService

router = APIRouter(prefix="/companies/{company_id}/action-items", tags=["action-items"])

ViewUser = Annotated[UserContext, Depends(require_permission("action_items.view", "action_items.view_all"))]
EditUser = Annotated[UserContext, Depends(require_permission("action_items.edit"))]


@router.get(
    "",
    response_model=list[ActionItemResponse],
    summary="List action items",
    description=(
        "Lists action items in order. Callers without action_items.view_all "
        "only see items they created or are assigned."
    ),
)
async def list_action_items(
    company_id: UUID,
    user: ViewUser,
    item_status: ActionItemStatus | None = None,
    priority: Priority | None = None,
    assignee_id: str | None = None,
    meeting_id: UUID | None = None,
) -> list[ActionItemResponse]:
    """List action items with optional filters."""
    sees_all = await PermissionService().has_permission(user.user_id, company_id, "action_items.view_all")
    items = await ActionItemService().list_items(
        company_id,
        status=item_status,
        priority=priority,
        assignee_id=assignee_id,
        meeting_id=meeting_id,
        involving_user_id=None if sees_all else user.user_id,
    )
    return [ActionItemResponse(**i) for i in items]


@router.post(
    "",
    response_model=ActionItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create action item",
)
async def create_action_item(
    company_id: UUID,
    data: ActionItemCreate,
    user: Annotated[UserContext, Depends(require_permission("action_items.create"))],
    notifier: Notifier,
) -> ActionItemResponse:
    """Create an action item, optionally linked to a meeting and agenda item."""
    item = await ActionItemService(notifier).create_item(company_id, data, user.user_id)
    return ActionItemResponse(**item)


@router.put("/reorder", response_model=list[ActionItemResponse], summary="Reorder action items")
async def reorder_action_items(
    company_id: UUID,
    data: ReorderRequest,
    user: EditUser,
    notifier: Notifier,
) -> list[ActionItemResponse]:
    items = await ActionItemService(notifier).reorder_items(company_id, data.ids)
    return [ActionItemResponse(**i) for i in items]


@router.get("/{item_id}", response_model=ActionItemResponse, summary="Get action item")
async def get_action_item(company_id: UUID, item_id: UUID, user: ViewUser) -> ActionItemResponse:
    item = await ActionItemService().get_item(company_id, item_id)
    return ActionItemResponse(**item)


@router.put("/{item_id}", response_model=ActionItemResponse, summary="Update action item")
async def update_action_item(
    company_id: UUID,
    item_id: UUID,
    data: ActionItemUpdate,
    user: EditUser,
    notifier: Notifier,
) -> ActionItemResponse:
    item = await ActionItemService(notifier).update_item(company_id, item_id, data)
    return ActionItemResponse(**item)


@router.put(
    "/{item_id}/status",
    response_model=ActionItemResponse,
    summary="Change action item status",
    description="Requires action_items.edit or action_items.complete.",
)
async def update_action_item_status(
    company_id: UUID,
    item_id: UUID,
    data: ActionItemStatusUpdate,
    user: Annotated[
        UserContext,
        Depends(require_permission("action_items.edit", "action_items.complete")),
    ],
    notifier: Notifier,
) -> ActionItemResponse:
    item = await ActionItemService(notifier).update_status(company_id, item_id, data.status)
    return ActionItemResponse(**item)


@router.delete(
    "/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete action item",
)
async def delete_action_item(
    company_id: UUID,
    item_id: UUID,
    user: Annotated[UserContext, Depends(require_permission("action_items.delete"))],
    notifier: Notifier,
) -> None:
    await ActionItemService(notifier).delete_item(company_id, item_id)
