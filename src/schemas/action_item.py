"""Action item Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.models.action_item import ActionItemStatus, Priority


class ActionItemCreate(BaseModel):
    """Schema for creating an action item."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    assignee_id: str | None = Field(default=None, description="User id of an active company member")
    due_date: datetime | None = None
    priority: Priority = Priority.MEDIUM
    status: ActionItemStatus = ActionItemStatus.PENDING
    meeting_id: UUID | None = None
    agenda_item_id: UUID | None = None


class ActionItemUpdate(BaseModel):
    """Schema for editing an action item."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    assignee_id: str | None = None
    due_date: datetime | None = None
    priority: Priority | None = None


class ActionItemStatusUpdate(BaseModel):
    """Schema for changing an action item's status."""

    status: ActionItemStatus


class ActionItemResponse(BaseModel):
    """Schema for action item API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    meeting_id: UUID | None = None
    agenda_item_id: UUID | None = None
    title: str
    description: str | None = None
    assignee_id: str | None = None
    due_date: datetime | None = None
    priority: Priority
    status: ActionItemStatus
    order: int
    created_by_id: str | None = None
    created_at: datetime | None = None
