"""Action item type definitions."""

from datetime import datetime
from enum import Enum
from typing import TypedDict


class ActionItemStatus(str, Enum):
    """Action item status values."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    OVERDUE = "OVERDUE"


class Priority(str, Enum):
    """Action item priority values."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ActionItem(TypedDict):
    """Action item table row representation."""

    id: str
    company_id: str
    meeting_id: str | None
    agenda_item_id: str | None
    title: str
    description: str | None
    assignee_id: str | None
    due_date: datetime | None
    priority: Priority
    status: ActionItemStatus
    order: int
    created_by_id: str
    created_at: datetime
