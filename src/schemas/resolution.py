"""Resolution Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.models.resolution import ResolutionCategory, ResolutionStatus


class ResolutionCreate(BaseModel):
    """Schema for drafting a resolution. The number is assigned on create."""

    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    category: ResolutionCategory
    status: ResolutionStatus = ResolutionStatus.DRAFT
    decision_id: UUID | None = Field(default=None, description="Decision this resolution records")
    effective_date: datetime | None = None


class ResolutionUpdate(BaseModel):
    """Schema for editing a resolution."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = Field(default=None, min_length=1)
    category: ResolutionCategory | None = None
    status: ResolutionStatus | None = None
    decision_id: UUID | None = None
    effective_date: datetime | None = None


class ResolutionStatusUpdate(BaseModel):
    """Schema for changing a resolution's status."""

    status: ResolutionStatus


class NextNumberResponse(BaseModel):
    """The number the next resolution will receive."""

    number: str


class ResolutionResponse(BaseModel):
    """Schema for resolution API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    decision_id: UUID | None = None
    number: str
    title: str
    content: str
    category: ResolutionCategory
    status: ResolutionStatus
    effective_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
