"""Org chart Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.models.org_role import EmploymentType


class OrgRoleCreate(BaseModel):
    """Schema for adding a role to the org chart."""

    title: str = Field(..., min_length=1, max_length=255)
    person_name: str | None = Field(default=None, max_length=255)
    responsibilities: str | None = None
    department: str | None = Field(default=None, max_length=100)
    employment_type: EmploymentType | None = None
    parent_id: UUID | None = None
    position_x: float | None = None
    position_y: float | None = None


class OrgRoleUpdate(BaseModel):
    """Schema for editing a role. Send ``parent_id: null`` to make it a root."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    person_name: str | None = Field(default=None, max_length=255)
    responsibilities: str | None = None
    department: str | None = Field(default=None, max_length=100)
    employment_type: EmploymentType | None = None
    parent_id: UUID | None = None
    position_x: float | None = None
    position_y: float | None = None


class RolePosition(BaseModel):
    """Canvas position of one role."""

    id: UUID
    x: float
    y: float


class RolePositionsUpdate(BaseModel):
    """Schema for saving the chart layout."""

    positions: list[RolePosition] = Field(..., min_length=1)


class OrgRoleResponse(BaseModel):
    """Schema for org chart role API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    parent_id: UUID | None = None
    title: str
    person_name: str | None = None
    responsibilities: str | None = None
    department: str | None = None
    employment_type: EmploymentType | None = None
    position_x: float | None = None
    position_y: float | None = None
    created_at: datetime | None = None
