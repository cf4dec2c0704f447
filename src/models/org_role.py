"""Organization chart type definitions."""

from datetime import datetime
from enum import Enum
from typing import TypedDict


class EmploymentType(str, Enum):
    """Employment type values."""

    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACTOR = "CONTRACTOR"


class OrgRole(TypedDict):
    """Org chart role table row representation. Roles form a forest via parent_id."""

    id: str
    company_id: str
    parent_id: str | None
    title: str
    person_name: str | None
    responsibilities: str | None
    department: str | None
    employment_type: EmploymentType | None
    position_x: float | None
    position_y: float | None
    created_at: datetime
