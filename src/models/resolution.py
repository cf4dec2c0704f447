"""Board resolution type definitions."""

from datetime import datetime
from enum import Enum
from typing import TypedDict


class ResolutionStatus(str, Enum):
    """Resolution status values. PASSED is final."""

    DRAFT = "DRAFT"
    PROPOSED = "PROPOSED"
    PASSED = "PASSED"
    REJECTED = "REJECTED"
    TABLED = "TABLED"


class ResolutionCategory(str, Enum):
    """Resolution category values."""

    FINANCIAL = "FINANCIAL"
    GOVERNANCE = "GOVERNANCE"
    HR = "HR"
    OPERATIONS = "OPERATIONS"
    STRATEGIC = "STRATEGIC"
    OTHER = "OTHER"


class Resolution(TypedDict):
    """Resolution table row representation."""

    id: str
    company_id: str
    decision_id: str | None
    number: str
    title: str
    content: str
    category: ResolutionCategory
    status: ResolutionStatus
    effective_date: datetime | None
    created_at: datetime
    updated_at: datetime
