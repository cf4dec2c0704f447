"""OKR period, objective and key result type definitions."""

from datetime import date, datetime
from enum import Enum
from typing import TypedDict


class OkrPeriodStatus(str, Enum):
    """OKR period status values."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"


class MetricType(str, Enum):
    """How a key result is measured."""

    NUMERIC = "NUMERIC"
    BOOLEAN = "BOOLEAN"


class OkrPeriod(TypedDict):
    """OKR period table row representation."""

    id: str
    company_id: str
    name: str
    start_date: date
    end_date: date
    status: OkrPeriodStatus
    created_at: datetime


class Objective(TypedDict):
    """Objective table row representation."""

    id: str
    period_id: str
    title: str
    order: int


class KeyResult(TypedDict):
    """Key result table row representation."""

    id: str
    objective_id: str
    title: str
    metric_type: MetricType
    start_value: float
    target_value: float
    current_value: float
    inverse: bool
    comment: str | None
    order: int
