"""OKR Pydantic schemas."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.models.okr import MetricType, OkrPeriodStatus


class OkrPeriodCreate(BaseModel):
    """Schema for opening an OKR period."""

    name: str = Field(..., min_length=1, max_length=100)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def _check_range(self) -> "OkrPeriodCreate":
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class OkrPeriodUpdate(BaseModel):
    """Schema for renaming or re-dating an open period."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    start_date: date | None = None
    end_date: date | None = None


class ObjectiveCreate(BaseModel):
    """Schema for adding an objective to a period."""

    title: str = Field(..., min_length=1, max_length=255)


class ObjectiveUpdate(BaseModel):
    """Schema for editing an objective."""

    title: str = Field(..., min_length=1, max_length=255)


class KeyResultCreate(BaseModel):
    """Schema for adding a key result to an objective.

    BOOLEAN key results are done when ``current_value`` reaches 1.
    """

    title: str = Field(..., min_length=1, max_length=255)
    metric_type: MetricType = MetricType.NUMERIC
    start_value: float = 0
    target_value: float = 1
    current_value: float | None = Field(default=None, description="Defaults to start_value")
    inverse: bool = Field(default=False, description="Lower values are better")
    comment: str | None = None


class KeyResultUpdate(BaseModel):
    """Schema for editing a key result or recording progress."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    metric_type: MetricType | None = None
    start_value: float | None = None
    target_value: float | None = None
    current_value: float | None = None
    inverse: bool | None = None
    comment: str | None = None


class KeyResultResponse(BaseModel):
    """Schema for key result API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    objective_id: UUID
    title: str
    metric_type: MetricType
    start_value: float
    target_value: float
    current_value: float
    inverse: bool
    comment: str | None = None
    order: int
    progress: float = Field(..., description="Percent complete, 0 to 100")


class ObjectiveResponse(BaseModel):
    """Schema for objective API responses, with nested key results."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    period_id: UUID
    title: str
    order: int
    progress: float
    key_results: list[KeyResultResponse] = Field(default_factory=list)


class OkrPeriodResponse(BaseModel):
    """Schema for OKR period API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    name: str
    start_date: date
    end_date: date
    status: OkrPeriodStatus
    score: float = Field(..., description="Average objective progress, 0 to 100")
    created_at: datetime | None = None


class OkrPeriodDetailResponse(OkrPeriodResponse):
    """An OKR period with its objectives and key results."""

    objectives: list[ObjectiveResponse] = Field(default_factory=list)
