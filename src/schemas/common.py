"""Common schemas used across the application."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HealthStatus(str, Enum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class HealthResponse(BaseModel):
    """Response schema for basic health check endpoint.

    Used by liveness checks to verify the service is running.
    """

    model_config = ConfigDict(from_attributes=True)

    status: HealthStatus = Field(description="Current health status")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")
    version: str = Field(default="0.1.0", description="API version")


class CheckResult(BaseModel):
    """Result of an individual dependency check."""

    model_config = ConfigDict(from_attributes=True)

    name: str = Field(description="Name of the dependency being checked")
    healthy: bool = Field(description="Whether the dependency is healthy")
    latency_ms: float | None = Field(default=None, description="Response time in milliseconds")
    error: str | None = Field(default=None, description="Error message if unhealthy")


class ReadinessResponse(BaseModel):
    """Response schema for readiness check endpoint."""

    model_config = ConfigDict(from_attributes=True)

    status: HealthStatus = Field(description="Overall readiness status")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")
    checks: list[CheckResult] = Field(default_factory=list, description="Individual check results")
    realtime_connections: int = Field(default=0, description="Open live-meeting connections")


class ErrorResponse(BaseModel):
    """Standard error envelope.

    All HTTP errors are returned in this shape so clients can branch on
    ``error`` without parsing ``message``.
    """

    model_config = ConfigDict(populate_by_name=True)

    status_code: int = Field(alias="statusCode", description="HTTP status code")
    message: str = Field(description="Human-readable error description")
    error: str = Field(description="Error type or category")
    path: str = Field(description="Request path that produced the error")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error timestamp")

    @classmethod
    def from_exception(
        cls,
        error_type: str,
        message: str,
        status_code: int,
        path: str,
    ) -> "ErrorResponse":
        """Create an ErrorResponse from exception details.

        Args:
            error_type: Category or type of error.
            message: Human-readable error description.
            status_code: HTTP status code being returned.
            path: Request path.

        Returns:
            ErrorResponse: Formatted error response.
        """
        return cls(
            status_code=status_code,
            message=message,
            error=error_type,
            path=path,
        )


class MessageResponse(BaseModel):
    """Simple acknowledgement body for delete-style endpoints."""

    message: str
