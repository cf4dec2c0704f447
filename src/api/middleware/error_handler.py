"""Error taxonomy and global error handling for consistent error responses."""

import logging
import traceback
from typing import Any, Callable

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from src.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for API errors.

    Raised by services for failures that should reach the caller with a
    specific status code and category. The real-time gateway maps the same
    classes onto error frames using ``error_type``.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_type: str = "api_error",
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code to return.
            error_type: Error category/type for client handling.
            details: Optional additional error details.
        """
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        super().__init__(message)


class NotFoundError(APIError):
    """Resource not found, or outside the caller's company scope."""

    def __init__(self, message: str = "Resource not found", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_type="not_found",
            details=details,
        )


class ValidationError(APIError):
    """Request validation error."""

    def __init__(self, message: str = "Validation error", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_type="validation_error",
            details=details,
        )


class CapacityError(ValidationError):
    """A per-company limit has been reached."""

    def __init__(self, message: str = "Capacity exceeded", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message=message, details=details)
        self.error_type = "capacity_exceeded"


class AuthenticationError(APIError):
    """Authentication failure error."""

    def __init__(self, message: str = "Authentication required", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_type="authentication_error",
            details=details,
        )


class AuthorizationError(APIError):
    """Authenticated but not permitted."""

    def __init__(self, message: str = "Access denied", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_type="authorization_error",
            details=details,
        )


class ConflictError(APIError):
    """Uniqueness or reference conflict."""

    def __init__(self, message: str = "Conflict", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_type="conflict",
            details=details,
        )


class InvalidStateError(APIError):
    """Operation is illegal in the entity's current lifecycle state."""

    def __init__(self, message: str = "Invalid state for this operation", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_type="invalid_state",
            details=details,
        )


def create_error_response(
    error_type: str,
    message: str,
    status_code: int,
    path: str,
) -> JSONResponse:
    """Create a standardized JSON error response.

    Args:
        error_type: Error category for client handling.
        message: Human-readable error description.
        status_code: HTTP status code.
        path: Request path.

    Returns:
        JSONResponse: Formatted error response.
    """
    error_response = ErrorResponse.from_exception(
        error_type=error_type,
        message=message,
        status_code=status_code,
        path=path,
    )
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json", by_alias=True),
    )


async def error_handler_middleware(request: Request, call_next: Callable[[Request], Any]) -> Response:
    """Middleware to catch and format all exceptions.

    Logs full stack traces for unexpected errors while returning safe
    messages to clients.

    Args:
        request: The incoming request.
        call_next: Next middleware or route handler.

    Returns:
        Response: Either the successful response or formatted error response.
    """
    path = request.url.path

    try:
        return await call_next(request)

    except APIError as e:
        logger.warning(
            "%s %s - %s %s: %s",
            request.method,
            path,
            e.status_code,
            e.error_type,
            e.message,
        )
        return create_error_response(
            error_type=e.error_type,
            message=e.message,
            status_code=e.status_code,
            path=path,
        )

    except Exception as e:
        logger.error(
            "%s %s - unhandled exception: %s\n%s",
            request.method,
            path,
            str(e),
            traceback.format_exc(),
        )
        return create_error_response(
            error_type="internal_error",
            message="Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            path=path,
        )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render FastAPI HTTP exceptions in the standard envelope."""
    logger.warning("%s %s - %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
    response = create_error_response(
        error_type="http_error",
        message=str(exc.detail),
        status_code=exc.status_code,
        path=request.url.path,
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request body/parameter validation failures in the standard envelope."""
    messages = [
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    ]
    return create_error_response(
        error_type="validation_error",
        message="; ".join(messages) or "Invalid request",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        path=request.url.path,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach envelope-producing handlers for framework-raised exceptions."""
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
