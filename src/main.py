"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from src.api.middleware.error_handler import error_handler_middleware, register_exception_handlers
from src.api.routes import (
    action_items,
    agenda,
    companies,
    documents,
    financial_reports,
    health,
    invitations,
    meetings,
    notes,
    okrs,
    org_roles,
    permissions,
    realtime,
    resolutions,
    webhooks,
)
from src.core.config import get_settings
from src.realtime.gateway import MeetingsGateway

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control back to the application.
    """
    settings = get_settings()
    logger.info("Starting %s in %s mode", settings.app_name, settings.app_env)

    yield

    logger.info(
        "Shutting down %s (%d live connections open)",
        settings.app_name,
        app.state.gateway.connection_count,
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Boardroom API",
        description="Board governance platform backend with live meetings",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # One gateway per app; HTTP services reach it through the room notifier dependency
    app.state.gateway = MeetingsGateway()

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add error handler middleware (outermost - catches all errors)
    app.add_middleware(BaseHTTPMiddleware, dispatch=error_handler_middleware)
    register_exception_handlers(app)

    # Mount health and real-time routes at root level (no prefix)
    app.include_router(health.router)
    app.include_router(realtime.router)

    # Create API v1 router for versioned endpoints
    api_v1_router = APIRouter(prefix="/api/v1")

    # Company, membership and permission routes
    api_v1_router.include_router(companies.router)
    api_v1_router.include_router(invitations.router)
    api_v1_router.include_router(permissions.router)

    # Meeting routes
    api_v1_router.include_router(meetings.router)
    api_v1_router.include_router(agenda.router)
    api_v1_router.include_router(notes.router)

    # Action item routes
    api_v1_router.include_router(action_items.router)

    # Governance records
    api_v1_router.include_router(resolutions.router)
    api_v1_router.include_router(documents.router)
    api_v1_router.include_router(financial_reports.router)
    api_v1_router.include_router(okrs.router)
    api_v1_router.include_router(org_roles.router)

    # Webhook routes
    api_v1_router.include_router(webhooks.router)

    app.include_router(api_v1_router)

    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
