"""Application factory for the FastAPI app.

Centralizes app construction (metadata, lifespan, middleware, handlers,
routers) so tests can build isolated instances.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from activity_connector.adapters.store.factory import close_store
from activity_connector.api.routes import activity_router, health_router
from activity_connector.core.config import settings
from activity_connector.core.exception_handlers import setup_exception_handlers
from activity_connector.core.logging import configure_logging
from activity_connector.core.middleware import request_id_middleware
from activity_connector.core.openapi import apply_openapi_customizations

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Log startup configuration and close the store client on shutdown."""
    logger.info(
        "app.startup",
        extra={
            "app_env": settings.app_env,
            "page_size": settings.app.page_size,
            "rate_limit_enabled": settings.app.rate_limit_enabled,
            "rate_limit_requests": settings.app.rate_limit_requests,
            "rate_limit_window_s": settings.app.rate_limit_window_seconds,
        },
    )
    yield
    await close_store()
    logger.info("app.shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="GitHub Activity Connector",
        description=(
            "Read-only, paginated access to pre-ingested GitHub repositories and "
            "commits per user. Requires a personal access token and enforces a "
            "per-user rate limit."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(activity_router, prefix="/api/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
