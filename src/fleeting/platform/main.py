"""
Main FastAPI application entry point.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fleeting.platform.db import check_database_health, create_all_tables_async
from fleeting.platform.exception_handlers import register_exception_handlers
from fleeting.platform.middleware import RequestContextMiddleware
from fleeting.platform.routers import get_api_info, register_routers
from fleeting.platform.settings import settings

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle events."""
    logger.info(
        "service.startup.begin",
        service=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    # Migrations own the schema outside development
    if settings.is_development:
        await create_all_tables_async()
        logger.info("database.tables.created")

    yield

    logger.info("service.shutdown.complete")


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Fleeting Platform Services",
        description="Subscription entitlement engine for multi-tenant storefronts",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
    )

    if settings.observability.enable_correlation_ids:
        app.add_middleware(RequestContextMiddleware)

    if settings.cors.enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors.origins,
            allow_credentials=settings.cors.credentials,
            allow_methods=settings.cors.methods,
            allow_headers=settings.cors.headers,
        )

    register_exception_handlers(app)
    register_routers(app)

    @app.get("/health")
    async def health_check() -> dict[str, Any]:
        """Health check endpoint for monitoring."""
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
        }

    @app.get("/health/ready")
    async def readiness_check() -> dict[str, Any]:
        database = await check_database_health()
        return {
            "status": "ready" if database else "not ready",
            "database": database,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    @app.get("/api/v1/info")
    async def api_v1_info() -> dict[str, Any]:
        return get_api_info()

    return app


app = create_application()
