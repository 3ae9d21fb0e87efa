"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from provisioner.api.dependencies.services import get_service_container
from provisioner.api.errors import register_error_handlers
from provisioner.api.middleware.correlation import CorrelationIdMiddleware
from provisioner.api.middleware.metrics import RequestMetricsMiddleware
from provisioner.api.middleware.rate_limiter import RateLimiterMiddleware
from provisioner.api.routes import (
    deployment_routes,
    health_routes,
    tofu_routes,
)
from provisioner.config import get_settings, Settings


logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()
    container = get_service_container()
    logger.info(
        "application_starting",
        environment=settings.environment.value,
        execution_backend=settings.execution.backend.value,
        persistence_backend=settings.persistence_backend.value,
    )

    if container.database is not None:
        await container.database.initialize(create_schema=settings.debug)

    yield

    logger.info("application_shutting_down")
    if container.database is not None:
        await container.database.close()
    logger.info("application_shutdown_complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="Tofu Provisioner",
        description="Runs OpenTofu against project workspaces and records deployment history",
        version="1.0.0",
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        lifespan=lifespan,
    )

    # Middleware (order matters - last added = outermost)
    app.add_middleware(RateLimiterMiddleware, settings=settings.rate_limit)
    if settings.observability.metrics_enabled:
        app.add_middleware(RequestMetricsMiddleware)
    app.add_middleware(CorrelationIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Routes
    app.include_router(health_routes.router)
    app.include_router(tofu_routes.router, prefix=settings.api_prefix)
    app.include_router(deployment_routes.router, prefix=settings.api_prefix)

    return app
