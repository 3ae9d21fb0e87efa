"""Health check and metrics routes."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from provisioner.api.dependencies.services import get_service_container, ServiceContainer
from provisioner.config import ExecutionBackend, PersistenceBackend


router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": "1.0.0",
    }


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """Liveness check - verifies the service is running."""
    return {"status": "alive"}


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus scrape endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/health/ready")
async def readiness_check(
    container: Annotated[ServiceContainer, Depends(get_service_container)],
) -> dict[str, Any]:
    """Readiness check - verifies the service can reach an execution environment."""
    settings = container.settings
    checks: dict[str, str] = {}

    image_required = settings.execution.backend == ExecutionBackend.DOCKER
    checks["execution_image"] = (
        "ok" if settings.execution.image_name or not image_required else "missing"
    )
    if settings.persistence_backend == PersistenceBackend.POSTGRES:
        database = container.database
        checks["database"] = "ok" if database is not None and await database.ping() else "unreachable"

    all_ok = all(v == "ok" for v in checks.values())
    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
