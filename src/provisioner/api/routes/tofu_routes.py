"""OpenTofu step routes."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends

from provisioner.api.dependencies.services import get_service_container, ServiceContainer
from provisioner.api.schemas.tofu_schemas import (
    CancelPlanRequest,
    CancelPlanResponse,
    StepRequest,
    StepResponse,
)
from provisioner.domain.errors import WorkspaceBusyError
from provisioner.domain.ports.services import DistributedLock


logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/projects/{project_id}/tofu", tags=["tofu"])


async def _keep_locked(lock: DistributedLock, resource_id: str, ttl_seconds: int) -> None:
    """Renew the workspace lock every third of its TTL until cancelled."""
    interval = max(ttl_seconds / 3, 0.1)
    while True:
        await asyncio.sleep(interval)
        if not await lock.extend(resource_id, ttl_seconds=ttl_seconds):
            logger.warning("workspace_lock_lost", resource_id=resource_id)
            return


@asynccontextmanager
async def workspace_guard(
    lock: DistributedLock, project_id: str, space_name: str | None, ttl_seconds: int
) -> AsyncIterator[None]:
    """Serialize command chains per (project, space) workspace.

    The lock is renewed while the chain runs, so ``ttl_seconds`` only bounds
    how long a crashed holder keeps the workspace blocked.
    """
    if not space_name:
        # Nothing to lock; the service rejects the request
        yield
        return

    resource_id = f"workspace:{project_id}:{space_name}"
    if not await lock.acquire(resource_id, ttl_seconds=ttl_seconds):
        raise WorkspaceBusyError(
            f"Another command is running in workspace {project_id}/{space_name}"
        )
    renewal = asyncio.create_task(_keep_locked(lock, resource_id, ttl_seconds))
    try:
        yield
    finally:
        renewal.cancel()
        (outcome,) = await asyncio.gather(renewal, return_exceptions=True)
        if isinstance(outcome, Exception):
            logger.warning("workspace_lock_renewal_failed", resource_id=resource_id, error=str(outcome))
        await lock.release(resource_id)


Container = Annotated[ServiceContainer, Depends(get_service_container)]


def _guard(
    container: ServiceContainer, project_id: str, request: StepRequest
) -> AbstractAsyncContextManager[None]:
    return workspace_guard(
        container.lock_service,
        project_id,
        request.space_name,
        container.settings.execution.workspace_lock_ttl,
    )


@router.post("/init", response_model=StepResponse, response_model_by_alias=True)
async def tofu_init(project_id: str, request: StepRequest, container: Container) -> StepResponse:
    """Run ``tofu init``; creates a deployment when no ``deploymentId`` is sent."""
    async with _guard(container, project_id, request):
        outcome = await container.provisioning_service.init(
            project_id, request.space_name or "", request.deployment_id
        )
    return StepResponse.from_outcome(outcome)


@router.post("/plan", response_model=StepResponse, response_model_by_alias=True)
async def tofu_plan(project_id: str, request: StepRequest, container: Container) -> StepResponse:
    """Run ``tofu plan`` and append a plan step."""
    async with _guard(container, project_id, request):
        outcome = await container.provisioning_service.plan(
            project_id, request.space_name or "", request.deployment_id
        )
    return StepResponse.from_outcome(outcome)


@router.post("/plan/cancel", response_model=CancelPlanResponse, response_model_by_alias=True)
async def tofu_plan_cancel(
    project_id: str, request: CancelPlanRequest, container: Container
) -> CancelPlanResponse:
    """Mark the deployment's first plan step as cancelled."""
    message = await container.provisioning_service.cancel_plan(project_id, request.deployment_id)
    assert request.deployment_id is not None  # validated by cancel_plan
    return CancelPlanResponse(
        success=True, message=message, deployment_id=request.deployment_id
    )


@router.post("/apply", response_model=StepResponse, response_model_by_alias=True)
async def tofu_apply(project_id: str, request: StepRequest, container: Container) -> StepResponse:
    """Run ``tofu apply -auto-approve`` and append an apply step."""
    async with _guard(container, project_id, request):
        outcome = await container.provisioning_service.apply(
            project_id, request.space_name or "", request.deployment_id
        )
    return StepResponse.from_outcome(outcome)


@router.post("/destroy", response_model=StepResponse, response_model_by_alias=True)
async def tofu_destroy(project_id: str, request: StepRequest, container: Container) -> StepResponse:
    """Run ``tofu destroy -auto-approve`` and append a destroy step."""
    async with _guard(container, project_id, request):
        outcome = await container.provisioning_service.destroy(
            project_id, request.space_name or "", request.deployment_id
        )
    return StepResponse.from_outcome(outcome)
