"""Deployment history routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from provisioner.api.dependencies.services import get_service_container, ServiceContainer
from provisioner.api.schemas.tofu_schemas import DeploymentResponse, PlanReportResponse


router = APIRouter(prefix="/deployments", tags=["deployments"])

Container = Annotated[ServiceContainer, Depends(get_service_container)]


@router.get("/{deployment_id}", response_model=DeploymentResponse, response_model_by_alias=True)
async def get_deployment(deployment_id: str, container: Container) -> DeploymentResponse:
    """Return a deployment with its full step history."""
    deployment = await container.provisioning_service.get_deployment(deployment_id)
    return DeploymentResponse.from_domain(deployment)


@router.get(
    "/{deployment_id}/plan",
    response_model=PlanReportResponse,
    response_model_by_alias=True,
)
async def get_plan_report(deployment_id: str, container: Container) -> PlanReportResponse:
    """Render the most recent plan: tally, resource changes, no-op flag."""
    report = await container.provisioning_service.render_plan(deployment_id)
    return PlanReportResponse.from_domain(report)
