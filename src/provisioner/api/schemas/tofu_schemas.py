"""API schemas for the tofu step and deployment endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from provisioner.domain.models.deployment import Deployment, StepKind, StepStatus
from provisioner.domain.models.execution import NoSummary, PlanReport, Summary
from provisioner.domain.services.provisioning_service import StepOutcome


class CamelModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class StepRequest(CamelModel):
    # Presence is checked by the service so the caller gets a 400 naming the field
    space_name: str | None = None
    deployment_id: str | None = None


class CancelPlanRequest(CamelModel):
    deployment_id: str | None = None


def summary_payload(summary: Summary) -> dict[str, Any] | None:
    """Serialize a summary's counts with camelCase keys; ``NoSummary`` becomes ``None``.

    The ``kind`` tag is internal to the union and never sent.
    """
    if isinstance(summary, NoSummary):
        return None
    return {to_camel(key): value for key, value in summary.model_dump(exclude={"kind"}).items()}


class StepResponse(CamelModel):
    command: str
    deployment_id: str
    deployment_name: str | None = None
    exit_code: int | None
    stdout: str
    stderr: str
    combined: str
    log_file_content: str
    summary: dict[str, Any] | None = None

    @classmethod
    def from_outcome(cls, outcome: StepOutcome) -> StepResponse:
        result = outcome.result
        return cls(
            command=outcome.command,
            deployment_id=outcome.deployment_id,
            deployment_name=outcome.deployment_name,
            exit_code=result.exit_code,
            stdout=result.stdout,
            stderr=result.stderr,
            combined=result.combined,
            log_file_content=result.log_file_content,
            summary=summary_payload(result.summary),
        )


class CancelPlanResponse(CamelModel):
    success: bool
    message: str
    deployment_id: str


class StepEntryResponse(CamelModel):
    kind: StepKind
    status: StepStatus
    message: str
    log_file_content: str | None = None
    timestamp: datetime


class DeploymentResponse(CamelModel):
    deployment_id: str
    project_id: str
    space_id: str
    deployment_name: str
    started_at: datetime
    steps: list[StepEntryResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, deployment: Deployment) -> DeploymentResponse:
        return cls(
            deployment_id=deployment.id,
            project_id=deployment.project_id,
            space_id=deployment.space_id,
            deployment_name=deployment.deployment_name,
            started_at=deployment.started_at,
            steps=[StepEntryResponse(**step.model_dump()) for step in deployment.steps],
        )


class PlanChangesResponse(CamelModel):
    add: int
    change: int
    destroy: int


class ResourceChangeResponse(CamelModel):
    action: str
    type: str
    name: str


class PlanReportResponse(CamelModel):
    changes: PlanChangesResponse | None = None
    resource_changes: list[ResourceChangeResponse] = Field(default_factory=list)
    no_changes: bool = False

    @classmethod
    def from_domain(cls, report: PlanReport) -> PlanReportResponse:
        return cls.model_validate(report.model_dump())
