"""Application service running OpenTofu step commands against workspaces."""

from __future__ import annotations

import structlog

from provisioner.domain.errors import (
    ProjectNotFoundError,
    StepNotFoundError,
    ValidationError,
)
from provisioner.domain.models.base import ValueObject
from provisioner.domain.models.deployment import Deployment, StepKind
from provisioner.domain.models.execution import ExecutionResult, PlanReport
from provisioner.domain.models.project import check_path_segment, Project
from provisioner.domain.ports.repositories import ProjectDirectory
from provisioner.domain.ports.services import CommandRunner
from provisioner.domain.services.environment_selector import EnvironmentSelector
from provisioner.domain.services.ledger import DeploymentLedger
from provisioner.domain.services.summarizer import extract_plan_report


logger = structlog.get_logger(__name__)

# Exact command strings per step kind.
STEP_COMMANDS: dict[StepKind, str] = {
    StepKind.INIT: "tofu init -input=false -no-color",
    StepKind.PLAN: "tofu plan -input=false -no-color",
    StepKind.APPLY: "tofu apply -auto-approve -input=false -no-color",
    StepKind.DESTROY: "tofu destroy -auto-approve -input=false -no-color",
}

PLAN_CANCELLED_MESSAGE = "Plan Step Cancelled by User"


def command_label(kind: StepKind) -> str:
    return f"tofu {kind.value}"


class StepOutcome(ValueObject):
    """What a step endpoint reports back to its caller."""

    command: str
    deployment_id: str
    deployment_name: str | None = None
    result: ExecutionResult


class ProvisioningService:
    """Runs init/plan/apply/destroy and records each run in the ledger.

    Flow per request: project lookup, environment selection, command chain,
    summary extraction (inside the runner), ledger write. Callers are expected
    to serialize requests per workspace; nothing here locks.
    """

    def __init__(
        self,
        projects: ProjectDirectory,
        environment_selector: EnvironmentSelector,
        command_runner: CommandRunner,
        ledger: DeploymentLedger,
        workspace_root: str = "/workspace",
        enable_logging: bool = False,
    ) -> None:
        self._projects = projects
        self._environment_selector = environment_selector
        self._runner = command_runner
        self._ledger = ledger
        self._workspace_root = workspace_root
        self._enable_logging = enable_logging

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _resolve_project(self, project_id: str) -> Project:
        project = await self._projects.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError("Project not found")
        return project

    async def _run(self, project: Project, space_name: str, kind: StepKind) -> ExecutionResult:
        workspace_path = project.workspace_path(self._workspace_root, space_name)
        environment_id = await self._environment_selector.select()
        logger.info(
            "step_command_starting",
            kind=kind.value,
            project_id=project.project_id,
            workspace=workspace_path,
            environment_id=environment_id,
        )
        return await self._runner.execute(
            environment_id,
            workspace_path,
            [STEP_COMMANDS[kind]],
            enable_logging=self._enable_logging,
        )

    @staticmethod
    def _require(value: str | None, field: str) -> str:
        if not value:
            raise ValidationError(f"{field} is required")
        return value

    def _require_space(self, space_name: str | None) -> str:
        return check_path_segment(self._require(space_name, "spaceName"), "spaceName")

    # ------------------------------------------------------------------
    # Step operations
    # ------------------------------------------------------------------

    async def init(
        self, project_id: str, space_name: str, deployment_id: str | None = None
    ) -> StepOutcome:
        """Run ``tofu init``; creates a deployment unless ``deployment_id`` is given."""
        self._require_space(space_name)
        project = await self._resolve_project(project_id)
        if deployment_id:
            await self._ledger.get_deployment(deployment_id)

        result = await self._run(project, space_name, StepKind.INIT)
        identity = await self._ledger.record_init_step(
            deployment_id or None,
            project_id=project.project_id,
            space_id=space_name,
            project_name=project.project_name,
            result=result,
        )
        return StepOutcome(
            command=command_label(StepKind.INIT),
            deployment_id=identity.deployment_id,
            deployment_name=identity.deployment_name,
            result=result,
        )

    async def _append(
        self, kind: StepKind, project_id: str, space_name: str, deployment_id: str | None
    ) -> StepOutcome:
        self._require_space(space_name)
        deployment_id = self._require(deployment_id, "deploymentId")
        project = await self._resolve_project(project_id)
        existing = await self._ledger.get_deployment(deployment_id)

        result = await self._run(project, space_name, kind)
        await self._ledger.append_step(deployment_id, kind, result)
        return StepOutcome(
            command=command_label(kind),
            deployment_id=deployment_id,
            deployment_name=existing.deployment_name,
            result=result,
        )

    async def plan(
        self, project_id: str, space_name: str, deployment_id: str | None
    ) -> StepOutcome:
        return await self._append(StepKind.PLAN, project_id, space_name, deployment_id)

    async def apply(
        self, project_id: str, space_name: str, deployment_id: str | None
    ) -> StepOutcome:
        return await self._append(StepKind.APPLY, project_id, space_name, deployment_id)

    async def destroy(
        self, project_id: str, space_name: str, deployment_id: str | None
    ) -> StepOutcome:
        return await self._append(StepKind.DESTROY, project_id, space_name, deployment_id)

    async def cancel_plan(self, project_id: str, deployment_id: str | None) -> str:
        """Mark the deployment's first plan as cancelled and return the user message."""
        deployment_id = self._require(deployment_id, "deploymentId")
        await self._resolve_project(project_id)
        try:
            await self._ledger.cancel_step(deployment_id, StepKind.PLAN)
        except StepNotFoundError as e:
            raise StepNotFoundError("Plan step not found for deployment") from e
        return PLAN_CANCELLED_MESSAGE

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_deployment(self, deployment_id: str) -> Deployment:
        return await self._ledger.get_deployment(deployment_id)

    async def render_plan(self, deployment_id: str) -> PlanReport:
        """Presentation view of the deployment's most recent plan output."""
        deployment = await self._ledger.get_deployment(deployment_id)
        step = deployment.latest_step(StepKind.PLAN)
        if step is None:
            raise StepNotFoundError("Plan step not found for deployment")
        return extract_plan_report(step.message)
