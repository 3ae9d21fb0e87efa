"""Deployment step ledger."""

from __future__ import annotations

import structlog

from provisioner.domain.errors import DeploymentNotFoundError, InvalidStepKindError
from provisioner.domain.events.deployment_events import (
    DeploymentCreated,
    StepCancelled,
    StepRecorded,
)
from provisioner.domain.models.base import DomainEvent
from provisioner.domain.models.deployment import (
    APPENDABLE_KINDS,
    Deployment,
    DeploymentIdentity,
    Step,
    StepKind,
)
from provisioner.domain.models.execution import ExecutionResult
from provisioner.domain.ports.repositories import DeploymentRepository
from provisioner.domain.ports.services import EventPublisher, IdentityAllocator


logger = structlog.get_logger(__name__)


class DeploymentLedger:
    """Owns deployment aggregates and their step history.

    Init is idempotent (one entry, replaced on every run), plan/apply/destroy
    append, and cancellation rewrites an existing entry in place. Every write
    goes through a single atomic repository mutation.
    """

    def __init__(
        self,
        deployment_repo: DeploymentRepository,
        identity_allocator: IdentityAllocator,
        event_publisher: EventPublisher,
    ) -> None:
        self._deployment_repo = deployment_repo
        self._identity_allocator = identity_allocator
        self._event_publisher = event_publisher

    async def _publish(self, *events: DomainEvent) -> None:
        await self._event_publisher.publish_batch(
            [event.to_message() for event in events]
        )

    async def get_deployment(self, deployment_id: str) -> Deployment:
        deployment = await self._deployment_repo.get_by_id(deployment_id)
        if deployment is None:
            raise DeploymentNotFoundError(f"Deployment {deployment_id} not found")
        return deployment

    async def record_init_step(
        self,
        deployment_id: str | None,
        project_id: str,
        space_id: str,
        project_name: str,
        result: ExecutionResult,
    ) -> DeploymentIdentity:
        """Record an init run, creating the deployment when no id is given."""
        step = Step.from_result(StepKind.INIT, result)

        if deployment_id is None:
            identity = await self._identity_allocator.allocate(project_name, space_id)
            deployment = Deployment(
                id=identity.deployment_id,
                project_id=project_id,
                space_id=space_id,
                deployment_name=identity.deployment_name,
                steps=[step],
            )
            await self._deployment_repo.create(deployment)
            logger.info(
                "deployment_created",
                deployment_id=identity.deployment_id,
                project_id=project_id,
                space_id=space_id,
                init_status=step.status.value,
            )
            await self._publish(
                DeploymentCreated(
                    deployment_id=identity.deployment_id,
                    project_id=project_id,
                    space_id=space_id,
                    deployment_name=identity.deployment_name,
                ),
                StepRecorded(
                    deployment_id=identity.deployment_id,
                    kind=step.kind.value,
                    status=step.status.value,
                ),
            )
            return identity

        outcome = await self._deployment_repo.mutate(
            deployment_id, lambda d: d.replace_init_step(step)
        )
        if outcome is None:
            raise DeploymentNotFoundError(f"Deployment {deployment_id} not found")

        deployment, _ = outcome
        logger.info(
            "init_step_replaced",
            deployment_id=deployment_id,
            status=step.status.value,
        )
        await self._publish(StepRecorded(
            deployment_id=deployment_id,
            kind=step.kind.value,
            status=step.status.value,
        ))
        return deployment.identity

    async def append_step(
        self, deployment_id: str, kind: StepKind, result: ExecutionResult
    ) -> Deployment:
        """Append a plan/apply/destroy entry to the history."""
        if kind not in APPENDABLE_KINDS:
            raise InvalidStepKindError(f"Step kind {kind.value} cannot be appended")

        step = Step.from_result(kind, result)
        outcome = await self._deployment_repo.mutate(
            deployment_id, lambda d: d.append_step(step)
        )
        if outcome is None:
            raise DeploymentNotFoundError(f"Deployment {deployment_id} not found")

        deployment, _ = outcome
        logger.info(
            "step_recorded",
            deployment_id=deployment_id,
            kind=kind.value,
            status=step.status.value,
            step_count=len(deployment.steps),
        )
        await self._publish(StepRecorded(
            deployment_id=deployment_id,
            kind=kind.value,
            status=step.status.value,
        ))
        return deployment

    async def cancel_step(
        self, deployment_id: str, kind: StepKind = StepKind.PLAN
    ) -> Step:
        """Mark the first recorded step of ``kind`` as cancelled.

        Raises ``DeploymentNotFoundError`` or ``StepNotFoundError``; in both
        cases nothing is written.
        """
        outcome = await self._deployment_repo.mutate(
            deployment_id, lambda d: d.cancel_step(kind)
        )
        if outcome is None:
            raise DeploymentNotFoundError(f"Deployment {deployment_id} not found")

        _, cancelled = outcome
        logger.info("step_cancelled", deployment_id=deployment_id, kind=kind.value)
        await self._publish(StepCancelled(deployment_id=deployment_id, kind=kind.value))
        return cancelled
