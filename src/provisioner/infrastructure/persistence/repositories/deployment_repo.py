"""PostgreSQL deployment repository."""

from __future__ import annotations

from typing import TypeVar

import structlog
from sqlalchemy import select, update

from provisioner.domain.errors import ConcurrentUpdateError
from provisioner.domain.models.deployment import Deployment, Step
from provisioner.domain.ports.repositories import DeploymentMutation, DeploymentRepository
from provisioner.infrastructure.observability.metrics import LEDGER_WRITE_CONFLICTS
from provisioner.infrastructure.persistence.database import DatabaseManager
from provisioner.infrastructure.persistence.models import DeploymentORM


logger = structlog.get_logger(__name__)

T = TypeVar("T")

MAX_WRITE_ATTEMPTS = 5


class PostgresDeploymentRepository(DeploymentRepository):
    """PostgreSQL implementation of DeploymentRepository.

    Writes to an existing document are a single ``UPDATE ... WHERE id = :id
    AND version = :expected``; a zero row count means another request won
    the race and the mutation is replayed on a fresh read.
    """

    def __init__(self, database: DatabaseManager, max_attempts: int = MAX_WRITE_ATTEMPTS) -> None:
        self._database = database
        self._max_attempts = max_attempts

    async def create(self, deployment: Deployment) -> Deployment:
        async with self._database.session() as session:
            session.add(self._to_orm(deployment))
            await session.flush()
        return deployment

    async def get_by_id(self, deployment_id: str) -> Deployment | None:
        async with self._database.session() as session:
            result = await session.execute(
                select(DeploymentORM).where(DeploymentORM.id == deployment_id)
            )
            orm = result.scalar_one_or_none()
            return self._to_domain(orm) if orm else None

    async def mutate(
        self, deployment_id: str, mutation: DeploymentMutation[T]
    ) -> tuple[Deployment, T] | None:
        for attempt in range(1, self._max_attempts + 1):
            async with self._database.session() as session:
                result = await session.execute(
                    select(DeploymentORM).where(DeploymentORM.id == deployment_id)
                )
                orm = result.scalar_one_or_none()
                if orm is None:
                    return None

                deployment = self._to_domain(orm)
                expected_version = deployment.version
                value = mutation(deployment)

                written = await session.execute(
                    update(DeploymentORM)
                    .where(
                        DeploymentORM.id == deployment_id,
                        DeploymentORM.version == expected_version,
                    )
                    .values(
                        steps_data=self._steps_to_data(deployment.steps),
                        version=deployment.version,
                        updated_at=deployment.updated_at,
                    )
                )
                if written.rowcount == 1:
                    return deployment, value

            LEDGER_WRITE_CONFLICTS.inc()
            logger.warning(
                "deployment_write_conflict",
                deployment_id=deployment_id,
                attempt=attempt,
            )

        raise ConcurrentUpdateError(
            f"Deployment {deployment_id} kept changing; gave up after {self._max_attempts} attempts"
        )

    @staticmethod
    def _steps_to_data(steps: list[Step]) -> list[dict[str, object]]:
        return [step.model_dump(mode="json") for step in steps]

    def _to_orm(self, deployment: Deployment) -> DeploymentORM:
        return DeploymentORM(
            id=deployment.id,
            project_id=deployment.project_id,
            space_id=deployment.space_id,
            deployment_name=deployment.deployment_name,
            started_at=deployment.started_at,
            steps_data=self._steps_to_data(deployment.steps),
            version=deployment.version,
            created_at=deployment.created_at,
            updated_at=deployment.updated_at,
        )

    def _to_domain(self, orm: DeploymentORM) -> Deployment:
        return Deployment(
            id=orm.id,
            project_id=orm.project_id,
            space_id=orm.space_id,
            deployment_name=orm.deployment_name,
            started_at=orm.started_at,
            steps=[Step.model_validate(s) for s in (orm.steps_data or [])],
            version=orm.version,
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )
