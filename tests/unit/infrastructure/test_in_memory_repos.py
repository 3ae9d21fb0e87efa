"""Unit tests for in-memory repository implementations."""

from __future__ import annotations

import pytest

from provisioner.domain.errors import StepNotFoundError
from provisioner.domain.models.deployment import Deployment, Step, StepKind, StepStatus
from provisioner.domain.ports.repositories import DeploymentRepository
from provisioner.infrastructure.persistence.repositories.in_memory import (
    InMemoryDeploymentRepository,
    InMemoryProjectDirectory,
)


def _make_deployment() -> Deployment:
    return Deployment(
        project_id="proj-1",
        space_id="dev",
        deployment_name="webshop-dev-20260101-000000",
        steps=[Step(kind=StepKind.INIT, status=StepStatus.SUCCESSFUL)],
    )


class TestInMemoryDeploymentRepository:
    def test_port_surface(self) -> None:
        assert DeploymentRepository.__abstractmethods__ == {"create", "get_by_id", "mutate"}

    @pytest.mark.asyncio
    async def test_create_and_get(self) -> None:
        repo = InMemoryDeploymentRepository()
        d = _make_deployment()
        await repo.create(d)
        result = await repo.get_by_id(d.id)
        assert result is not None
        assert result.id == d.id

    @pytest.mark.asyncio
    async def test_get_nonexistent(self) -> None:
        repo = InMemoryDeploymentRepository()
        assert await repo.get_by_id("nope") is None

    @pytest.mark.asyncio
    async def test_returned_copies_are_detached(self) -> None:
        repo = InMemoryDeploymentRepository()
        d = _make_deployment()
        await repo.create(d)

        fetched = await repo.get_by_id(d.id)
        assert fetched is not None
        fetched.steps.append(Step(kind=StepKind.PLAN, status=StepStatus.SUCCESSFUL))

        again = await repo.get_by_id(d.id)
        assert again is not None
        assert len(again.steps) == 1

    @pytest.mark.asyncio
    async def test_mutate_persists_and_returns_value(self) -> None:
        repo = InMemoryDeploymentRepository()
        d = _make_deployment()
        await repo.create(d)

        outcome = await repo.mutate(
            d.id, lambda dep: dep.append_step(Step(kind=StepKind.PLAN, status=StepStatus.FAILED))
        )

        assert outcome is not None
        updated, value = outcome
        assert value is None
        assert len(updated.steps) == 2
        stored = await repo.get_by_id(d.id)
        assert stored is not None
        assert stored.version == 2

    @pytest.mark.asyncio
    async def test_mutate_missing(self) -> None:
        repo = InMemoryDeploymentRepository()
        assert await repo.mutate("nope", lambda dep: None) is None

    @pytest.mark.asyncio
    async def test_failed_mutation_writes_nothing(self) -> None:
        repo = InMemoryDeploymentRepository()
        d = _make_deployment()
        await repo.create(d)

        with pytest.raises(StepNotFoundError):
            await repo.mutate(d.id, lambda dep: dep.cancel_step(StepKind.PLAN))

        stored = await repo.get_by_id(d.id)
        assert stored is not None
        assert stored.version == 1

    @pytest.mark.asyncio
    async def test_shared_between_instances(self) -> None:
        d = _make_deployment()
        await InMemoryDeploymentRepository().create(d)
        assert await InMemoryDeploymentRepository().get_by_id(d.id) is not None


class TestInMemoryProjectDirectory:
    @pytest.mark.asyncio
    async def test_seeded_lookup(self) -> None:
        directory = InMemoryProjectDirectory({"proj-1": "webshop"})
        project = await directory.get_by_id("proj-1")
        assert project is not None
        assert project.project_name == "webshop"

    @pytest.mark.asyncio
    async def test_unknown(self) -> None:
        directory = InMemoryProjectDirectory()
        assert await directory.get_by_id("nope") is None
