"""In-memory repository implementations for development and testing."""

from __future__ import annotations

from typing import TypeVar

from provisioner.domain.models.deployment import Deployment
from provisioner.domain.models.project import Project
from provisioner.domain.ports.repositories import (
    DeploymentMutation,
    DeploymentRepository,
    ProjectDirectory,
)


T = TypeVar("T")

# Module-level shared stores enable cross-instance access in the API
# while keeping a single clear point for test isolation.
_deployment_store: dict[str, Deployment] = {}
_project_store: dict[str, Project] = {}


class InMemoryDeploymentRepository(DeploymentRepository):
    """In-memory deployment repository.

    ``mutate`` works on a copy and swaps it in without awaiting in between,
    so it cannot interleave with another coroutine's write.
    """

    def __init__(self) -> None:
        self._store = _deployment_store

    async def create(self, deployment: Deployment) -> Deployment:
        self._store[deployment.id] = deployment.model_copy(deep=True)
        return deployment

    async def get_by_id(self, deployment_id: str) -> Deployment | None:
        deployment = self._store.get(deployment_id)
        return deployment.model_copy(deep=True) if deployment else None

    async def mutate(
        self, deployment_id: str, mutation: DeploymentMutation[T]
    ) -> tuple[Deployment, T] | None:
        stored = self._store.get(deployment_id)
        if stored is None:
            return None
        working = stored.model_copy(deep=True)
        value = mutation(working)
        self._store[deployment_id] = working
        return working.model_copy(deep=True), value

    @classmethod
    def clear(cls) -> None:
        """Clear the shared store. Used by test fixtures for isolation."""
        _deployment_store.clear()


class InMemoryProjectDirectory(ProjectDirectory):
    """Project lookup backed by a dict, seeded from configuration."""

    def __init__(self, projects: dict[str, str] | None = None) -> None:
        self._store = _project_store
        for project_id, project_name in (projects or {}).items():
            self.add(Project(project_id=project_id, project_name=project_name))

    def add(self, project: Project) -> None:
        self._store[project.project_id] = project

    async def get_by_id(self, project_id: str) -> Project | None:
        return self._store.get(project_id)

    @classmethod
    def clear(cls) -> None:
        """Clear the shared store. Used by test fixtures for isolation."""
        _project_store.clear()
