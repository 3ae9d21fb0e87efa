"""Repository port interfaces (hexagonal architecture)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TypeVar

from provisioner.domain.models.deployment import Deployment
from provisioner.domain.models.project import Project


T = TypeVar("T")

DeploymentMutation = Callable[[Deployment], T]


class DeploymentRepository(ABC):
    """Port for deployment persistence.

    ``mutate`` is the only write path for existing deployments. It must apply
    the mutation atomically per deployment: concurrent mutations of the same
    document never lose updates, and a mutation that raises leaves the stored
    document unchanged.
    """

    @abstractmethod
    async def create(self, deployment: Deployment) -> Deployment:
        """Persist a new deployment."""

    @abstractmethod
    async def get_by_id(self, deployment_id: str) -> Deployment | None:
        """Retrieve a deployment by ID."""

    @abstractmethod
    async def mutate(
        self, deployment_id: str, mutation: DeploymentMutation[T]
    ) -> tuple[Deployment, T] | None:
        """Atomically apply ``mutation`` and store the result.

        Returns the stored deployment with the mutation's return value, or
        ``None`` when the deployment does not exist.
        """


class ProjectDirectory(ABC):
    """Port for project lookup (projects are managed elsewhere)."""

    @abstractmethod
    async def get_by_id(self, project_id: str) -> Project | None:
        """Resolve a project by ID."""
