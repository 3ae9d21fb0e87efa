"""Repository implementations."""

from provisioner.infrastructure.persistence.repositories.deployment_repo import (
    PostgresDeploymentRepository,
)
from provisioner.infrastructure.persistence.repositories.in_memory import (
    InMemoryDeploymentRepository,
    InMemoryProjectDirectory,
)
from provisioner.infrastructure.persistence.repositories.project_repo import (
    PostgresProjectDirectory,
)


__all__ = [
    "InMemoryDeploymentRepository",
    "InMemoryProjectDirectory",
    "PostgresDeploymentRepository",
    "PostgresProjectDirectory",
]
