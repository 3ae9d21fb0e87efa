"""Service port interfaces (hexagonal architecture)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from provisioner.domain.models.deployment import DeploymentIdentity
from provisioner.domain.models.execution import ExecutionResult


class CommandRunner(ABC):
    """Port for running command chains inside an execution environment."""

    @abstractmethod
    async def execute(
        self,
        environment_id: str,
        workspace_path: str,
        commands: Sequence[str],
        enable_logging: bool = False,
    ) -> ExecutionResult:
        """Run ``cd workspace_path && cmd1 && cmd2 ...`` and capture its output.

        A non-zero exit code is returned as data. Raises ``SpawnError`` only
        when the process cannot be started.
        """


class EnvironmentDiscovery(ABC):
    """Port for discovering execution environments by image label."""

    @abstractmethod
    async def list_candidates(self, image: str) -> list[str]:
        """Return candidate environment ids for ``image`` in preference order."""


class IdentityAllocator(ABC):
    """Port for minting identities of new deployments."""

    @abstractmethod
    async def allocate(self, project_name: str, space_name: str) -> DeploymentIdentity:
        """Allocate a deployment id and name."""


class EventPublisher(ABC):
    """Port for publishing domain events."""

    @abstractmethod
    async def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        """Publish an event."""

    @abstractmethod
    async def publish_batch(self, events: list[tuple[str, dict[str, Any]]]) -> None:
        """Publish a batch of events."""


class DistributedLock(ABC):
    """Port for distributed locking."""

    @abstractmethod
    async def acquire(self, resource_id: str, ttl_seconds: int = 30) -> bool:
        """Acquire a lock."""

    @abstractmethod
    async def release(self, resource_id: str) -> bool:
        """Release a lock."""

    @abstractmethod
    async def extend(self, resource_id: str, ttl_seconds: int = 30) -> bool:
        """Reset the expiry of a lock this process holds."""

    @abstractmethod
    async def is_locked(self, resource_id: str) -> bool:
        """Check if a resource is locked."""
