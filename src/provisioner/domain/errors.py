"""Domain error taxonomy.

Every error raised by the core derives from :class:`ProvisionerError`. The API
layer maps each family onto a status code; non-zero tool exit codes are never
errors and are recorded as failed steps instead.
"""

from __future__ import annotations


class ProvisionerError(Exception):
    """Base class for all provisioner errors."""


class ValidationError(ProvisionerError):
    """A required field is missing or malformed."""


class NotFoundError(ProvisionerError):
    """A referenced entity does not exist."""


class ProjectNotFoundError(NotFoundError):
    """Raised when a project lookup yields nothing."""


class DeploymentNotFoundError(NotFoundError):
    """Raised when a deployment is not found."""


class StepNotFoundError(NotFoundError):
    """Raised when a deployment has no step of the requested kind."""


class ConfigurationError(ProvisionerError):
    """The service is not configured to reach an execution environment."""


class SpawnError(ProvisionerError):
    """The command runner could not start a process at all."""

    def __init__(self, message: str, argv: list[str] | None = None) -> None:
        super().__init__(message)
        self.argv = list(argv or [])


class WorkspaceBusyError(ProvisionerError):
    """Another command chain holds the workspace."""


class InvalidStepKindError(ValidationError):
    """The step kind is not allowed for the requested ledger operation."""


class ConcurrentUpdateError(ProvisionerError):
    """A ledger write kept losing the optimistic concurrency race."""
