"""Deployment domain events."""

from __future__ import annotations

from provisioner.domain.models.base import DomainEvent


class DeploymentCreated(DomainEvent):
    """Emitted when a deployment is created by its first init run."""

    deployment_id: str
    project_id: str
    space_id: str
    deployment_name: str
    event_type: str = "deployment.created"


class StepRecorded(DomainEvent):
    """Emitted when a step is stored on a deployment."""

    deployment_id: str
    kind: str
    status: str
    event_type: str = "deployment.step_recorded"


class StepCancelled(DomainEvent):
    """Emitted when a step is cancelled by the user."""

    deployment_id: str
    kind: str
    event_type: str = "deployment.step_cancelled"
