"""Domain events package."""

from provisioner.domain.events.deployment_events import (
    DeploymentCreated,
    StepCancelled,
    StepRecorded,
)


__all__ = [
    "DeploymentCreated",
    "StepCancelled",
    "StepRecorded",
]
