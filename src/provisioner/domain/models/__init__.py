"""Domain models package."""

from provisioner.domain.models.base import (
    DomainEntity,
    DomainEvent,
    generate_id,
    utc_now,
    ValueObject,
)
from provisioner.domain.models.deployment import (
    APPENDABLE_KINDS,
    Deployment,
    DeploymentIdentity,
    derive_status,
    Step,
    StepKind,
    StepStatus,
)
from provisioner.domain.models.execution import (
    ApplySummary,
    DestroySummary,
    ExecutionResult,
    NoSummary,
    PlanChanges,
    PlanReport,
    PlanSummary,
    ResourceChange,
    Summary,
)
from provisioner.domain.models.project import Project


__all__ = [
    "APPENDABLE_KINDS",
    "ApplySummary",
    "Deployment",
    "DeploymentIdentity",
    "DestroySummary",
    "DomainEntity",
    "DomainEvent",
    "ExecutionResult",
    "NoSummary",
    "PlanChanges",
    "PlanReport",
    "PlanSummary",
    "Project",
    "ResourceChange",
    "Step",
    "StepKind",
    "StepStatus",
    "Summary",
    "ValueObject",
    "derive_status",
    "generate_id",
    "utc_now",
]
