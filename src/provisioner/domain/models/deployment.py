"""Deployment aggregate root and its step history."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from provisioner.domain.errors import InvalidStepKindError, StepNotFoundError
from provisioner.domain.models.base import DomainEntity, utc_now, ValueObject
from provisioner.domain.models.execution import ExecutionResult


class StepKind(str, Enum):
    """Tool command a step records."""

    INIT = "init"
    PLAN = "plan"
    APPLY = "apply"
    DESTROY = "destroy"


class StepStatus(str, Enum):
    """Outcome of a recorded step."""

    SUCCESSFUL = "successful"
    FAILED = "failed"
    CANCELLED = "cancelled"


APPENDABLE_KINDS: frozenset[StepKind] = frozenset(
    {StepKind.PLAN, StepKind.APPLY, StepKind.DESTROY}
)


def derive_status(result: ExecutionResult) -> StepStatus:
    """Map an execution result onto a step status.

    ``cancelled`` is never derived; only an explicit cancel produces it.
    """
    return StepStatus.SUCCESSFUL if result.exit_code == 0 else StepStatus.FAILED


class Step(ValueObject):
    """A single immutable entry in a deployment's history."""

    kind: StepKind
    status: StepStatus
    message: str = ""
    log_file_content: str | None = None
    timestamp: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_result(cls, kind: StepKind, result: ExecutionResult) -> Step:
        return cls(
            kind=kind,
            status=derive_status(result),
            message=result.message,
            log_file_content=result.log_file_content or None,
        )

    def cancelled(self) -> Step:
        return self.model_copy(
            update={"status": StepStatus.CANCELLED, "timestamp": utc_now()}
        )


class DeploymentIdentity(ValueObject):
    """Externally allocated deployment id and human-readable name."""

    deployment_id: str
    deployment_name: str


class Deployment(DomainEntity):
    """Deployment aggregate root.

    ``id`` is the allocated deployment id. ``steps`` is kept in insertion order
    and forms the chronological audit trail of the workspace.
    """

    project_id: str
    space_id: str
    deployment_name: str
    started_at: datetime = Field(default_factory=utc_now)
    steps: list[Step] = Field(default_factory=list)

    @property
    def deployment_id(self) -> str:
        return self.id

    @property
    def identity(self) -> DeploymentIdentity:
        return DeploymentIdentity(
            deployment_id=self.id, deployment_name=self.deployment_name
        )

    def steps_of(self, kind: StepKind) -> list[Step]:
        return [step for step in self.steps if step.kind == kind]

    def latest_step(self, kind: StepKind) -> Step | None:
        matching = self.steps_of(kind)
        return matching[-1] if matching else None

    def replace_init_step(self, step: Step) -> None:
        """Drop any previous init entry and append ``step``."""
        if step.kind != StepKind.INIT:
            raise InvalidStepKindError(f"Expected an init step, got {step.kind.value}")
        self.steps = [s for s in self.steps if s.kind != StepKind.INIT] + [step]
        self.touch()

    def append_step(self, step: Step) -> None:
        """Append a plan/apply/destroy entry; history is never replaced."""
        if step.kind not in APPENDABLE_KINDS:
            raise InvalidStepKindError(
                f"Step kind {step.kind.value} cannot be appended; "
                f"allowed: {sorted(k.value for k in APPENDABLE_KINDS)}"
            )
        self.steps = [*self.steps, step]
        self.touch()

    def cancel_step(self, kind: StepKind) -> Step:
        """Mark the first recorded step of ``kind`` as cancelled, in place.

        Later entries of the same kind keep their status.
        """
        for index, step in enumerate(self.steps):
            if step.kind == kind:
                updated = step.cancelled()
                steps = list(self.steps)
                steps[index] = updated
                self.steps = steps
                self.touch()
                return updated
        raise StepNotFoundError(
            f"{kind.value.capitalize()} step not found for deployment {self.id}"
        )
