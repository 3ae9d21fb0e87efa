"""Execution results and the structured summaries derived from tool output."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import Field

from provisioner.domain.models.base import ValueObject


class PlanSummary(ValueObject):
    """Tally printed by ``tofu plan``."""

    kind: Literal["plan"] = "plan"
    to_add: int
    to_change: int
    to_destroy: int


class ApplySummary(ValueObject):
    """Tally printed by ``tofu apply``."""

    kind: Literal["apply"] = "apply"
    added: int
    changed: int
    destroyed: int


class DestroySummary(ValueObject):
    """Tally printed by ``tofu destroy``."""

    kind: Literal["destroy"] = "destroy"
    destroyed: int


class NoSummary(ValueObject):
    """No recognised tally line in the output."""

    kind: Literal["none"] = "none"


Summary = Annotated[
    Union[PlanSummary, ApplySummary, DestroySummary, NoSummary],
    Field(discriminator="kind"),
]


class ExecutionResult(ValueObject):
    """Captured outcome of one command chain.

    ``exit_code`` is ``None`` when the process was terminated by a signal.
    ``combined`` preserves arrival order of both streams.
    """

    exit_code: int | None
    stdout: str = ""
    stderr: str = ""
    combined: str = ""
    log_file_content: str = ""
    summary: Summary = Field(default_factory=NoSummary)

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def message(self) -> str:
        """Text recorded on a ledger step."""
        return self.combined or self.stdout or self.stderr


class PlanChanges(ValueObject):
    add: int
    change: int
    destroy: int


class ResourceChange(ValueObject):
    action: Literal["create", "update", "delete"]
    type: str
    name: str


class PlanReport(ValueObject):
    """Presentation-oriented view of a plan's human-readable output."""

    changes: PlanChanges | None = None
    resource_changes: list[ResourceChange] = Field(default_factory=list)
    no_changes: bool = False
