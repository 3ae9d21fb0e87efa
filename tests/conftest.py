"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from provisioner.config import Environment, ExecutionBackend, ExecutionSettings, Settings
from provisioner.domain.models.execution import ExecutionResult
from provisioner.domain.models.project import Project
from provisioner.domain.ports.services import CommandRunner
from provisioner.domain.services.environment_selector import EnvironmentSelector
from provisioner.domain.services.ledger import DeploymentLedger
from provisioner.domain.services.provisioning_service import ProvisioningService
from provisioner.domain.services.summarizer import summarize
from provisioner.infrastructure.identity.allocator import TimestampIdentityAllocator
from provisioner.infrastructure.messaging.event_publisher import InMemoryEventPublisher
from provisioner.infrastructure.persistence.repositories.in_memory import (
    InMemoryDeploymentRepository,
    InMemoryProjectDirectory,
)
from provisioner.infrastructure.runtime.docker_discovery import StaticEnvironmentDiscovery


PLAN_OUTPUT = """
OpenTofu used the selected providers to generate the following execution plan.

  + resource "aws_s3_bucket" "assets" {
      + bucket = "assets"
    }

  ~ resource "aws_instance" "web" {
      ~ instance_type = "t3.small" -> "t3.medium"
    }

  - resource "aws_eip" "legacy" {
    }

Plan: 1 to add, 1 to change, 1 to destroy.
"""

APPLY_OUTPUT = "aws_s3_bucket.assets: Creating...\nApply complete! Resources: 1 added, 1 changed, 1 destroyed.\n"


def make_result(exit_code: int | None = 0, stdout: str = "ok\n", stderr: str = "") -> ExecutionResult:
    return ExecutionResult(
        exit_code=exit_code,
        stdout=stdout,
        stderr=stderr,
        combined=f"{stdout}{stderr}",
        summary=summarize(stdout),
    )


class FakeCommandRunner(CommandRunner):
    """Records invocations and replays queued results."""

    def __init__(self) -> None:
        self.calls: list[dict[str, object]] = []
        self.results: list[ExecutionResult] = []

    def queue(self, *results: ExecutionResult) -> None:
        self.results.extend(results)

    async def execute(
        self,
        environment_id: str,
        workspace_path: str,
        commands: Sequence[str],
        enable_logging: bool = False,
    ) -> ExecutionResult:
        self.calls.append({
            "environment_id": environment_id,
            "workspace_path": workspace_path,
            "commands": list(commands),
            "enable_logging": enable_logging,
        })
        return self.results.pop(0) if self.results else make_result()


@pytest.fixture(autouse=True)
def clear_stores() -> None:
    """Clear in-memory stores before each test."""
    InMemoryDeploymentRepository.clear()
    InMemoryProjectDirectory.clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment=Environment.TESTING,
        debug=True,
        execution=ExecutionSettings(backend=ExecutionBackend.LOCAL, image_name="tofu-runner"),
        projects={"proj-1": "webshop"},
    )


@pytest.fixture
def deployment_repo() -> InMemoryDeploymentRepository:
    return InMemoryDeploymentRepository()


@pytest.fixture
def project_directory() -> InMemoryProjectDirectory:
    return InMemoryProjectDirectory({"proj-1": "webshop"})


@pytest.fixture
def sample_project() -> Project:
    return Project(project_id="proj-1", project_name="webshop")


@pytest.fixture
def event_publisher() -> InMemoryEventPublisher:
    return InMemoryEventPublisher()


@pytest.fixture
def ledger(
    deployment_repo: InMemoryDeploymentRepository,
    event_publisher: InMemoryEventPublisher,
) -> DeploymentLedger:
    return DeploymentLedger(
        deployment_repo=deployment_repo,
        identity_allocator=TimestampIdentityAllocator(),
        event_publisher=event_publisher,
    )


@pytest.fixture
def command_runner() -> FakeCommandRunner:
    return FakeCommandRunner()


@pytest.fixture
def provisioning_service(
    project_directory: InMemoryProjectDirectory,
    command_runner: FakeCommandRunner,
    ledger: DeploymentLedger,
) -> ProvisioningService:
    return ProvisioningService(
        projects=project_directory,
        environment_selector=EnvironmentSelector(
            StaticEnvironmentDiscovery(["container-a", "container-b"]), "tofu-runner"
        ),
        command_runner=command_runner,
        ledger=ledger,
    )


@pytest.fixture
def result_factory():  # noqa: ANN201
    return make_result


@pytest.fixture
def plan_output() -> str:
    return PLAN_OUTPUT


@pytest.fixture
def apply_output() -> str:
    return APPLY_OUTPUT
