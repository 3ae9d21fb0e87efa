"""Service dependencies for FastAPI dependency injection."""

from __future__ import annotations

from provisioner.config import (
    ExecutionBackend,
    get_settings,
    LockBackend,
    PersistenceBackend,
    Settings,
)
from provisioner.domain.ports.repositories import DeploymentRepository, ProjectDirectory
from provisioner.domain.ports.services import (
    CommandRunner,
    DistributedLock,
    EnvironmentDiscovery,
    EventPublisher,
)
from provisioner.domain.services.environment_selector import EnvironmentSelector
from provisioner.domain.services.ledger import DeploymentLedger
from provisioner.domain.services.provisioning_service import ProvisioningService
from provisioner.infrastructure.identity.allocator import TimestampIdentityAllocator
from provisioner.infrastructure.locking.memory_lock import InMemoryDistributedLock
from provisioner.infrastructure.locking.redis_lock import (
    create_redis_client,
    RedisDistributedLock,
)
from provisioner.infrastructure.messaging.event_publisher import InMemoryEventPublisher
from provisioner.infrastructure.observability.metrics import count_recorded_step
from provisioner.infrastructure.persistence.database import DatabaseManager
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
from provisioner.infrastructure.runtime.command_runner import (
    DockerExecCommandRunner,
    LocalShellCommandRunner,
)
from provisioner.infrastructure.runtime.docker_discovery import (
    DockerEnvironmentDiscovery,
    StaticEnvironmentDiscovery,
)


class ServiceContainer:
    """Simple dependency injection container.

    Implements the Composition Root pattern: every adapter is chosen from
    settings here and nowhere else.
    """

    _instance: ServiceContainer | None = None

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        execution = self._settings.execution

        self._event_publisher = InMemoryEventPublisher()
        self._event_publisher.subscribe("deployment.step_recorded", count_recorded_step)
        self._database: DatabaseManager | None = None

        self._command_runner: CommandRunner
        self._discovery: EnvironmentDiscovery
        if execution.backend == ExecutionBackend.LOCAL:
            self._command_runner = LocalShellCommandRunner(
                log_read_timeout=execution.log_read_timeout_seconds,
            )
            self._discovery = StaticEnvironmentDiscovery()
            self._image = execution.image_name or "local"
        else:
            self._command_runner = DockerExecCommandRunner(
                docker_binary=execution.docker_binary,
                log_read_timeout=execution.log_read_timeout_seconds,
            )
            self._discovery = DockerEnvironmentDiscovery(docker_binary=execution.docker_binary)
            self._image = execution.image_name

        self._deployment_repo: DeploymentRepository
        self._projects: ProjectDirectory
        if self._settings.persistence_backend == PersistenceBackend.POSTGRES:
            self._database = DatabaseManager(self._settings.database)
            self._deployment_repo = PostgresDeploymentRepository(self._database)
            self._projects = PostgresProjectDirectory(self._database)
        else:
            self._deployment_repo = InMemoryDeploymentRepository()
            self._projects = InMemoryProjectDirectory(self._settings.projects)

        self._lock_service: DistributedLock | None = None
        self._provisioning_service: ProvisioningService | None = None

    @classmethod
    def get_instance(cls) -> ServiceContainer:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def database(self) -> DatabaseManager | None:
        return self._database

    @property
    def event_publisher(self) -> EventPublisher:
        return self._event_publisher

    @property
    def command_runner(self) -> CommandRunner:
        return self._command_runner

    @property
    def deployment_repo(self) -> DeploymentRepository:
        return self._deployment_repo

    @property
    def projects(self) -> ProjectDirectory:
        return self._projects

    @property
    def lock_service(self) -> DistributedLock:
        if self._lock_service is None:
            if self._settings.lock_backend == LockBackend.REDIS:
                client = create_redis_client(self._settings.redis)
                self._lock_service = RedisDistributedLock(client)
            else:
                self._lock_service = InMemoryDistributedLock()
        return self._lock_service

    @property
    def provisioning_service(self) -> ProvisioningService:
        if self._provisioning_service is None:
            execution = self._settings.execution
            ledger = DeploymentLedger(
                deployment_repo=self._deployment_repo,
                identity_allocator=TimestampIdentityAllocator(),
                event_publisher=self._event_publisher,
            )
            self._provisioning_service = ProvisioningService(
                projects=self._projects,
                environment_selector=EnvironmentSelector(self._discovery, self._image),
                command_runner=self._command_runner,
                ledger=ledger,
                workspace_root=execution.workspace_root,
                enable_logging=execution.enable_logging,
            )
        return self._provisioning_service


def get_service_container() -> ServiceContainer:
    return ServiceContainer.get_instance()
