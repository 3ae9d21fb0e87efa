"""Application configuration using pydantic-settings."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class ExecutionBackend(str, Enum):
    DOCKER = "docker"
    LOCAL = "local"


class PersistenceBackend(str, Enum):
    MEMORY = "memory"
    POSTGRES = "postgres"


class LockBackend(str, Enum):
    MEMORY = "memory"
    REDIS = "redis"


class ExecutionSettings(BaseSettings):
    """Execution environment and command runner configuration."""

    image_name: str = Field(default="", alias="DOCKER_IMAGE_NAME")
    docker_binary: str = Field(default="docker", alias="DOCKER_BINARY")
    backend: ExecutionBackend = Field(default=ExecutionBackend.DOCKER, alias="EXECUTION_BACKEND")
    workspace_root: str = Field(default="/workspace", alias="WORKSPACE_ROOT")
    enable_logging: bool = Field(default=False, alias="TOFU_ENABLE_LOGGING")
    log_read_timeout_seconds: float = Field(default=3.0, alias="LOG_READ_TIMEOUT_SECONDS")
    # Renewed every ttl/3 while a chain runs; bounds how long a dead holder blocks
    workspace_lock_ttl: int = Field(default=900, alias="WORKSPACE_LOCK_TTL")

    model_config = {"extra": "ignore", "populate_by_name": True}


class DatabaseSettings(BaseSettings):
    """Database configuration."""

    host: str = Field(default="localhost", alias="DB_HOST")
    port: int = Field(default=5432, alias="DB_PORT")
    name: str = Field(default="provisioner", alias="DB_NAME")
    user: str = Field(default="provisioner", alias="DB_USER")
    password: str = Field(default="", alias="DB_PASSWORD")
    pool_size: int = Field(default=10, alias="DB_POOL_SIZE")
    max_overflow: int = Field(default=10, alias="DB_MAX_OVERFLOW")
    pool_timeout: int = Field(default=30, alias="DB_POOL_TIMEOUT")

    @property
    def async_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.name}"
        )

    model_config = {"env_prefix": "DB_", "extra": "ignore", "populate_by_name": True}


class RedisSettings(BaseSettings):
    """Redis configuration."""

    host: str = Field(default="localhost", alias="REDIS_HOST")
    port: int = Field(default=6379, alias="REDIS_PORT")
    password: str = Field(default="", alias="REDIS_PASSWORD")
    db: int = Field(default=0, alias="REDIS_DB")

    @property
    def url(self) -> str:
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"

    model_config = {"env_prefix": "REDIS_", "extra": "ignore", "populate_by_name": True}


class ObservabilitySettings(BaseSettings):
    """Observability configuration."""

    otlp_endpoint: str = Field(default="http://localhost:4317", alias="OTLP_ENDPOINT")
    service_name: str = Field(default="tofu-provisioner", alias="SERVICE_NAME")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    metrics_enabled: bool = Field(default=True, alias="METRICS_ENABLED")
    tracing_enabled: bool = Field(default=False, alias="TRACING_ENABLED")

    model_config = {"env_prefix": "OBS_", "extra": "ignore", "populate_by_name": True}


class RateLimitSettings(BaseSettings):
    """Rate limiting configuration."""

    requests_per_minute: int = Field(default=60, alias="RATE_LIMIT_RPM")
    burst_size: int = Field(default=10, alias="RATE_LIMIT_BURST")

    model_config = {"env_prefix": "RATE_LIMIT_", "extra": "ignore", "populate_by_name": True}


class Settings(BaseSettings):
    """Main application settings."""

    environment: Environment = Field(default=Environment.DEVELOPMENT, alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    api_prefix: str = Field(default="/api/v1", alias="API_PREFIX")
    host: str = Field(default="0.0.0.0", alias="HOST")  # noqa: S104
    port: int = Field(default=8000, alias="PORT")
    workers: int = Field(default=1, alias="WORKERS")
    persistence_backend: PersistenceBackend = Field(
        default=PersistenceBackend.MEMORY, alias="PERSISTENCE_BACKEND"
    )
    lock_backend: LockBackend = Field(default=LockBackend.MEMORY, alias="LOCK_BACKEND")
    # project_id -> project_name, for the in-memory project directory
    projects: dict[str, str] = Field(default_factory=dict, alias="PROJECTS")

    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True}


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
