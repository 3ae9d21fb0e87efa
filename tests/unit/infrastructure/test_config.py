"""Unit tests for application configuration."""

from __future__ import annotations

import pytest

from provisioner.config import (
    DatabaseSettings,
    Environment,
    ExecutionBackend,
    ExecutionSettings,
    LockBackend,
    ObservabilitySettings,
    PersistenceBackend,
    RateLimitSettings,
    RedisSettings,
    Settings,
)


class TestExecutionSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DOCKER_IMAGE_NAME", raising=False)
        monkeypatch.delenv("TOFU_ENABLE_LOGGING", raising=False)
        settings = ExecutionSettings()
        assert settings.image_name == ""
        assert settings.backend == ExecutionBackend.DOCKER
        assert settings.workspace_root == "/workspace"
        assert settings.enable_logging is False
        assert settings.log_read_timeout_seconds == 3.0

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOCKER_IMAGE_NAME", "tofu-runner:1.8")
        monkeypatch.setenv("TOFU_ENABLE_LOGGING", "true")
        monkeypatch.setenv("EXECUTION_BACKEND", "local")
        settings = ExecutionSettings()
        assert settings.image_name == "tofu-runner:1.8"
        assert settings.enable_logging is True
        assert settings.backend == ExecutionBackend.LOCAL


class TestDatabaseSettings:
    def test_async_url(self) -> None:
        settings = DatabaseSettings(host="db", port=5432, name="test", user="u", password="p")
        assert settings.async_url == "postgresql+asyncpg://u:p@db:5432/test"


class TestRedisSettings:
    def test_url_without_password(self) -> None:
        settings = RedisSettings(host="redis", port=6379, password="", db=0)
        assert settings.url == "redis://redis:6379/0"

    def test_url_with_password(self) -> None:
        settings = RedisSettings(host="redis", port=6379, password="secret", db=1)
        assert settings.url == "redis://:secret@redis:6379/1"


class TestObservabilitySettings:
    def test_defaults(self) -> None:
        settings = ObservabilitySettings()
        assert settings.log_level == "INFO"
        assert settings.metrics_enabled is True
        assert settings.tracing_enabled is False


class TestRateLimitSettings:
    def test_defaults(self) -> None:
        settings = RateLimitSettings()
        assert settings.requests_per_minute == 60
        assert settings.burst_size == 10


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("ENVIRONMENT", "PERSISTENCE_BACKEND", "LOCK_BACKEND", "PROJECTS"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings()
        assert settings.environment == Environment.DEVELOPMENT
        assert settings.api_prefix == "/api/v1"
        assert settings.persistence_backend == PersistenceBackend.MEMORY
        assert settings.lock_backend == LockBackend.MEMORY
        assert settings.projects == {}

    def test_projects_from_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROJECTS", '{"proj-1": "webshop"}')
        assert Settings().projects == {"proj-1": "webshop"}

    def test_nested_settings(self) -> None:
        settings = Settings()
        assert isinstance(settings.execution, ExecutionSettings)
        assert isinstance(settings.database, DatabaseSettings)
        assert isinstance(settings.redis, RedisSettings)
