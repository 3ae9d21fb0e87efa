"""Execution environment discovery through the docker CLI."""

from __future__ import annotations

import asyncio

import structlog

from provisioner.domain.errors import ConfigurationError
from provisioner.domain.ports.services import EnvironmentDiscovery


logger = structlog.get_logger(__name__)

DISCOVERY_TIMEOUT_SECONDS = 10.0


class DockerEnvironmentDiscovery(EnvironmentDiscovery):
    """Lists running containers started from an image, newest first."""

    def __init__(
        self,
        docker_binary: str = "docker",
        timeout: float = DISCOVERY_TIMEOUT_SECONDS,
    ) -> None:
        self._docker = docker_binary
        self._timeout = timeout

    async def list_candidates(self, image: str) -> list[str]:
        argv = [self._docker, "ps", "-q", "--filter", f"ancestor={image}"]
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ConfigurationError(f"Could not run {self._docker}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise ConfigurationError(f"Listing containers for {image} timed out") from e

        if process.returncode != 0:
            logger.error(
                "environment_discovery_failed",
                image=image,
                exit_code=process.returncode,
                stderr=stderr.decode("utf-8", errors="replace").strip(),
            )
            return []

        return [line.strip() for line in stdout.decode("utf-8").splitlines() if line.strip()]


class StaticEnvironmentDiscovery(EnvironmentDiscovery):
    """Fixed candidate list, for local execution and tests."""

    def __init__(self, candidates: list[str] | None = None) -> None:
        self._candidates = list(candidates if candidates is not None else ["local"])

    async def list_candidates(self, image: str) -> list[str]:  # noqa: ARG002
        return list(self._candidates)
