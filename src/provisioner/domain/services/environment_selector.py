"""Execution environment selection."""

from __future__ import annotations

from collections.abc import Callable, Sequence

import structlog

from provisioner.domain.errors import ConfigurationError
from provisioner.domain.ports.services import EnvironmentDiscovery


logger = structlog.get_logger(__name__)

SelectionStrategy = Callable[[Sequence[str]], str]


def first_candidate(candidates: Sequence[str]) -> str:
    return candidates[0]


class EnvironmentSelector:
    """Pick the execution environment a command chain runs in.

    Discovery and the selection strategy are injected separately so the
    strategy can change without touching discovery or the runner.
    """

    def __init__(
        self,
        discovery: EnvironmentDiscovery,
        image: str,
        strategy: SelectionStrategy = first_candidate,
    ) -> None:
        self._discovery = discovery
        self._image = image
        self._strategy = strategy

    async def select(self) -> str:
        if not self._image:
            raise ConfigurationError("DOCKER_IMAGE_NAME environment variable is not set")

        candidates = await self._discovery.list_candidates(self._image)
        if not candidates:
            raise ConfigurationError(f"No containers found for the image {self._image}")

        environment_id = self._strategy(candidates)
        logger.debug(
            "environment_selected",
            image=self._image,
            environment_id=environment_id,
            candidates=len(candidates),
        )
        return environment_id
