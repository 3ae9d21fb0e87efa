"""Deployment identity allocation."""

from __future__ import annotations

import re

from provisioner.domain.models.base import generate_id, utc_now
from provisioner.domain.models.deployment import DeploymentIdentity
from provisioner.domain.ports.services import IdentityAllocator


NAME_UNSAFE_PATTERN = re.compile(r"[^A-Za-z0-9_.-]+")


def _slug(value: str) -> str:
    return NAME_UNSAFE_PATTERN.sub("-", value).strip("-").lower() or "unnamed"


class TimestampIdentityAllocator(IdentityAllocator):
    """Random id plus a readable ``<project>-<space>-<utc timestamp>`` name."""

    async def allocate(self, project_name: str, space_name: str) -> DeploymentIdentity:
        stamp = utc_now().strftime("%Y%m%d-%H%M%S")
        return DeploymentIdentity(
            deployment_id=generate_id(),
            deployment_name=f"{_slug(project_name)}-{_slug(space_name)}-{stamp}",
        )
