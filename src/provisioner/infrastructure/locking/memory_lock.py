"""In-process lock for single-instance deployments and tests."""

from __future__ import annotations

import time

from provisioner.domain.ports.services import DistributedLock


class InMemoryDistributedLock(DistributedLock):
    """TTL-bounded lock table shared by every request of one process."""

    def __init__(self) -> None:
        self._expiries: dict[str, float] = {}

    def _purge(self, resource_id: str) -> None:
        expiry = self._expiries.get(resource_id)
        if expiry is not None and expiry <= time.monotonic():
            del self._expiries[resource_id]

    async def acquire(self, resource_id: str, ttl_seconds: int = 30) -> bool:
        self._purge(resource_id)
        if resource_id in self._expiries:
            return False
        self._expiries[resource_id] = time.monotonic() + ttl_seconds
        return True

    async def release(self, resource_id: str) -> bool:
        return self._expiries.pop(resource_id, None) is not None

    async def extend(self, resource_id: str, ttl_seconds: int = 30) -> bool:
        self._purge(resource_id)
        if resource_id not in self._expiries:
            return False
        self._expiries[resource_id] = time.monotonic() + ttl_seconds
        return True

    async def is_locked(self, resource_id: str) -> bool:
        self._purge(resource_id)
        return resource_id in self._expiries
