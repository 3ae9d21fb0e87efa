"""Redis distributed lock implementation."""

from __future__ import annotations

import uuid

import redis.asyncio
import structlog

from provisioner.config import RedisSettings
from provisioner.domain.ports.services import DistributedLock


logger = structlog.get_logger(__name__)

RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""

EXTEND_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("expire", KEYS[1], ARGV[2])
else
    return 0
end
"""


class RedisDistributedLock(DistributedLock):
    """Redis implementation of distributed locking using SET NX."""

    def __init__(self, client: redis.asyncio.Redis) -> None:
        self._client = client
        self._lock_values: dict[str, str] = {}

    async def acquire(self, resource_id: str, ttl_seconds: int = 30) -> bool:
        lock_key = f"lock:{resource_id}"
        lock_value = str(uuid.uuid4())

        acquired = await self._client.set(lock_key, lock_value, nx=True, ex=ttl_seconds)
        if acquired:
            self._lock_values[resource_id] = lock_value
            logger.debug("lock_acquired", resource_id=resource_id, ttl=ttl_seconds)
            return True

        logger.debug("lock_not_acquired", resource_id=resource_id)
        return False

    async def release(self, resource_id: str) -> bool:
        lock_key = f"lock:{resource_id}"
        lock_value = self._lock_values.get(resource_id)
        if lock_value is None:
            return False

        # Only the holder may delete the key
        result = await self._client.eval(RELEASE_SCRIPT, 1, lock_key, lock_value)
        del self._lock_values[resource_id]
        if result:
            logger.debug("lock_released", resource_id=resource_id)
            return True
        logger.warning("lock_expired_before_release", resource_id=resource_id)
        return False

    async def extend(self, resource_id: str, ttl_seconds: int = 30) -> bool:
        lock_value = self._lock_values.get(resource_id)
        if lock_value is None:
            return False

        result = await self._client.eval(
            EXTEND_SCRIPT, 1, f"lock:{resource_id}", lock_value, str(ttl_seconds)
        )
        if not result:
            logger.warning("lock_extend_failed", resource_id=resource_id)
        return bool(result)

    async def is_locked(self, resource_id: str) -> bool:
        return bool(await self._client.exists(f"lock:{resource_id}"))


def create_redis_client(settings: RedisSettings) -> redis.asyncio.Redis:
    """Factory function to create a Redis client."""
    return redis.asyncio.Redis.from_url(
        settings.url,
        decode_responses=False,
        socket_timeout=5.0,
        socket_connect_timeout=5.0,
        retry_on_timeout=True,
    )
