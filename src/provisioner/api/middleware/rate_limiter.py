"""Rate limiting middleware."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from provisioner.config import RateLimitSettings


EXEMPT_PREFIXES = ("/health", "/metrics")


@dataclass
class _Bucket:
    tokens: float
    last_refill: float = field(default_factory=time.monotonic)


class RateLimiterMiddleware(BaseHTTPMiddleware):
    """Per-client token bucket.

    Step endpoints start long-running tool processes, so a burst from one
    client is capped before it reaches the runner.
    """

    def __init__(self, app: ASGIApp, settings: RateLimitSettings | None = None) -> None:
        super().__init__(app)
        self._settings = settings or RateLimitSettings()
        self._buckets: dict[str, _Bucket] = {}

    def _take(self, client: str) -> bool:
        capacity = float(self._settings.burst_size)
        bucket = self._buckets.setdefault(client, _Bucket(tokens=capacity))

        now = time.monotonic()
        refill_rate = self._settings.requests_per_minute / 60.0
        bucket.tokens = min(capacity, bucket.tokens + (now - bucket.last_refill) * refill_rate)
        bucket.last_refill = now

        if bucket.tokens < 1.0:
            return False
        bucket.tokens -= 1.0
        return True

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path.startswith(EXEMPT_PREFIXES):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        if not self._take(client):
            retry_after = max(1, int(60 / max(self._settings.requests_per_minute, 1)))
            return JSONResponse(
                status_code=429,
                content={"error": "Rate limit exceeded. Please retry later."},
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
