"""Request metrics middleware."""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from provisioner.infrastructure.observability.metrics import (
    API_REQUEST_DURATION,
    API_REQUESTS_TOTAL,
)


def _endpoint(request: Request) -> str:
    # Route templates keep label cardinality bounded
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class RequestMetricsMiddleware(BaseHTTPMiddleware):
    """Counts requests and records their latency per route template."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        endpoint = _endpoint(request)
        API_REQUEST_DURATION.labels(method=request.method, endpoint=endpoint).observe(
            time.perf_counter() - started
        )
        API_REQUESTS_TOTAL.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=str(response.status_code),
        ).inc()
        return response
