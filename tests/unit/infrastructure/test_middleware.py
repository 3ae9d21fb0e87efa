"""Unit tests for middleware components."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from provisioner.api.middleware.correlation import (
    CORRELATION_HEADER,
    CorrelationIdMiddleware,
    correlation_id_ctx,
    get_correlation_id,
)
from provisioner.api.middleware.rate_limiter import RateLimiterMiddleware
from provisioner.config import RateLimitSettings


class TestCorrelationId:
    def test_default_empty(self) -> None:
        token = correlation_id_ctx.set("")
        assert get_correlation_id() == ""
        correlation_id_ctx.reset(token)

    def test_set_and_get(self) -> None:
        token = correlation_id_ctx.set("test-correlation-123")
        assert get_correlation_id() == "test-correlation-123"
        correlation_id_ctx.reset(token)

    def test_header_echoed(self) -> None:
        app = FastAPI()
        app.add_middleware(CorrelationIdMiddleware)

        @app.get("/ping")
        async def ping() -> dict[str, str]:
            return {"correlation_id": get_correlation_id()}

        client = TestClient(app)
        response = client.get("/ping", headers={CORRELATION_HEADER: "abc"})
        assert response.headers[CORRELATION_HEADER] == "abc"
        assert response.json() == {"correlation_id": "abc"}


class TestRateLimiter:
    def _app(self) -> FastAPI:
        app = FastAPI()
        app.add_middleware(
            RateLimiterMiddleware,
            settings=RateLimitSettings(requests_per_minute=1, burst_size=2),
        )

        @app.get("/work")
        async def work() -> dict[str, bool]:
            return {"ok": True}

        @app.get("/health")
        async def health() -> dict[str, bool]:
            return {"ok": True}

        return app

    def test_burst_then_reject(self) -> None:
        client = TestClient(self._app())
        assert client.get("/work").status_code == 200
        assert client.get("/work").status_code == 200
        response = client.get("/work")
        assert response.status_code == 429
        assert "error" in response.json()
        assert "Retry-After" in response.headers

    def test_health_exempt(self) -> None:
        client = TestClient(self._app())
        for _ in range(5):
            assert client.get("/health").status_code == 200
