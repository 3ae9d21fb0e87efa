"""Application entrypoint."""

from __future__ import annotations

import structlog
import uvicorn

from provisioner.api.app import create_app
from provisioner.config import get_settings, PersistenceBackend, Settings
from provisioner.infrastructure.observability.logging import setup_logging
from provisioner.infrastructure.observability.tracing import setup_tracing


logger = structlog.get_logger(__name__)

app = create_app()


def _worker_count(settings: Settings) -> int:
    # The in-memory ledger and lock table live in one process
    if settings.persistence_backend == PersistenceBackend.MEMORY and settings.workers > 1:
        logger.warning(
            "workers_reduced_for_memory_backend",
            requested=settings.workers,
            persistence_backend=settings.persistence_backend.value,
        )
        return 1
    return settings.workers


def main() -> None:
    """Run the API server."""
    settings = get_settings()
    setup_logging(settings.observability.log_level, json_output=not settings.debug)
    setup_tracing(settings.observability, console=settings.debug)

    uvicorn.run(
        "provisioner.main:app",
        host=settings.host,
        port=settings.port,
        workers=_worker_count(settings),
        reload=settings.debug,
        log_level=settings.observability.log_level.lower(),
    )


if __name__ == "__main__":
    main()
