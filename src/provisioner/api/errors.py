"""Mapping of domain errors onto HTTP responses."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from provisioner.domain.errors import (
    ConcurrentUpdateError,
    ConfigurationError,
    NotFoundError,
    ProvisionerError,
    SpawnError,
    ValidationError,
    WorkspaceBusyError,
)


logger = structlog.get_logger(__name__)

# Checked in order; the first matching family wins.
ERROR_STATUS: list[tuple[type[ProvisionerError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (WorkspaceBusyError, status.HTTP_409_CONFLICT),
    (ConcurrentUpdateError, status.HTTP_409_CONFLICT),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (SpawnError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_for(error: ProvisionerError) -> int:
    for family, code in ERROR_STATUS:
        if isinstance(error, family):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def provisioner_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, ProvisionerError)
    code = status_for(exc)
    if code >= 500:
        logger.error(
            "request_failed",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(exc),
            argv=getattr(exc, "argv", None),
        )
    return JSONResponse(status_code=code, content={"error": str(exc)})


async def request_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg', 'invalid request')}" if location else "invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProvisionerError, provisioner_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
