"""Prometheus metrics configuration."""

from __future__ import annotations

from typing import Any

from prometheus_client import (
    Counter,
    Histogram,
    Info,
)


# Application info
APP_INFO = Info("provisioner", "Tofu provisioner application info")
APP_INFO.info({
    "version": "1.0.0",
    "service": "tofu-provisioner",
})

# Command runner metrics
COMMAND_EXECUTIONS_TOTAL = Counter(
    "provisioner_command_executions_total",
    "Total number of command chains executed",
    ["outcome"],  # "succeeded", "failed", "killed", "spawn_error"
)

COMMAND_DURATION = Histogram(
    "provisioner_command_duration_seconds",
    "Time taken for a command chain to complete",
    buckets=[1, 5, 10, 30, 60, 120, 300, 600, 1800],
)

LOG_READS_TOTAL = Counter(
    "provisioner_log_reads_total",
    "Verbose log read-backs",
    ["result"],  # "ok", "timeout", "error"
)

# Ledger metrics
LEDGER_STEPS_TOTAL = Counter(
    "provisioner_ledger_steps_total",
    "Steps written to deployment histories",
    ["kind", "status"],
)

LEDGER_WRITE_CONFLICTS = Counter(
    "provisioner_ledger_write_conflicts_total",
    "Optimistic concurrency conflicts retried by the ledger repository",
)

# API metrics
API_REQUESTS_TOTAL = Counter(
    "provisioner_api_requests_total",
    "Total API requests",
    ["method", "endpoint", "status_code"],
)

API_REQUEST_DURATION = Histogram(
    "provisioner_api_request_duration_seconds",
    "API request duration",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0, 120.0, 600.0],
)


async def count_recorded_step(payload: dict[str, Any]) -> None:
    """Event handler feeding ``LEDGER_STEPS_TOTAL`` from step_recorded events."""
    LEDGER_STEPS_TOTAL.labels(kind=payload["kind"], status=payload["status"]).inc()
