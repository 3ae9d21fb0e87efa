"""Unit tests for logging configuration."""

from __future__ import annotations

from provisioner.infrastructure.observability.logging import setup_logging


class TestLogging:
    def test_setup_logging_info(self) -> None:
        setup_logging("INFO")  # Should not raise

    def test_setup_logging_debug_console(self) -> None:
        setup_logging("DEBUG", json_output=False)

    def test_unknown_level_falls_back(self) -> None:
        setup_logging("NOT-A-LEVEL")
