"""Logging sink and telemetry contracts."""

from .logging import LoggingTelemetry, Telemetry, configure_logging

__all__ = ["LoggingTelemetry", "Telemetry", "configure_logging"]
