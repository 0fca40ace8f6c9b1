"""Contract for runtime telemetry and structured logging sinks."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from rich.logging import RichHandler


class Telemetry(Protocol):
    """Reports decision-cycle events and dispatch outcomes."""

    def emit(self, event_name: str, payload: dict[str, Any]) -> None:
        """Publish telemetry event to the configured sink."""


class LoggingTelemetry:
    """Telemetry sink that forwards events to a standard logger."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self._logger = logger or logging.getLogger("ai_player.telemetry")
        self._level = level

    def emit(self, event_name: str, payload: dict[str, Any]) -> None:
        self._logger.log(self._level, event_name, extra={"telemetry": payload})


def configure_logging(level: str = "INFO", *, debug: bool = False) -> None:
    """Route ``ai_player`` loggers through a rich console handler."""
    root = logging.getLogger("ai_player")
    root.setLevel(logging.DEBUG if debug else level.upper())
    if not any(isinstance(handler, RichHandler) for handler in root.handlers):
        root.addHandler(RichHandler(rich_tracebacks=True, show_path=False))
    root.propagate = False
