"""Centralized observability singleton instances.

Provides one logger and one Graphite pusher for the whole worker.
"""
from typing import Optional

import structlog

from graphite_metrics import new_logger, start_metrics_pusher

_logger: Optional[structlog.BoundLogger] = None
_metrics_initialized: bool = False


def initialize_observability(service_name: str) -> None:
    """
    Initialize the logger and the Graphite metrics pusher.

    This should be called once during application startup.
    """
    global _logger, _metrics_initialized

    _logger = new_logger(service_name)
    _metrics_initialized = start_metrics_pusher()


def get_logger() -> structlog.BoundLogger:
    """
    Get the singleton logger instance.

    Raises:
        RuntimeError: If observability has not been initialized
    """
    if _logger is None:
        raise RuntimeError(
            "Observability not initialized. Call initialize_observability() first."
        )
    return _logger


def is_metrics_initialized() -> bool:
    return _metrics_initialized


__all__ = [
    "initialize_observability",
    "get_logger",
    "is_metrics_initialized",
]
