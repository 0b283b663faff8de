"""Logging module initialization."""

from graphite_metrics.logging.config import LogConfig
from graphite_metrics.logging.logger import new_logger

__all__ = ["LogConfig", "new_logger"]
