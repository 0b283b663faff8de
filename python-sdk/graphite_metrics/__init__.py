"""
Graphite metrics SDK for Python

Periodically pushes in-process metrics to a Graphite collector over the
plaintext protocol, with structured logging.
"""

from graphite_metrics.logging import new_logger, LogConfig
from graphite_metrics.metrics import (
    GraphitePusher,
    PusherConfig,
    Registry,
    RegistryStore,
    get_pusher,
    start_metrics_pusher,
    stop_metrics_pusher,
)

__all__ = [
    # Logging
    "new_logger",
    "LogConfig",
    # Metrics
    "GraphitePusher",
    "PusherConfig",
    "Registry",
    "RegistryStore",
    "get_pusher",
    "start_metrics_pusher",
    "stop_metrics_pusher",
]

__version__ = "0.1.0"
