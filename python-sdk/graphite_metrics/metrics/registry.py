"""Prometheus registry wrapper."""

from prometheus_client import (
    Counter,
    REGISTRY,
)

# Use default registry
Registry = REGISTRY

# Graphite pusher metrics
graphite_pushes_total = Counter(
    "graphite_pushes_total",
    "Total push cycles to Graphite by outcome",
    ["status"],
    registry=Registry,
)

graphite_connect_failures_total = Counter(
    "graphite_connect_failures_total",
    "Total failed connection attempts to Graphite",
    registry=Registry,
)

graphite_lines_sent_total = Counter(
    "graphite_lines_sent_total",
    "Total plaintext protocol lines written to Graphite",
    registry=Registry,
)
