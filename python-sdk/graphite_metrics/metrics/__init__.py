"""Metrics module initialization."""

from graphite_metrics.metrics.registry import Registry
from graphite_metrics.metrics.config import ConfigError, PusherConfig
from graphite_metrics.metrics.histogram import BucketSample, summarize
from graphite_metrics.metrics.pusher import (
    GraphitePusher,
    get_pusher,
    start_metrics_pusher,
    stop_metrics_pusher,
)
from graphite_metrics.metrics.serializer import filter_metrics, format_key, serialize_metrics
from graphite_metrics.metrics.store import AggregationStore, RegistryStore
from graphite_metrics.metrics.types import (
    Counter,
    Gauge,
    Histogram,
    KeyPath,
    Leaf,
    MetricSnapshot,
    Node,
    key_path,
)

__all__ = [
    "Registry",
    "ConfigError",
    "PusherConfig",
    "BucketSample",
    "summarize",
    "GraphitePusher",
    "get_pusher",
    "start_metrics_pusher",
    "stop_metrics_pusher",
    "filter_metrics",
    "format_key",
    "serialize_metrics",
    "AggregationStore",
    "RegistryStore",
    "Counter",
    "Gauge",
    "Histogram",
    "KeyPath",
    "Leaf",
    "MetricSnapshot",
    "Node",
    "key_path",
]
