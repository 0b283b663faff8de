"""Aggregation store interface and the prometheus_client adapter."""

import threading
from typing import Dict, List, Protocol, Tuple

from prometheus_client import CollectorRegistry

from graphite_metrics.metrics.histogram import BucketSample
from graphite_metrics.metrics.registry import Registry
from graphite_metrics.metrics.types import Counter, Gauge, Histogram, KeyPath, MetricSnapshot, key_path


class AggregationStore(Protocol):
    """Supplies a snapshot of the metrics accumulated over a trailing window."""

    def get_window(self, window_s: int) -> MetricSnapshot:
        ...


class RegistryStore:
    """Exposes a prometheus_client registry as an aggregation store.

    Counters and histograms are cumulative in prometheus, so each window
    reports the increase since the previous `get_window` call. The first
    call reports the full totals. Gauges report their current value.
    """

    def __init__(self, registry: CollectorRegistry = Registry):
        self.registry = registry
        self._lock = threading.RLock()
        self._last_counters: Dict[KeyPath, float] = {}
        self._last_histograms: Dict[KeyPath, Tuple[Tuple[float, ...], float, float]] = {}

    def get_window(self, window_s: int) -> MetricSnapshot:
        with self._lock:
            metrics = []
            for family in self.registry.collect():
                if family.type == "counter":
                    metrics.extend(self._counters(family))
                elif family.type == "gauge":
                    metrics.extend(
                        Gauge(_sample_key(s.name, s.labels), _number(s.value)) for s in family.samples
                    )
                elif family.type == "histogram":
                    metrics.extend(self._histograms(family))
            self._forget_missing(metrics)
            return MetricSnapshot(window_s=window_s, metrics=tuple(metrics))

    def _forget_missing(self, metrics):
        """Drop delta state for series that are no longer in the registry."""
        seen = {m.key for m in metrics}
        for last in (self._last_counters, self._last_histograms):
            for key in [k for k in last if k not in seen]:
                del last[key]

    def _counters(self, family) -> List[Counter]:
        counters = []
        for sample in family.samples:
            if sample.name.endswith("_created"):
                continue
            key = _sample_key(sample.name, sample.labels)
            counters.append(Counter(key, _number(self._counter_delta(key, sample.value))))
        return counters

    def _counter_delta(self, key: KeyPath, value: float) -> float:
        previous = self._last_counters.get(key)
        self._last_counters[key] = value
        # A counter that went backwards was reset
        if previous is None or value < previous:
            return value
        return value - previous

    def _histograms(self, family) -> List[Histogram]:
        grouped: Dict[KeyPath, dict] = {}
        for sample in family.samples:
            labels = {k: v for k, v in sample.labels.items() if k != "le"}
            key = _sample_key(family.name, labels)
            entry = grouped.setdefault(key, {"buckets": [], "sum": 0.0, "count": 0.0})

            if sample.name == family.name + "_bucket":
                entry["buckets"].append((float(sample.labels["le"]), sample.value))
            elif sample.name == family.name + "_sum":
                entry["sum"] = sample.value
            elif sample.name == family.name + "_count":
                entry["count"] = sample.value

        histograms = []
        for key, entry in grouped.items():
            buckets = sorted(entry["buckets"])
            histograms.append(Histogram(key, self._histogram_delta(key, buckets, entry["sum"], entry["count"])))
        return histograms

    def _histogram_delta(self, key: KeyPath, buckets, total: float, count: float) -> BucketSample:
        bounds = tuple(b for b, _ in buckets)
        counts = tuple(c for _, c in buckets)
        previous = self._last_histograms.get(key)
        self._last_histograms[key] = (counts, total, count)

        if previous is not None and len(previous[0]) == len(counts) and count >= previous[2]:
            prev_counts, prev_total, prev_count = previous
            counts = tuple(c - p for c, p in zip(counts, prev_counts))
            total -= prev_total
            count -= prev_count

        return BucketSample(buckets=tuple(zip(bounds, counts)), sum=total, count=count)


def _sample_key(name: str, labels: dict) -> KeyPath:
    if not labels:
        return key_path(name)
    return key_path(name, *labels.values())


def _number(value: float):
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
