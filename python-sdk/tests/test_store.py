"""
Tests for the prometheus_client adapter in graphite_metrics/metrics/store.py
"""

import pytest
from prometheus_client import CollectorRegistry, Counter as PromCounter, Gauge as PromGauge, Histogram as PromHistogram
from prometheus_client import Summary as PromSummary

from graphite_metrics.metrics.config import parse_whitelist
from graphite_metrics.metrics.histogram import BucketSample
from graphite_metrics.metrics.serializer import filter_metrics
from graphite_metrics.metrics.store import RegistryStore
from graphite_metrics.metrics.types import Counter, Gauge, Histogram, key_path

INF = float("inf")


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def store(registry: CollectorRegistry) -> RegistryStore:
    return RegistryStore(registry)


def test_empty_registry(store: RegistryStore) -> None:
    snapshot = store.get_window(60)
    assert snapshot.window_s == 60
    assert list(snapshot) == []


def test_counter_reports_increase_per_window(registry: CollectorRegistry, store: RegistryStore) -> None:
    jobs = PromCounter("jobs", "Jobs processed", registry=registry)

    jobs.inc(3)
    assert list(store.get_window(60)) == [Counter("jobs_total", 3)]

    jobs.inc(2)
    assert list(store.get_window(60)) == [Counter("jobs_total", 2)]

    assert list(store.get_window(60)) == [Counter("jobs_total", 0)]


def test_counter_fractional_increase(registry: CollectorRegistry, store: RegistryStore) -> None:
    PromCounter("seconds", "Busy time", registry=registry).inc(1.5)
    assert list(store.get_window(60)) == [Counter("seconds_total", 1.5)]


def test_labeled_counter_key(registry: CollectorRegistry, store: RegistryStore) -> None:
    requests = PromCounter("requests", "Requests", ["method", "status"], registry=registry)
    requests.labels(method="GET", status="200").inc()

    assert list(store.get_window(60)) == [Counter(("requests_total", "GET", "200"), 1)]


def test_gauge_reports_current_value(registry: CollectorRegistry, store: RegistryStore) -> None:
    gauge = PromGauge("temperature", "Temperature", registry=registry)
    gauge.set(4711)
    assert list(store.get_window(60)) == [Gauge("temperature", 4711)]

    gauge.set(21.5)
    assert list(store.get_window(60)) == [Gauge("temperature", 21.5)]


def test_histogram_reports_window_buckets(registry: CollectorRegistry, store: RegistryStore) -> None:
    latency = PromHistogram("latency", "Latency", buckets=[1.0, 2.0], registry=registry)
    latency.observe(0.5)
    latency.observe(1.5)

    (first,) = store.get_window(60)
    assert isinstance(first, Histogram)
    assert first.key == key_path("latency")
    assert first.sample == BucketSample(buckets=((1.0, 1), (2.0, 2), (INF, 2)), sum=2.0, count=2)

    latency.observe(1.5)
    (second,) = store.get_window(60)
    assert second.sample == BucketSample(buckets=((1.0, 0), (2.0, 1), (INF, 1)), sum=1.5, count=1)


def test_labeled_histogram_key(registry: CollectorRegistry, store: RegistryStore) -> None:
    latency = PromHistogram("latency", "Latency", ["path"], buckets=[1.0], registry=registry)
    latency.labels(path="/api").observe(0.5)

    (metric,) = store.get_window(60)
    assert metric.key == key_path("latency", "/api")


def test_unsupported_families_are_skipped(registry: CollectorRegistry, store: RegistryStore) -> None:
    PromSummary("request_size", "Request size", registry=registry).observe(10)
    assert list(store.get_window(60)) == []


def test_removed_series_state_is_dropped(registry: CollectorRegistry, store: RegistryStore) -> None:
    requests = PromCounter("requests", "Requests", ["method"], registry=registry)
    latency = PromHistogram("latency", "Latency", ["method"], buckets=(1,), registry=registry)
    requests.labels(method="GET").inc(5)
    latency.labels(method="GET").observe(0.5)
    store.get_window(60)
    assert key_path("requests_total", "GET") in store._last_counters
    assert key_path("latency", "GET") in store._last_histograms

    requests.remove("GET")
    latency.remove("GET")
    store.get_window(60)

    assert store._last_counters == {}
    assert store._last_histograms == {}

    # A series that comes back starts over from its full total
    requests.labels(method="GET").inc(2)
    assert list(store.get_window(60)) == [Counter(("requests_total", "GET"), 2)]


@pytest.mark.parametrize(
    "whitelist,expected",
    [
        pytest.param("requests_total.GET", [Counter(("requests_total", "GET"), 1)], id="full_key"),
        pytest.param("requests_total", [], id="bare_name"),
    ],
)
def test_whitelist_matches_labelled_series(
    registry: CollectorRegistry, store: RegistryStore, whitelist: str, expected: list
) -> None:
    requests = PromCounter("requests", "Requests", ["method"], registry=registry)
    requests.labels(method="GET").inc()
    requests.labels(method="POST").inc()

    snapshot = filter_metrics(store.get_window(60), parse_whitelist(whitelist))

    assert list(snapshot) == expected
