"""Graphite plaintext protocol serialization.

Each metric becomes one or more lines of the form::

    <prefix>.<dotted.metric.path> <value> <unix-timestamp>\\n
"""

import time
from numbers import Integral, Real
from typing import Callable, Iterable, List, Optional, Set

from graphite_metrics.metrics.histogram import PERCENTILES, summarize as default_summarize
from graphite_metrics.metrics.types import (
    Counter,
    Gauge,
    Histogram,
    KeyPath,
    Leaf,
    MetricSnapshot,
    key_path,
)


def format_key(key) -> str:
    """Flatten a key path to a dotted Graphite path.

    Spaces become underscores and slashes become dots.
    """
    flat = _flatten(key_path(key))
    return flat.replace(" ", "_").replace("/", ".")


def _flatten(key: KeyPath) -> str:
    if isinstance(key, Leaf):
        return key.name
    return ".".join(_flatten(part) for part in key.parts)


def format_value(value) -> str:
    """Render a number as plain decimal, never in exponent notation."""
    if isinstance(value, Integral):
        return str(int(value))
    if isinstance(value, Real):
        return "%f" % value
    raise TypeError(f"Metric value must be a number, got {value!r}")


def _line(prefix: str, key, value, clock: Callable[[], float]) -> str:
    return f"{prefix}.{format_key(key)} {format_value(value)} {int(clock())}\n"


def format_metric(
    prefix: str,
    metric,
    summarize: Callable = default_summarize,
    clock: Callable[[], float] = time.time,
) -> List[str]:
    """Format one metric as zero or more protocol lines."""
    if isinstance(metric, (Counter, Gauge)):
        return [_line(prefix, metric.key, metric.value, clock)]

    elif isinstance(metric, Histogram):
        summary = summarize(metric.sample)
        lines = []
        for percentile in PERCENTILES:
            value = summary.get(percentile)
            # bool is Integral, but True is not a percentile
            if isinstance(value, Real) and not isinstance(value, bool):
                lines.append(_line(prefix, (metric.key, percentile), value, clock))
        return lines

    # Unknown kinds are not exported
    return []


def serialize_metrics(
    prefix: str,
    metrics: Iterable,
    summarize: Callable = default_summarize,
    clock: Callable[[], float] = time.time,
) -> bytes:
    """Serialize metrics into a single payload for one send."""
    lines = []
    for metric in metrics:
        lines.extend(format_metric(prefix, metric, summarize, clock))
    return "".join(lines).encode("utf-8")


def filter_metrics(snapshot: MetricSnapshot, whitelist: Optional[Set[KeyPath]]) -> MetricSnapshot:
    """Keep only whitelisted metrics. No whitelist keeps everything."""
    if whitelist is None:
        return snapshot

    return MetricSnapshot(
        window_s=snapshot.window_s,
        metrics=tuple(m for m in snapshot if getattr(m, "key", None) in whitelist),
    )
