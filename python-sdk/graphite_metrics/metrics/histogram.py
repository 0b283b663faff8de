"""Histogram percentile summaries."""

import math
from dataclasses import dataclass
from numbers import Real
from typing import Dict, Optional, Sequence, Tuple

# Canonical export order
PERCENTILES = ("p25", "mean", "p75", "p95", "p99", "p999")

_QUANTILES = {
    "p25": 0.25,
    "p75": 0.75,
    "p95": 0.95,
    "p99": 0.99,
    "p999": 0.999,
}


@dataclass(frozen=True)
class BucketSample:
    """Cumulative bucket counts for one window, prometheus style.

    `buckets` is `((upper_bound, cumulative_count), ...)` sorted by upper
    bound and ending with `+Inf`.
    """

    buckets: Tuple[Tuple[float, float], ...]
    sum: float
    count: float


def summarize(sample) -> Dict[str, float]:
    """Reduce a histogram sample to named percentiles.

    Keys missing from the result had no data in the window.
    """
    if isinstance(sample, BucketSample):
        return _summarize_buckets(sample)
    if isinstance(sample, Sequence) and not isinstance(sample, (str, bytes)):
        return _summarize_values(sample)
    raise TypeError(f"Cannot summarize histogram sample {sample!r}")


def _summarize_values(values: Sequence[Real]) -> Dict[str, float]:
    if not values:
        return {}

    ordered = sorted(values)
    last = len(ordered) - 1

    summary = {name: ordered[round(last * q)] for name, q in _QUANTILES.items()}
    summary["mean"] = sum(ordered) / len(ordered)
    return summary


def _summarize_buckets(sample: BucketSample) -> Dict[str, float]:
    if sample.count <= 0:
        return {}

    summary = {"mean": sample.sum / sample.count}
    for name, q in _QUANTILES.items():
        value = _bucket_quantile(q, sample.buckets, sample.count)
        if value is not None:
            summary[name] = value
    return summary


def _bucket_quantile(q: float, buckets, count: float) -> Optional[float]:
    """Estimate a quantile by linear interpolation inside its bucket."""
    rank = q * count
    lower_bound = None
    lower_count = 0.0

    for upper_bound, cumulative in buckets:
        if cumulative >= rank:
            if math.isinf(upper_bound):
                return lower_bound
            if lower_bound is None:
                if upper_bound <= 0:
                    return upper_bound
                lower_bound = 0.0
            if cumulative == lower_count:
                return upper_bound
            return lower_bound + (upper_bound - lower_bound) * (rank - lower_count) / (cumulative - lower_count)
        lower_bound, lower_count = upper_bound, cumulative

    return lower_bound
