"""Metric records and key paths."""

from dataclasses import dataclass, field
from typing import Any, Iterator, Tuple, Union


@dataclass(frozen=True)
class Leaf:
    """A single metric name segment."""

    name: str

    def __post_init__(self):
        if not isinstance(self.name, str):
            raise TypeError(f"Leaf name must be a string, got {type(self.name).__name__}")


@dataclass(frozen=True)
class Node:
    """An ordered group of key paths, joined with dots when flattened."""

    parts: Tuple["KeyPath", ...]


KeyPath = Union[Leaf, Node]


def key_path(*parts: Any) -> KeyPath:
    """Build a KeyPath from names, numbers, bytes, tuples or existing paths.

    A single part returns that part as a path, several parts return a Node.
    """
    if len(parts) == 1:
        return _to_key_path(parts[0])
    return Node(tuple(_to_key_path(p) for p in parts))


def _to_key_path(part: Any) -> KeyPath:
    if isinstance(part, (Leaf, Node)):
        return part
    if isinstance(part, str):
        return Leaf(part)
    # bool is an int subclass but "True" is not a metric name
    if isinstance(part, int) and not isinstance(part, bool):
        return Leaf(str(part))
    if isinstance(part, bytes):
        return Leaf(part.decode("utf-8"))
    if isinstance(part, (tuple, list)):
        return Node(tuple(_to_key_path(p) for p in part))
    raise TypeError(f"Cannot make a key path from {part!r}")


def _key_field(obj, value):
    object.__setattr__(obj, "key", _to_key_path(value))


@dataclass(frozen=True)
class Counter:
    key: KeyPath
    value: Union[int, float]

    def __post_init__(self):
        _key_field(self, self.key)


@dataclass(frozen=True)
class Gauge:
    key: KeyPath
    value: Union[int, float]

    def __post_init__(self):
        _key_field(self, self.key)


@dataclass(frozen=True)
class Histogram:
    """A histogram metric. `sample` is whatever the summarizer understands."""

    key: KeyPath
    sample: Any

    def __post_init__(self):
        _key_field(self, self.key)


Metric = Union[Counter, Gauge, Histogram]


@dataclass(frozen=True)
class MetricSnapshot:
    """Metrics collected over a trailing window of `window_s` seconds."""

    window_s: int
    metrics: Tuple[Metric, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "metrics", tuple(self.metrics))

    def __iter__(self) -> Iterator[Metric]:
        return iter(self.metrics)

    def __len__(self) -> int:
        return len(self.metrics)
