"""Graphite pusher configuration."""

import os
from dataclasses import dataclass
from typing import FrozenSet, Optional

from graphite_metrics.logging.config import _get_env_bool
from graphite_metrics.metrics.types import KeyPath, key_path

DEFAULT_INTERVAL_MS = 60000


class ConfigError(ValueError):
    """Raised at startup when the pusher configuration is missing or invalid."""


@dataclass(frozen=True)
class PusherConfig:
    """Configuration for the Graphite pusher. Read once, never mutated."""

    prefix: str
    host: str
    port: int
    interval_ms: int = DEFAULT_INTERVAL_MS
    whitelist: Optional[FrozenSet[KeyPath]] = None
    timeout_s: Optional[float] = None
    enabled: bool = True

    def __post_init__(self):
        if not self.prefix:
            raise ConfigError("prefix is required")
        if not self.host:
            raise ConfigError("host is required")
        if self.interval_ms <= 0:
            raise ConfigError(f"interval must be positive, got {self.interval_ms}")
        if self.whitelist is not None:
            object.__setattr__(self, "whitelist", frozenset(key_path(k) for k in self.whitelist))

    @property
    def interval_s(self) -> float:
        return self.interval_ms / 1000

    @property
    def window_s(self) -> int:
        """Aggregation window matching one push interval, in whole seconds."""
        return self.interval_ms // 1000

    @property
    def address(self):
        return (self.host, self.port)

    @classmethod
    def from_env(cls) -> "PusherConfig":
        """Create a PusherConfig from environment variables."""
        timeout = os.getenv("GRAPHITE_TIMEOUT", "")
        return cls(
            prefix=_require("GRAPHITE_PREFIX"),
            host=_require("GRAPHITE_HOST"),
            port=_parse_int("GRAPHITE_PORT", _require("GRAPHITE_PORT")),
            interval_ms=_parse_int(
                "GRAPHITE_PUSH_INTERVAL",
                os.getenv("GRAPHITE_PUSH_INTERVAL", str(DEFAULT_INTERVAL_MS)),
            ),
            whitelist=parse_whitelist(os.getenv("GRAPHITE_WHITELIST", "")),
            timeout_s=_parse_float("GRAPHITE_TIMEOUT", timeout) if timeout else None,
            enabled=_get_env_bool("METRICS_GRAPHITE_ENABLED", True),
        )


def parse_whitelist(value: str) -> Optional[FrozenSet[KeyPath]]:
    """Parse a comma separated whitelist. Dots split an entry into a key path.

    Labelled series are keyed by name followed by their label values, so
    they must be listed in full, e.g. `requests_total.GET.200`.
    An empty value means no whitelist.
    """
    entries = [e.strip() for e in value.split(",") if e.strip()]
    if not entries:
        return None
    return frozenset(_entry_key(e) for e in entries)


def _entry_key(entry: str) -> KeyPath:
    return key_path(*entry.split("."))


def _require(key: str) -> str:
    value = os.getenv(key, "")
    if not value:
        raise ConfigError(f"{key} is not set")
    return value


def _parse_int(key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from None


def _parse_float(key: str, value: str) -> float:
    try:
        return float(value.rstrip("s"))
    except ValueError:
        raise ConfigError(f"{key} must be a number of seconds, got {value!r}") from None
