"""Logging configuration."""

import os
import socket
from dataclasses import dataclass, field


@dataclass
class LogConfig:
    """Configuration for logging."""

    service_name: str
    environment: str = field(default_factory=lambda: os.getenv("ENVIRONMENT", "production"))
    service_version: str = field(default_factory=lambda: os.getenv("SERVICE_VERSION", "unknown"))
    service_namespace: str = field(default_factory=lambda: os.getenv("SERVICE_NAMESPACE", "default"))
    host_name: str = field(default_factory=lambda: os.getenv("HOSTNAME", "") or socket.gethostname())
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "info"))

    # Export controls
    enable_file: bool = field(default_factory=lambda: _get_env_bool("LOG_FILE_ENABLED", False))
    log_file_path: str = field(default_factory=lambda: os.getenv("LOG_FILE_PATH", "./logs/app.log"))
    enable_console: bool = field(default_factory=lambda: _get_env_bool("LOG_CONSOLE_ENABLED", True))

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"


def new_config(service_name: str) -> LogConfig:
    """Create a new LogConfig from environment variables."""
    return LogConfig(service_name=service_name)


def _get_env_bool(key: str, default: bool = True) -> bool:
    """Get boolean value from environment variable."""
    value = os.getenv(key, "").lower()
    if not value:
        return default
    return value in ("true", "1", "yes")
