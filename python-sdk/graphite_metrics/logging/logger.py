"""Logger factory for Python services."""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import orjson
import structlog
from structlog.types import Processor

from graphite_metrics.logging.config import new_config


_file_handler: Optional[logging.FileHandler] = None


def _add_timestamp(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Add ISO timestamp to log record."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _file_processor(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Write log record to file."""
    if _file_handler:
        _file_handler.stream.write(orjson.dumps(event_dict, default=str).decode() + "\n")
        _file_handler.stream.flush()
    return event_dict


def new_logger(service_name: str) -> structlog.BoundLogger:
    """Create a new structured logger with configurable outputs.

    This also configures structlog globally, so loggers obtained with
    `structlog.get_logger()` inside the SDK share the same pipeline.

    Args:
        service_name: The name of the service for log identification.

    Returns:
        A configured structlog logger.
    """
    global _file_handler

    config = new_config(service_name)

    if config.enable_file and _file_handler is None:
        _file_handler = _create_file_handler(config.log_file_path)

    def _format_log_schema(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Shape log record into the envelope schema.

        Input:  flat structlog event dict.
        Output: envelope with timestamp, severity, service block, attributes, error.
        """
        timestamp = event_dict.pop("timestamp", datetime.now(timezone.utc).isoformat())
        severity = str(event_dict.pop("level", method_name.upper())).upper()
        message = str(event_dict.pop("event", ""))

        service_block: Dict[str, Any] = {
            "service.name": config.service_name,
            "service.version": config.service_version,
            "service.namespace": config.service_namespace,
            "deployment.environment": config.environment,
        }
        if config.host_name:
            service_block["host.name"] = config.host_name

        error_block = {}
        if "exception" in event_dict:
            error_block = {"exception": event_dict.pop("exception")}

        # Remaining keys are treated as attributes
        attributes = dict(event_dict)

        return {
            "timestamp": timestamp,
            "severity": severity,
            "severity_num": _severity_to_number(severity),
            "message": message,
            "service": service_block,
            "attributes": attributes,
            "error": error_block,
        }

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        _add_timestamp,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if config.is_development:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(_format_log_schema)
        if config.enable_file and _file_handler:
            processors.append(_file_processor)
        processors.append(structlog.processors.JSONRenderer())

    if config.enable_console:
        logger_factory = structlog.PrintLoggerFactory(file=sys.stdout)
    else:
        logger_factory = structlog.ReturnLoggerFactory()

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            _log_level_to_int(config.log_level)
        ),
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger().bind(
        service=config.service_name,
        environment=config.environment,
        version=config.service_version,
    )


def _log_level_to_int(level: str) -> int:
    """Convert log level string to integer."""
    levels = {
        "debug": 10,
        "info": 20,
        "warn": 30,
        "warning": 30,
        "error": 40,
        "critical": 50,
    }
    return levels.get(level.lower(), 20)


def _severity_to_number(severity: str) -> int:
    """Map severity text to OpenTelemetry-style numeric severity."""
    mapping = {
        "TRACE": 1,
        "DEBUG": 5,
        "INFO": 9,
        "WARN": 13,
        "WARNING": 13,
        "ERROR": 17,
        "FATAL": 21,
        "CRITICAL": 21,
    }
    return mapping.get(severity.upper(), 9)


def _create_file_handler(path: str) -> Optional[logging.FileHandler]:
    """Create a file handler for logging."""
    try:
        log_path = Path(path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(path, mode="a", encoding="utf-8")
    except OSError as e:
        sys.stderr.write(f"Warning: Failed to create log file: {e}\n")
        return None
