"""
Structured logging configuration using structlog.

Standardized log format:
{
    "ts": "2025-11-18T04:30:00.123456Z",
    "level": "info",
    "service": "confidant-exchange",
    "correlation_id": "uuid-v4",
    "event": "exchange.completed",
    "module": "confidant_exchange.services.exchange.exchange_service",
    "function": "exchange",
    "line": 42,
    ...additional context...
}

Token values, ciphertext and secret payloads are never passed to the logger.
"""
import structlog
import logging
from typing import Any, Optional

from .config import get_settings

_service_name = "confidant-exchange"


def add_service_name(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Add service name to all log entries."""
    event_dict["service"] = _service_name
    return event_dict


def add_module_info(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Add module, function, and line number to log entries."""
    frame = structlog._frames._find_first_app_frame_and_name(additional_ignores=[__name__])[0]
    if frame:
        event_dict["module"] = frame.f_globals.get("__name__", "unknown")
        event_dict["function"] = frame.f_code.co_name
        event_dict["line"] = frame.f_lineno
    return event_dict


def setup_logging(
    json_output: Optional[bool] = None,
    service_name: str = "confidant-exchange",
    level: int = logging.INFO,
):
    """
    Configure structured logging with standardized fields.

    Intended to be called once during process bootstrap by the
    application embedding the exchange client.

    Args:
        json_output: If True, output JSON logs. If False, use console format.
            Defaults to the LOG_JSON setting.
        service_name: Name of the service (for multi-service deployments).
        level: Minimum log level.
    """
    global _service_name
    if json_output is None:
        json_output = get_settings().LOG_JSON
    _service_name = service_name

    shared_processors = [
        # Add contextvars (includes correlation_id)
        structlog.contextvars.merge_contextvars,
        add_service_name,
        structlog.processors.TimeStamper(fmt="iso", key="ts"),
        structlog.processors.add_log_level,
        add_module_info,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors = shared_processors + [
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=level,
    )

    # botocore is chatty at INFO about credential lookups
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger():
    """Get a configured structlog logger."""
    return structlog.get_logger()
