"""
Logging configuration for http-source.

Configures structlog for human-readable text logging (default) with optional
JSON format. Request and message context is carried through structlog
contextvars, and credential-bearing headers are masked before rendering.
"""

import logging
import sys
from typing import Any, Mapping

import structlog
from structlog.types import EventDict

# Color codes for terminal output
COLORS = {
    "debug": "\033[36m",     # Cyan
    "info": "\033[32m",      # Green
    "warning": "\033[33m",   # Yellow
    "error": "\033[31m",     # Red
    "critical": "\033[35m",  # Magenta
    "reset": "\033[0m",      # Reset
}

# Header names whose values never reach the log output
SENSITIVE_HEADERS = frozenset({"authorization", "proxy-authorization", "cookie", "x-csrf-token"})
REDACTED = "***"


def _mask_headers(headers: Mapping[str, Any]) -> dict:
    return {
        name: REDACTED if str(name).lower() in SENSITIVE_HEADERS else value
        for name, value in headers.items()
    }


def redact_sensitive(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Mask credential headers.

    Covers ``headers`` mappings (e.g. from ``OutboundMessage.to_dict()``),
    nested message summaries and top-level keys named after a sensitive header.
    """
    for key, value in list(event_dict.items()):
        if key.lower() in SENSITIVE_HEADERS:
            event_dict[key] = REDACTED
        elif key == "headers" and isinstance(value, Mapping):
            event_dict[key] = _mask_headers(value)
        elif isinstance(value, Mapping) and isinstance(value.get("headers"), Mapping):
            event_dict[key] = {**value, "headers": _mask_headers(value["headers"])}
    return event_dict


def add_color(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add ANSI color codes to log level for better console readability.
    """
    level_color = COLORS.get(method_name, COLORS["reset"])

    # Add color to the level name
    if "level" in event_dict:
        event_dict["level"] = f"{level_color}{event_dict['level'].upper()}{COLORS['reset']}"

    return event_dict


def human_readable_renderer(logger: Any, method_name: str, event_dict: EventDict) -> str:
    """
    Human-readable log format renderer.

    Format: [timestamp] [level] [logger] message key=value key2=value2
    Example: [2025-01-14 10:30:45] [INFO] [http_source.application] Message published message_id=abc
    """
    timestamp = event_dict.pop("timestamp", "")
    level = event_dict.pop("level", "INFO")
    logger_name = event_dict.pop("logger_name", event_dict.pop("logger", None))
    message = event_dict.pop("event", "")
    exception = event_dict.pop("exception", None)

    parts = []
    if timestamp:
        parts.append(f"[{timestamp}]")
    parts.append(f"[{level}]")
    if logger_name and logger_name != "root":
        parts.append(f"[{logger_name}]")
    parts.append(str(message))

    # Request context first, then the event's own fields
    for key in ("request_id", "message_id"):
        if key in event_dict:
            parts.append(f"{key}={event_dict.pop(key)}")

    for key, value in sorted(event_dict.items()):
        if key in ("exc_info", "stack_info"):
            continue
        if isinstance(value, (str, int, float, bool)) or value is None:
            parts.append(f"{key}={value}")
        else:
            parts.append(f"{key}={value!r}")

    log_line = " ".join(parts)
    if exception:
        log_line += "\n" + exception

    return log_line


def configure_logging(log_level: str = "INFO", log_format: str = "text") -> None:
    """
    Configure structlog for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "text" (default) or "json"
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
        force=True,
    )

    # Every request is already logged by RequestLoggingMiddleware
    logging.getLogger("uvicorn.access").setLevel(max(level, logging.WARNING))

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
        redact_sensitive,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format.lower() == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(add_color)
        processors.append(human_readable_renderer)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = None, **context) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (usually __name__)
        **context: Additional context to bind to the logger
    """
    if name:
        return structlog.get_logger(name, **context)
    return structlog.get_logger(**context)


def bind_context(**context) -> None:
    """Bind context to every log line emitted in the current request."""
    structlog.contextvars.bind_contextvars(**context)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
