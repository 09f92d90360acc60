"""
Logging Infrastructure

Structured logging setup.
"""

from .logging_config import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    redact_sensitive,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "redact_sensitive",
]
