"""
Domain Errors

Error taxonomy of the ingress adapter. Each error maps to one HTTP status
in the interface layer; none of them is retried.
"""

from typing import Any, Optional


class HttpSourceError(Exception):
    """Base class for adapter errors."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class BadRequestError(HttpSourceError):
    """Malformed request (unknown charset, undecodable body)."""

    status_code = 400


class UnauthorizedError(HttpSourceError):
    """Missing or invalid credentials or CSRF token."""

    status_code = 401


class ForbiddenError(HttpSourceError):
    """CORS origin, method or header rejected."""

    status_code = 403


class MessageSinkError(HttpSourceError):
    """The outbound sink rejected or failed to accept a message."""

    status_code = 500
