"""
Security Infrastructure

HTTP Basic authentication and CSRF token checks.
"""

from .csrf import issue_csrf_token, verify_csrf_token
from .policy import SecurityConfig, authorize, parse_basic_auth

__all__ = [
    "SecurityConfig",
    "authorize",
    "parse_basic_auth",
    "issue_csrf_token",
    "verify_csrf_token",
]
