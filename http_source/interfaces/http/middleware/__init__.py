"""
HTTP Middleware

CORS enforcement, security gate and request logging.
"""

from .cors_middleware import CORSMiddleware
from .logging_middleware import RequestLoggingMiddleware
from .security_middleware import SecurityMiddleware

__all__ = ["CORSMiddleware", "RequestLoggingMiddleware", "SecurityMiddleware"]
