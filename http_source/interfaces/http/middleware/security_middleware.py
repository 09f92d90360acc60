"""
Security gate middleware.

Runs the security policy for every request that reaches the application
and answers 401 when it refuses. The authenticated principal is exposed
as ``request.state.principal``.
"""

from typing import Callable

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware

from http_source.domain.value_objects import AuthOutcome, InboundRequest
from http_source.infrastructure.logging import get_logger
from http_source.infrastructure.security import SecurityConfig, authorize
from http_source.interfaces.http.schemas import error_response

logger = get_logger(__name__)

FULL_AUTHENTICATION_REQUIRED = "Full authentication is required to access this resource"
INVALID_CSRF_TOKEN = "Invalid or missing CSRF token"


class SecurityMiddleware(BaseHTTPMiddleware):
    """Middleware applying the Basic-auth / CSRF gate."""

    def __init__(self, app, config: SecurityConfig):
        super().__init__(app)
        self.config = config

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Body is not needed for the decision
        inbound = InboundRequest(
            method=request.method,
            path=request.url.path,
            headers=dict(request.headers.items()),
        )
        decision = authorize(inbound, self.config)

        if not decision.allowed:
            logger.warning(
                "Request not authorized",
                method=request.method,
                path=request.url.path,
                outcome=decision.outcome.value,
            )
            if decision.outcome is AuthOutcome.INVALID_CSRF_TOKEN:
                description = INVALID_CSRF_TOKEN
                solution = f"Send the token from GET /csrf in the {self.config.csrf_header_name} header"
            else:
                description = FULL_AUTHENTICATION_REQUIRED
                solution = "Provide valid HTTP Basic credentials"
            return error_response(
                status_code=status.HTTP_401_UNAUTHORIZED,
                error_code="HttpSource.Unauthorized",
                description=description,
                error_detail=decision.outcome.value,
                solution=solution,
                headers={"WWW-Authenticate": 'Basic realm="Realm"'},
            )

        # Read by the /csrf route and the request outcome log
        request.state.principal = decision.principal
        return await call_next(request)
