"""
CORS middleware.

Enforces the configured CorsPolicy on pre-flight and actual requests.
Rejections are answered with 403 and a plain-text body before any
authentication or message publishing happens.
"""

from typing import Callable

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware

from http_source.domain.errors import ForbiddenError
from http_source.domain.services import INVALID_CORS_REQUEST, CorsPolicy
from http_source.infrastructure.logging import get_logger

logger = get_logger(__name__)


def is_preflight(request: Request) -> bool:
    return (
        request.method == "OPTIONS"
        and "origin" in request.headers
        and "access-control-request-method" in request.headers
    )


class CORSMiddleware(BaseHTTPMiddleware):
    """Middleware applying CorsPolicy to every request carrying an Origin header."""

    def __init__(self, app, policy: CorsPolicy):
        super().__init__(app)
        self.policy = policy

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Same-origin and non-browser requests carry no Origin
        origin = request.headers.get("origin")
        if origin is None:
            return await call_next(request)

        try:
            if is_preflight(request):
                headers = self.policy.preflight_headers(
                    origin,
                    request.headers["access-control-request-method"],
                    request.headers.get("access-control-request-headers"),
                )
                # Pre-flights are answered here and never reach the security gate
                return Response(status_code=200, headers=headers)

            cors_headers = self.policy.actual_headers(origin, request.method)
        except ForbiddenError as e:
            logger.warning(
                "CORS request rejected",
                origin=origin,
                method=request.method,
                path=request.url.path,
                reason=e.details,
            )
            return PlainTextResponse(INVALID_CORS_REQUEST, status_code=403)

        response = await call_next(request)

        # Vary must be merged with whatever the route already set
        for name, value in cors_headers.items():
            if name == "Vary":
                response.headers.add_vary_header(value)
            else:
                response.headers[name] = value
        return response
