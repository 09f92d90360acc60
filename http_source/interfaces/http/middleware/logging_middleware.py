"""
Request logging middleware for tracing and context management.

Binds request_id (taken from X-Request-ID when the caller sends one) to all
logs within a request and emits one outcome line per request, carrying the
published message id when the ingress route produced a message.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from http_source.infrastructure.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

# Polled by liveness checks; logged at debug level only
QUIET_PATHS = frozenset({"/health"})


def resolve_request_id(request: Request) -> str:
    """Reuse a caller supplied request id if it is sane, else generate one."""
    supplied = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if supplied and len(supplied) <= MAX_REQUEST_ID_LENGTH and supplied.isprintable():
        return supplied
    return str(uuid.uuid4())


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds request context to all logs.

    - Propagates or generates the request_id
    - Binds request context (and Origin for cross-origin calls) to all logs
    - Logs the request outcome: message id and payload kind for published
      messages, principal for authenticated calls, level by status code
    - Adds X-Request-ID and X-Process-Time headers to the response
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Resolve request ID
        request_id = resolve_request_id(request)
        request.state.request_id = request_id

        # Bind context for all logs in this request
        context = {"request_id": request_id, "method": request.method, "path": request.url.path}
        origin = request.headers.get("origin")
        if origin:
            context["origin"] = origin
        bind_context(**context)

        # Log request start
        logger.debug(
            "Request started",
            client=request.client.host if request.client else None,
            content_type=request.headers.get("content-type"),
            content_length=request.headers.get("content-length"),
        )

        start_time = time.time()

        try:
            response = await call_next(request)
            process_time = time.time() - start_time

            response.headers[REQUEST_ID_HEADER] = request_id
            response.headers["X-Process-Time"] = f"{process_time:.3f}"

            self._log_outcome(request, response.status_code, process_time)
            return response

        except Exception as e:
            process_time = time.time() - start_time
            logger.exception(
                "Request failed",
                error=str(e),
                process_time=f"{process_time:.3f}s",
            )
            raise

        finally:
            # Clear context for next request
            clear_context()

    @staticmethod
    def _log_outcome(request: Request, status_code: int, process_time: float) -> None:
        # Set downstream by the security gate and the ingress route
        state = request.state
        fields = {
            "status_code": status_code,
            "process_time": f"{process_time:.3f}s",
            "message_id": getattr(state, "message_id", None),
            "payload_kind": getattr(state, "payload_kind", None),
            "principal": getattr(state, "principal", None),
        }
        fields = {k: v for k, v in fields.items() if v is not None}

        if request.url.path in QUIET_PATHS and status_code < 400:
            logger.debug("Request completed", **fields)
        elif status_code >= 500:
            logger.error("Request completed", **fields)
        elif status_code >= 400:
            logger.warning("Request completed", **fields)
        else:
            logger.info("Request completed", **fields)
