"""
REST API Interface

FastAPI application serving as the HTTP ingress of the messaging pipeline.
Accepts POST requests on the configured path and republishes their body
on the outbound channel.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response, status

from http_source import __version__
from http_source.application.commands.publish_message import PublishMessageCommand
from http_source.domain.errors import HttpSourceError
from http_source.domain.ports import IMessageSinkPort
from http_source.domain.services import CorsPolicy, HeaderMapper
from http_source.domain.value_objects import InboundRequest, SecurityMode
from http_source.infrastructure.config import Settings, get_settings
from http_source.infrastructure.logging import configure_logging, get_logger
from http_source.infrastructure.messaging import create_message_sink
from http_source.infrastructure.security import SecurityConfig, issue_csrf_token
from http_source.interfaces.http.middleware import (
    CORSMiddleware,
    RequestLoggingMiddleware,
    SecurityMiddleware,
)
from http_source.interfaces.http.schemas import (
    CsrfTokenResponse,
    ErrorResponse,
    HealthResponse,
    error_response,
)


logger = get_logger(__name__)


_ERROR_CODES = {
    400: ("HttpSource.BadRequest", "Check the Content-Type charset and the request body encoding"),
    401: ("HttpSource.Unauthorized", "Provide valid HTTP Basic credentials"),
    403: ("HttpSource.Forbidden", None),
    500: ("HttpSource.SinkError", "Retry the request once the outbound channel is available"),
}


def get_publish_command(request: Request) -> PublishMessageCommand:
    """Get the publish command bound to the application."""
    return request.app.state.publish_command


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    On startup: log the effective configuration and, when security is on
    with a generated password, log that password once.
    On shutdown: close the outbound sink.
    """
    settings: Settings = app.state.settings

    logger.info(
        "HTTP source starting",
        version=__version__,
        path_pattern=settings.path_pattern,
        sink=settings.sink_type,
        security_mode=settings.security_mode.value,
        mapped_request_headers=settings.mapped_request_headers,
    )

    # Generated credentials are only ever shown here
    if settings.secured and settings.password_generated:
        logger.warning(
            "Using generated security password",
            user=settings.security_user_name,
            password=settings.security_user_password,
        )

    yield

    logger.info("HTTP source shutting down")
    await app.state.sink.close()
    logger.info("HTTP source shutdown complete")


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HttpSourceError)
    async def http_source_error_handler(request: Request, exc: HttpSourceError):
        """Render adapter errors with their status code."""
        if exc.status_code >= 500:
            logger.error("Request failed", error=exc.message, details=exc.details, path=request.url.path)
        else:
            logger.warning("Request rejected", error=exc.message, details=exc.details, path=request.url.path)
        error_code, solution = _ERROR_CODES.get(exc.status_code, ("HttpSource.Error", None))
        return error_response(
            status_code=exc.status_code,
            error_code=error_code,
            description=exc.message,
            error_detail=str(exc.details) if exc.details else None,
            solution=solution,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(
            "Unexpected error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return error_response(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="HttpSource.InternalError",
            description="HTTP source encountered an unexpected error",
            error_detail=str(exc),
        )


def _register_routes(app: FastAPI, settings: Settings) -> None:
    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health_check() -> HealthResponse:
        """Liveness endpoint; exempt from authentication by default."""
        return HealthResponse(status="UP", version=__version__, sink=settings.sink_type)

    if settings.security_mode is SecurityMode.ENABLED_WITH_CSRF:

        @app.get("/csrf", response_model=CsrfTokenResponse, tags=["security"])
        async def csrf_token(request: Request) -> CsrfTokenResponse:
            """Issue the CSRF token of the authenticated user."""
            return CsrfTokenResponse(
                token=issue_csrf_token(request.state.principal, settings.csrf_secret),
                header_name=settings.csrf_header_name,
            )

    async def ingest(request: Request) -> Response:
        """
        Republish the request body as an outbound message.

        - text/* and application/json bodies are published as decoded text
        - any other Content-Type is published as raw bytes
        - returns 202 with an empty body once the sink accepted the message
        """
        command = get_publish_command(request)

        # Snapshot the request for the domain layer
        inbound = InboundRequest(
            method=request.method,
            path=request.url.path,
            headers=dict(request.headers.items()),
            body=await request.body(),
        )

        message = await command.execute(inbound)

        # Picked up by RequestLoggingMiddleware for the outcome line
        request.state.message_id = message.id
        request.state.payload_kind = message.kind.value

        return Response(status_code=status.HTTP_202_ACCEPTED)

    app.add_api_route(
        settings.path_pattern,
        ingest,
        methods=["POST"],
        status_code=status.HTTP_202_ACCEPTED,
        responses={
            400: {"model": ErrorResponse, "description": "Body cannot be decoded"},
            401: {"model": ErrorResponse, "description": "Missing credentials or CSRF token"},
            403: {"description": "Invalid CORS request"},
            500: {"model": ErrorResponse, "description": "Outbound channel failure"},
        },
        summary="Publish request body",
        tags=["ingress"],
    )


def create_app(
    settings: Optional[Settings] = None,
    sink: Optional[IMessageSinkPort] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; loaded from the environment when omitted
        sink: Outbound channel; built from ``settings.sink_type`` when omitted

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)

    # Sinks connect lazily, so building one here opens nothing
    sink = sink or create_message_sink(settings)

    app = FastAPI(
        title="HTTP Source",
        description="HTTP ingress republishing request bodies on an outbound message channel",
        version=__version__,
        lifespan=lifespan,
    )
    # Shared state for routes and lifespan
    app.state.settings = settings
    app.state.sink = sink
    app.state.publish_command = PublishMessageCommand(
        sink_port=sink,
        header_mapper=HeaderMapper(settings.mapped_request_headers),
    )

    _register_exception_handlers(app)

    # Last added runs first: logging -> CORS -> security -> routes
    app.add_middleware(SecurityMiddleware, config=SecurityConfig.from_settings(settings))
    app.add_middleware(
        CORSMiddleware,
        policy=CorsPolicy(
            allowed_origins=settings.cors.allowed_origins,
            allowed_headers=settings.cors.allowed_headers,
            allowed_methods=settings.cors.allowed_methods,
            allow_credentials=settings.cors.allow_credentials,
            max_age=settings.cors.max_age,
        ),
    )
    app.add_middleware(RequestLoggingMiddleware)

    _register_routes(app, settings)

    return app


# CLI entry point
def main():
    """Main entry point for running the HTTP source."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "http_source.interfaces.http.rest:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )


if __name__ == "__main__":
    main()
