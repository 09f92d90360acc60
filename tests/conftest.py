"""Pytest configuration and fixtures."""

from typing import Callable

import pytest
from httpx import ASGITransport, AsyncClient

from http_source.infrastructure.config import Settings
from http_source.infrastructure.messaging import InMemoryMessageSink
from http_source.interfaces.http.rest import create_app


@pytest.fixture
def sink() -> InMemoryMessageSink:
    """Collecting sink standing in for the outbound channel."""
    return InMemoryMessageSink()


@pytest.fixture
def make_client(sink) -> Callable[..., AsyncClient]:
    """
    Build a test client for an app configured with the given settings.

    Example:
        async with make_client(path_pattern="/foo") as client:
            ...
    """

    def _make(app_sink=None, **overrides) -> AsyncClient:
        settings = Settings(**overrides)
        app = create_app(settings=settings, sink=app_sink or sink)
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    return _make


@pytest.fixture
async def client(make_client) -> AsyncClient:
    """Client for an unsecured app listening on /foo."""
    async with make_client(path_pattern="/foo") as ac:
        yield ac
