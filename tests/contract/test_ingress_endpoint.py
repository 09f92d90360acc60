"""
Contract tests for the ingress endpoint.

Validates status codes, payload representation and header mapping of
POST requests republished on the outbound channel.
"""

import json
from unittest.mock import patch

import pytest

from http_source.domain.value_objects import PayloadKind
from http_source.interfaces.http.middleware import logging_middleware


@pytest.mark.contract
async def test_text_without_content_type(client, sink):
    """A body without Content-Type is published as UTF-8 text."""
    response = await client.post("/foo", content=b"hello")

    assert response.status_code == 202
    assert response.content == b""

    message = sink.poll()
    assert message is not None
    assert message.payload == "hello"
    assert message.kind is PayloadKind.TEXT
    assert message.content_type == "text/plain;charset=UTF-8"


@pytest.mark.contract
async def test_bytes(client, sink):
    """Non-text content types are published as raw bytes."""
    response = await client.post(
        "/foo",
        content=b"hello",
        headers={"Content-Type": "application/octet-stream"},
    )

    assert response.status_code == 202
    message = sink.poll()
    assert message.payload == b"hello"
    assert message.kind is PayloadKind.BINARY
    assert message.content_type == "application/octet-stream"


@pytest.mark.contract
async def test_json(client, sink):
    """JSON is text, content-type is canonical and custom headers are not mapped by default."""
    body = json.dumps({"foo": 1, "bar": True}, separators=(",", ":"))

    response = await client.post(
        "/foo",
        content=body,
        headers={"Content-Type": "application/json", "foo": "bar"},
    )

    assert response.status_code == 202
    message = sink.poll()
    assert message.payload == '{"foo":1,"bar":true}'
    assert message.content_type == "application/json;charset=UTF-8"
    assert "foo" not in message.headers


@pytest.mark.contract
async def test_json_lower_case_content_type(client, sink):
    response = await client.post(
        "/foo",
        content='{"foo":1,"bar":true}',
        headers={"content-type": "application/json;charset=utf-8", "foo": "bar"},
    )

    assert response.status_code == 202
    message = sink.poll()
    assert message.payload == '{"foo":1,"bar":true}'
    assert message.content_type == "application/json;charset=UTF-8"
    assert "foo" not in message.headers


@pytest.mark.contract
async def test_mixed_case_json_content_type_is_text(client, sink):
    response = await client.post(
        "/foo",
        content='{"a":1}',
        headers={"Content-Type": "Application/JSON"},
    )

    assert response.status_code == 202
    message = sink.poll()
    assert message.payload == '{"a":1}'
    assert message.content_type == "application/json;charset=UTF-8"


@pytest.mark.contract
async def test_declared_charset_is_used_for_decoding(client, sink):
    response = await client.post(
        "/foo",
        content="café".encode("iso-8859-1"),
        headers={"Content-Type": "text/plain; charset=ISO-8859-1"},
    )

    assert response.status_code == 202
    message = sink.poll()
    assert message.payload == "café"
    assert message.content_type == "text/plain;charset=ISO-8859-1"


@pytest.mark.contract
async def test_standard_headers_are_mapped_by_default(client, sink):
    response = await client.post(
        "/foo",
        content="hello",
        headers={"User-Agent": "ingress-client/1.0", "X-Custom": "nope"},
    )

    assert response.status_code == 202
    message = sink.poll()
    assert message.headers["user-agent"] == "ingress-client/1.0"
    assert "x-custom" not in message.headers


@pytest.mark.contract
async def test_unknown_charset_is_bad_request(client, sink):
    response = await client.post(
        "/foo",
        content=b"hello",
        headers={"Content-Type": "text/plain; charset=no-such-charset"},
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "HttpSource.BadRequest"
    assert sink.poll() is None


@pytest.mark.contract
@pytest.mark.parametrize("charset", ["hex", "base64"])
async def test_non_text_charset_is_bad_request(client, sink, charset):
    response = await client.post(
        "/foo",
        content=b"68656c6c6f",
        headers={"Content-Type": f"text/plain; charset={charset}"},
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "HttpSource.BadRequest"
    assert sink.poll() is None


@pytest.mark.contract
async def test_undecodable_body_is_bad_request(client, sink):
    response = await client.post(
        "/foo",
        content=b"\xff\xfe\xfa",
        headers={"Content-Type": "text/plain; charset=utf-8"},
    )

    assert response.status_code == 400
    assert sink.poll() is None


@pytest.mark.contract
async def test_wrong_method_is_method_not_allowed(client, sink):
    response = await client.get("/foo")

    assert response.status_code == 405
    assert sink.poll() is None


@pytest.mark.contract
async def test_unmatched_path_is_not_found(client, sink):
    response = await client.post("/bar", content="hello")

    assert response.status_code == 404
    assert sink.poll() is None


@pytest.mark.contract
async def test_default_path_is_root(make_client, sink):
    async with make_client() as client:
        response = await client.post("/", content="hello")

    assert response.status_code == 202
    assert sink.poll().payload == "hello"


@pytest.mark.contract
async def test_path_pattern_with_path_parameter(make_client, sink):
    async with make_client(path_pattern="/ingest/{rest:path}") as client:
        response = await client.post("/ingest/a/b", content="hello")

    assert response.status_code == 202
    assert sink.poll().payload == "hello"


@pytest.mark.contract
async def test_identical_requests_produce_independent_messages(client, sink):
    first = await client.post("/foo", content="hello")
    second = await client.post("/foo", content="hello")

    assert first.status_code == second.status_code == 202
    messages = sink.messages
    assert len(messages) == 2
    assert messages[0].payload == messages[1].payload == "hello"
    assert messages[0].id != messages[1].id


@pytest.mark.contract
async def test_response_carries_request_id(client):
    response = await client.post("/foo", content="hello")

    assert response.headers["X-Request-ID"]
    assert "X-Process-Time" in response.headers


@pytest.mark.contract
async def test_health_endpoint(client):
    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "UP"
    assert body["sink"] == "memory"


@pytest.mark.contract
async def test_caller_request_id_is_propagated(client):
    response = await client.post("/foo", content="hello", headers={"X-Request-ID": "trace-123"})

    assert response.headers["X-Request-ID"] == "trace-123"


@pytest.mark.contract
async def test_outcome_log_carries_message_id(client, sink):
    with patch.object(logging_middleware, "logger") as logger:
        response = await client.post("/foo", content="hello")

    message = sink.poll()
    assert response.status_code == 202
    logger.info.assert_called_once()
    assert logger.info.call_args.args == ("Request completed",)
    assert logger.info.call_args.kwargs["message_id"] == message.id
    assert logger.info.call_args.kwargs["payload_kind"] == "text"
    assert logger.info.call_args.kwargs["status_code"] == 202


@pytest.mark.contract
async def test_rejected_request_is_logged_as_warning(client, sink):
    with patch.object(logging_middleware, "logger") as logger:
        response = await client.post(
            "/foo",
            content=b"hello",
            headers={"Content-Type": "text/plain; charset=no-such-charset"},
        )

    assert response.status_code == 400
    logger.info.assert_not_called()
    logger.warning.assert_called_once()
    assert "message_id" not in logger.warning.call_args.kwargs
