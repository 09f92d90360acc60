"""
Unit tests for PublishMessageCommand.
"""

from unittest.mock import AsyncMock

import pytest

from http_source.application.commands.publish_message import PublishMessageCommand
from http_source.domain.errors import BadRequestError, MessageSinkError
from http_source.domain.services import HeaderMapper
from http_source.domain.value_objects import InboundRequest


@pytest.fixture
def mock_sink_port():
    return AsyncMock()


@pytest.fixture
def command(mock_sink_port):
    return PublishMessageCommand(sink_port=mock_sink_port, header_mapper=HeaderMapper(["HTTP_REQUEST_HEADERS"]))


def _request(body=b"hello", **headers):
    return InboundRequest(method="POST", path="/", headers=headers, body=body)


@pytest.mark.unit
async def test_execute_sends_exactly_one_message(command, mock_sink_port):
    message = await command.execute(_request(**{"Content-Type": "text/plain", "Accept": "*/*", "foo": "bar"}))

    mock_sink_port.send.assert_awaited_once_with(message)
    assert message.payload == "hello"
    assert message.headers == {"accept": "*/*", "content-type": "text/plain;charset=UTF-8"}


@pytest.mark.unit
async def test_bad_body_never_reaches_sink(command, mock_sink_port):
    with pytest.raises(BadRequestError):
        await command.execute(_request(body=b"\xff", **{"Content-Type": "application/json"}))

    mock_sink_port.send.assert_not_awaited()


@pytest.mark.unit
async def test_sink_error_propagates(command, mock_sink_port):
    mock_sink_port.send.side_effect = MessageSinkError("down")

    with pytest.raises(MessageSinkError) as exc_info:
        await command.execute(_request())

    assert exc_info.value.message == "down"
    assert mock_sink_port.send.await_count == 1


@pytest.mark.unit
async def test_unexpected_sink_failure_is_wrapped(command, mock_sink_port):
    mock_sink_port.send.side_effect = ConnectionError("reset")

    with pytest.raises(MessageSinkError) as exc_info:
        await command.execute(_request())

    assert isinstance(exc_info.value.__cause__, ConnectionError)
    assert exc_info.value.details["reason"] == "reset"


@pytest.mark.unit
def test_build_message_binary(command):
    message = command.build_message(_request(body=b"\x00\x01", **{"Content-Type": "image/png"}))

    assert message.payload == b"\x00\x01"
    assert message.content_type == "image/png"
