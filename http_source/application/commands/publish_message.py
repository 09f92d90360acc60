"""
Publish Message Command

Main ingress use case.
Turns an accepted HTTP request into exactly one outbound message.
"""

import structlog

from http_source.domain.errors import HttpSourceError, MessageSinkError
from http_source.domain.ports import IMessageSinkPort
from http_source.domain.services import HeaderMapper, classify_content_type, decode_payload
from http_source.domain.value_objects import (
    CONTENT_TYPE_HEADER,
    InboundRequest,
    OutboundMessage,
)


logger = structlog.get_logger(__name__)


class PublishMessageCommand:
    """
    Command handler for the ingress use case.

    Orchestrates the flow:
    1. Classify the body from Content-Type
    2. Decode the payload (text) or keep raw bytes (binary)
    3. Map allow-listed headers and set the canonical content-type
    4. Hand the message to the sink
    """

    def __init__(self, sink_port: IMessageSinkPort, header_mapper: HeaderMapper):
        """
        Initialize the publish command.

        Args:
            sink_port: Outbound channel
            header_mapper: Header allow-list
        """
        self._sink_port = sink_port
        self._header_mapper = header_mapper

    def build_message(self, request: InboundRequest) -> OutboundMessage:
        """
        Build the outbound message for a request.

        Raises:
            BadRequestError: If the body cannot be decoded
        """
        # Content-Type alone decides text vs binary
        classification = classify_content_type(request.content_type)
        payload = decode_payload(request.body, classification)

        # Forward allow-listed headers; content-type is always the canonical one
        headers = self._header_mapper.map_headers(request.headers)
        headers[CONTENT_TYPE_HEADER] = classification.canonical

        return OutboundMessage(payload=payload, headers=headers)

    async def execute(self, request: InboundRequest) -> OutboundMessage:
        """
        Publish the request body to the outbound channel.

        Args:
            request: Inbound request

        Returns:
            The message that was handed to the sink

        Raises:
            BadRequestError: If the body cannot be decoded
            MessageSinkError: If the sink fails
        """
        message = self.build_message(request)

        # Sink adapters log under the same message context
        structlog.contextvars.bind_contextvars(
            message_id=message.id,
            payload_kind=message.kind.value,
        )

        try:
            await self._sink_port.send(message)
        except HttpSourceError:
            logger.error("Message publish failed", path=request.path)
            raise
        except Exception as e:
            # Unknown sink failures surface as MessageSinkError
            logger.error(
                "Message publish failed",
                path=request.path,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise MessageSinkError(
                "Outbound channel rejected the message",
                details={"message_id": message.id, "reason": str(e)},
            ) from e

        logger.info(
            "Message published",
            size=len(message.payload),
            content_type=message.content_type,
        )
        return message
