"""
RabbitMQ message sink.

Publishes each message to an exchange/routing key through a pika
BlockingConnection. Blocking calls run in a worker thread and are
serialized by a lock since pika channels are not thread-safe.
"""

import asyncio
import threading

import pika
import pika.exceptions

from http_source.domain.errors import MessageSinkError
from http_source.domain.ports import IMessageSinkPort
from http_source.domain.value_objects import CONTENT_TYPE_HEADER, OutboundMessage
from http_source.infrastructure.logging import get_logger


logger = get_logger(__name__)

PERSISTENT_DELIVERY_MODE = 2


class RabbitMQMessageSink(IMessageSinkPort):
    """
    Publishing sink for RabbitMQ.

    The connection is opened on first use. When publishing fails the
    connection is dropped, and the next message opens a fresh one.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 5672,
        exchange: str = "",
        routing_key: str = "http-source",
        connection_factory=None,
    ):
        """
        Initialize the RabbitMQ sink.

        Args:
            host: Broker host
            port: Broker port
            exchange: Exchange to publish to ("" is the default exchange)
            routing_key: Routing key (queue name for the default exchange)
            connection_factory: Callable returning a pika connection, mainly for tests
        """
        self.host = host
        self.port = port
        self.exchange = exchange
        self.routing_key = routing_key
        self._connection_factory = connection_factory or self._default_connection
        self._connection = None
        self._channel = None
        self._lock = threading.Lock()

    def _default_connection(self):
        return pika.BlockingConnection(pika.ConnectionParameters(host=self.host, port=self.port))

    def _ensure_channel(self):
        if self._connection is None or self._connection.is_closed:
            self._connection = self._connection_factory()
            self._channel = None
            logger.info("Connected to RabbitMQ", host=self.host, port=self.port)
        if self._channel is None or self._channel.is_closed:
            self._channel = self._connection.channel()
        return self._channel

    def _reset(self) -> None:
        connection = self._connection
        self._connection = None
        self._channel = None
        if connection is not None and connection.is_open:
            try:
                connection.close()
            except pika.exceptions.AMQPError as e:
                logger.debug("Ignoring error while closing broken connection", error=str(e))

    @staticmethod
    def build_properties(message: OutboundMessage) -> pika.BasicProperties:
        headers = {k: v for k, v in message.headers.items() if k != CONTENT_TYPE_HEADER}
        return pika.BasicProperties(
            content_type=message.content_type,
            headers=headers,
            message_id=message.id,
            timestamp=message.timestamp // 1000,
            delivery_mode=PERSISTENT_DELIVERY_MODE,
        )

    def _publish(self, message: OutboundMessage) -> None:
        with self._lock:
            try:
                channel = self._ensure_channel()
                channel.basic_publish(
                    exchange=self.exchange,
                    routing_key=self.routing_key,
                    body=message.payload_bytes(),
                    properties=self.build_properties(message),
                )
            except pika.exceptions.AMQPError as e:
                # Next publish reconnects from scratch
                self._reset()
                logger.error(
                    "RabbitMQ publish failed",
                    message_id=message.id,
                    exchange=self.exchange,
                    routing_key=self.routing_key,
                    error=str(e) or type(e).__name__,
                )
                raise MessageSinkError(
                    "RabbitMQ publish failed",
                    details={"exchange": self.exchange, "routing_key": self.routing_key},
                ) from e

    async def send(self, message: OutboundMessage) -> None:
        await asyncio.to_thread(self._publish, message)
        logger.debug(
            "Message published to RabbitMQ",
            message_id=message.id,
            exchange=self.exchange,
            routing_key=self.routing_key,
        )

    def _close(self) -> None:
        with self._lock:
            self._reset()

    async def close(self) -> None:
        await asyncio.to_thread(self._close)
        logger.info("RabbitMQ connection closed")
