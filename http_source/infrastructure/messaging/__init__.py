"""
Messaging Infrastructure

Outbound channel adapters implementing IMessageSinkPort.
"""

from http_source.domain.ports import IMessageSinkPort

from .http_sink import HttpMessageSink
from .memory_sink import InMemoryMessageSink
from .rabbitmq_sink import RabbitMQMessageSink


def create_message_sink(settings) -> IMessageSinkPort:
    """
    Build the sink selected by ``settings.sink_type``.

    No connection is opened here; sinks connect on first use.
    """
    if settings.sink_type == "http":
        return HttpMessageSink(url=settings.sink_http_url, timeout=settings.sink_http_timeout)
    if settings.sink_type == "rabbitmq":
        return RabbitMQMessageSink(
            host=settings.rabbitmq_host,
            port=settings.rabbitmq_port,
            exchange=settings.rabbitmq_exchange,
            routing_key=settings.rabbitmq_routing_key,
        )
    return InMemoryMessageSink(max_messages=settings.memory_sink_max_messages)


__all__ = [
    "HttpMessageSink",
    "InMemoryMessageSink",
    "RabbitMQMessageSink",
    "create_message_sink",
]
