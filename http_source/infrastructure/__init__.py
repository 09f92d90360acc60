"""
Infrastructure Layer

Provides technical implementations for external concerns.
"""

from .messaging import HttpMessageSink, InMemoryMessageSink, RabbitMQMessageSink, create_message_sink

__all__ = ["HttpMessageSink", "InMemoryMessageSink", "RabbitMQMessageSink", "create_message_sink"]
