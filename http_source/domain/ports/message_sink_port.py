"""
Message Sink Port Interface

Defines the contract for the outbound channel.
This is an output port - implemented by infrastructure layer.
"""

from abc import ABC, abstractmethod

from http_source.domain.value_objects import OutboundMessage


class IMessageSinkPort(ABC):
    """
    Port interface for the outbound messaging channel.

    Implementations deliver a message synchronously from the caller's
    point of view: ``send`` returns once the message was accepted and
    raises ``MessageSinkError`` otherwise.
    """

    @abstractmethod
    async def send(self, message: OutboundMessage) -> None:
        """
        Hand a message to the outbound channel.

        Args:
            message: Message to publish

        Raises:
            MessageSinkError: If the channel rejects the message
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Release connections held by the sink.

        Should be called during shutdown.
        """
        pass
