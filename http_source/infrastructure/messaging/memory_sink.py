"""
In-memory message sink.

Collects published messages in process. Used by the default ``memory``
sink mode and by tests to observe what the adapter emitted.
"""

from collections import deque
from typing import Deque, List, Optional

from http_source.domain.ports import IMessageSinkPort
from http_source.domain.value_objects import OutboundMessage
from http_source.infrastructure.logging import get_logger


logger = get_logger(__name__)


class InMemoryMessageSink(IMessageSinkPort):
    """
    Collecting sink backed by a deque.

    When ``max_messages`` is set the oldest messages are dropped once the
    limit is reached.
    """

    def __init__(self, max_messages: Optional[int] = None):
        self._messages: Deque[OutboundMessage] = deque(maxlen=max_messages)

    @property
    def messages(self) -> List[OutboundMessage]:
        return list(self._messages)

    @property
    def max_messages(self) -> Optional[int]:
        return self._messages.maxlen

    async def send(self, message: OutboundMessage) -> None:
        self._messages.append(message)
        logger.debug("Message collected", message_id=message.id, pending=len(self._messages))

    def poll(self) -> Optional[OutboundMessage]:
        """Pop the oldest collected message, or None."""
        if not self._messages:
            return None
        return self._messages.popleft()

    def clear(self) -> None:
        self._messages.clear()

    async def close(self) -> None:
        self._messages.clear()
