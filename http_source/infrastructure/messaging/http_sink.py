"""
HTTP forwarding sink.

Implements IMessageSinkPort by POSTing each message to a downstream
HTTP endpoint. A single attempt is made per message; failures surface
to the caller as MessageSinkError.
"""

from typing import Dict, Optional

import httpx

from http_source.domain.errors import MessageSinkError
from http_source.domain.ports import IMessageSinkPort
from http_source.domain.value_objects import CONTENT_TYPE_HEADER, OutboundMessage
from http_source.infrastructure.logging import get_logger


logger = get_logger(__name__)

HEADER_PREFIX = "X-Source-Header-"

# Hop-by-hop and framing headers that must not be replayed downstream
_SKIPPED_HEADERS = frozenset(
    {"host", "content-length", "connection", "transfer-encoding", "expect", "upgrade", "te"}
)


class HttpMessageSink(IMessageSinkPort):
    """
    Async HTTP client delivering messages to a downstream endpoint.

    Wire format:
    - body: payload bytes (text encoded with its declared charset)
    - Content-Type: the message content type
    - X-Source-Header-<name>: every other forwarded header
    - X-Message-Id / X-Message-Timestamp: message identity
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the HTTP sink.

        Args:
            url: Downstream endpoint receiving the messages
            timeout: Request timeout in seconds
            client: Pre-built client, mainly for tests
        """
        self.url = url
        self.timeout = httpx.Timeout(timeout, connect=min(timeout, 5.0))
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    @staticmethod
    def build_headers(message: OutboundMessage) -> Dict[str, str]:
        headers = {
            "X-Message-Id": message.id,
            "X-Message-Timestamp": str(message.timestamp),
        }
        if message.content_type:
            headers["Content-Type"] = message.content_type

        # Forwarded request headers travel under a prefix
        for name, value in message.headers.items():
            if name == CONTENT_TYPE_HEADER or name in _SKIPPED_HEADERS:
                continue
            headers[f"{HEADER_PREFIX}{name}"] = value
        return headers

    async def send(self, message: OutboundMessage) -> None:
        client = await self._get_client()

        try:
            response = await client.post(
                self.url,
                content=message.payload_bytes(),
                headers=self.build_headers(message),
            )
        except httpx.TimeoutException as e:
            logger.warning("Sink request timed out", message_id=message.id, url=self.url, error=str(e))
            raise MessageSinkError("Outbound endpoint timed out", details={"url": self.url}) from e
        except httpx.HTTPError as e:
            logger.warning("Sink request failed", message_id=message.id, url=self.url, error=str(e))
            raise MessageSinkError("Outbound endpoint unreachable", details={"url": self.url}) from e

        # Only 2xx counts as delivered
        if not 200 <= response.status_code < 300:
            logger.error(
                "Sink rejected message",
                message_id=message.id,
                url=self.url,
                status_code=response.status_code,
                response=response.text,
            )
            raise MessageSinkError(
                f"Outbound endpoint returned {response.status_code}",
                details={"url": self.url, "status_code": response.status_code},
            )

        logger.debug("Message delivered", message_id=message.id, status_code=response.status_code)

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
