"""
Ingress Value Objects

Immutable value objects for requests entering the adapter and
messages leaving it.
"""

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union


CONTENT_TYPE_HEADER = "content-type"


class PayloadKind(str, Enum):
    """Representation chosen for the outbound payload."""

    TEXT = "text"
    BINARY = "binary"


class SecurityMode(str, Enum):
    """Security gate mode, fixed at configuration load time."""

    DISABLED = "disabled"
    ENABLED_NO_CSRF = "enabled_no_csrf"
    ENABLED_WITH_CSRF = "enabled_with_csrf"

    @classmethod
    def from_flags(cls, secured: bool, csrf_enabled: bool) -> "SecurityMode":
        """Derive the mode from the two configuration flags."""
        if not secured:
            return cls.DISABLED
        if csrf_enabled:
            return cls.ENABLED_WITH_CSRF
        return cls.ENABLED_NO_CSRF


class AuthOutcome(str, Enum):
    """Result of the security gate."""

    ALLOWED = "allowed"
    MISSING_CREDENTIALS = "missing_credentials"
    BAD_CREDENTIALS = "bad_credentials"
    INVALID_CSRF_TOKEN = "invalid_csrf_token"


@dataclass(frozen=True)
class AuthDecision:
    """
    Decision returned by the security policy.

    Attributes:
        outcome: What the gate decided
        principal: Authenticated user name, if any
    """

    outcome: AuthOutcome
    principal: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.outcome is AuthOutcome.ALLOWED


@dataclass(frozen=True)
class ContentClassification:
    """
    Outcome of Content-Type classification.

    Attributes:
        kind: TEXT or BINARY
        media_type: Lower-cased type/subtype
        charset: Charset used to decode TEXT payloads
        canonical: Content type attributed to the outbound message
    """

    kind: PayloadKind
    media_type: str
    charset: Optional[str]
    canonical: str


@dataclass(frozen=True)
class InboundRequest:
    """
    HTTP request as seen by the adapter.

    Header names are kept as received; lookups are case-insensitive.
    """

    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def content_type(self) -> Optional[str]:
        return self.header(CONTENT_TYPE_HEADER)

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


def _new_message_id() -> str:
    return str(uuid.uuid4())


def _now_millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class OutboundMessage:
    """
    Message handed to the outbound sink.

    Attributes:
        payload: Decoded text or raw bytes
        headers: Forwarded headers plus the canonical content-type
        id: Unique message identifier
        timestamp: Creation time in epoch milliseconds
    """

    payload: Union[str, bytes]
    headers: Mapping[str, str] = field(default_factory=dict)
    id: str = field(default_factory=_new_message_id)
    timestamp: int = field(default_factory=_now_millis)

    def __post_init__(self):
        # Read-only view over a private copy of the headers
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get(CONTENT_TYPE_HEADER)

    @property
    def kind(self) -> PayloadKind:
        return PayloadKind.TEXT if isinstance(self.payload, str) else PayloadKind.BINARY

    def payload_bytes(self) -> bytes:
        """Payload encoded for the wire, using the declared charset for text."""
        if isinstance(self.payload, bytes):
            return self.payload
        charset = "utf-8"
        for param in (self.content_type or "").split(";")[1:]:
            name, _, value = param.partition("=")
            if name.strip().lower() == "charset" and value.strip():
                charset = value.strip().strip('"')
        return self.payload.encode(charset)

    def to_dict(self) -> Dict[str, object]:
        """Summary for logging; the payload itself is not included."""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "kind": self.kind.value,
            "size": len(self.payload),
            "headers": dict(self.headers),
        }
