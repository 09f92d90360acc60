"""
HTTP Source

HTTP ingress adapter that republishes request bodies as messages on an
outbound channel of a messaging pipeline.
"""

__version__ = "1.0.0"

from .domain.value_objects import (
    AuthDecision,
    AuthOutcome,
    InboundRequest,
    OutboundMessage,
    PayloadKind,
    SecurityMode,
)

__all__ = [
    "AuthDecision",
    "AuthOutcome",
    "InboundRequest",
    "OutboundMessage",
    "PayloadKind",
    "SecurityMode",
]
