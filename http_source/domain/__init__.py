"""
HTTP Source Domain Layer

Value objects, errors and pure services for translating HTTP requests
into outbound messages.
"""

from .value_objects import (
    AuthDecision,
    AuthOutcome,
    ContentClassification,
    InboundRequest,
    OutboundMessage,
    PayloadKind,
    SecurityMode,
)

__all__ = [
    "AuthDecision",
    "AuthOutcome",
    "ContentClassification",
    "InboundRequest",
    "OutboundMessage",
    "PayloadKind",
    "SecurityMode",
]
