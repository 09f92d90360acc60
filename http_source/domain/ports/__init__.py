"""
Domain Ports

Port interfaces defining contracts between layers.
"""

from .message_sink_port import IMessageSinkPort

__all__ = [
    "IMessageSinkPort",
]
