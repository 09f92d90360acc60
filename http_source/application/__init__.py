"""
HTTP Source Application Layer

Use cases orchestrating domain services and ports.
"""

from .commands.publish_message import PublishMessageCommand

__all__ = ["PublishMessageCommand"]
