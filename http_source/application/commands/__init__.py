"""
Application Commands
"""

from .publish_message import PublishMessageCommand

__all__ = ["PublishMessageCommand"]
