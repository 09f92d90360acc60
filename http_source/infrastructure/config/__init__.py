"""
Configuration

Environment-driven settings.
"""

from .config import CorsSettings, Settings, get_settings

__all__ = ["CorsSettings", "Settings", "get_settings"]
