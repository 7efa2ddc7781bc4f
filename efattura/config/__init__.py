"""Configuration module."""

from efattura.config.logging import configure_logging, document_context, get_logger
from efattura.config.settings import Settings, get_settings, reset_settings

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    "document_context",
    "get_logger",
]
