"""Application configuration utilities."""

from .settings import DEFAULT_OPENAI_MODEL, Settings, configure_logging, get_settings

__all__ = [
    "DEFAULT_OPENAI_MODEL",
    "Settings",
    "configure_logging",
    "get_settings",
]
