"""OpenAI client construction shared by the AI features."""

from __future__ import annotations

from openai import OpenAI

from config import Settings, get_settings

__all__ = ["AIConfigurationError", "build_openai_client"]


class AIConfigurationError(RuntimeError):
    """Raised when no API credentials are configured."""


def build_openai_client(settings: Settings | None = None) -> OpenAI:
    resolved = settings or get_settings()
    client_kwargs = resolved.openai_client_kwargs
    if "api_key" not in client_kwargs:
        raise AIConfigurationError(
            "Missing OpenAI API key. Set OPENAI_API_KEY or add it to .streamlit/secrets.toml under [openai]."
        )
    return OpenAI(**client_kwargs)
