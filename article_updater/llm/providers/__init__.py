"""Rewrite provider backends."""

from .base import RewriteProvider
from .factory import available_providers, create_configured_providers, create_provider
from .gemini import GeminiProvider
from .openai_compatible import OpenAICompatibleProvider

__all__ = [
    "RewriteProvider",
    "GeminiProvider",
    "OpenAICompatibleProvider",
    "available_providers",
    "create_provider",
    "create_configured_providers",
]
