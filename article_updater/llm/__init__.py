"""LLM rewrite providers and observability."""

from .providers import (
    GeminiProvider,
    OpenAICompatibleProvider,
    RewriteProvider,
    available_providers,
    create_configured_providers,
    create_provider,
)
from .tracing import flush, record_span_error, set_span_output, setup_langfuse, start_span

__all__ = [
    "RewriteProvider",
    "GeminiProvider",
    "OpenAICompatibleProvider",
    "create_provider",
    "create_configured_providers",
    "available_providers",
    "setup_langfuse",
    "flush",
    "start_span",
    "set_span_output",
    "record_span_error",
]
