"""Provider factory and registry for hot-swappable rewrite backends."""

from __future__ import annotations

import logging

from ...config import LoggingConfig, ProviderConfig, get_api_key
from .base import RewriteProvider
from .gemini import GeminiProvider
from .openai_compatible import OpenAICompatibleProvider


ProviderBuilder = type[RewriteProvider]

_PROVIDER_REGISTRY: dict[str, ProviderBuilder] = {
    "gemini": GeminiProvider,
    "openai": OpenAICompatibleProvider,
    "openai_compatible": OpenAICompatibleProvider,
    "openai-compatible": OpenAICompatibleProvider,
    "groq": OpenAICompatibleProvider,
}


def available_providers() -> list[str]:
    """Return the set of registered provider names."""
    return sorted(_PROVIDER_REGISTRY.keys())


def create_provider(
    provider_cfg: ProviderConfig,
    log_cfg: LoggingConfig,
    llm_logger: logging.Logger | None = None,
    timeout: float = 60.0,
) -> RewriteProvider:
    """Build a provider instance from runtime config."""
    name = provider_cfg.name.lower().strip()
    builder = _PROVIDER_REGISTRY.get(name)
    if builder is None:
        supported = ", ".join(available_providers())
        raise ValueError(f"Unsupported provider: {provider_cfg.name}. Supported: {supported}")
    api_key = get_api_key(provider_cfg)
    return builder(provider_cfg, api_key, log_cfg, llm_logger, timeout)


def create_configured_providers(
    provider_cfgs: list[ProviderConfig],
    log_cfg: LoggingConfig,
    llm_logger: logging.Logger | None = None,
    timeout: float = 60.0,
    logger: logging.Logger | None = None,
) -> list[RewriteProvider]:
    """Build the provider cascade, skipping providers without an API key."""
    providers: list[RewriteProvider] = []
    for cfg in provider_cfgs:
        if not get_api_key(cfg):
            if logger is not None:
                logger.debug("Skipping provider %s: no API key", cfg.label)
            continue
        providers.append(create_provider(cfg, log_cfg, llm_logger, timeout))
    return providers
