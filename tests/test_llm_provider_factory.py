"""Tests for hot-swappable LLM provider factory and provider backends."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from article_updater.config import LoggingConfig, ProviderConfig
from article_updater.core.types import ArticleRecord
from article_updater.llm.providers.factory import (
    available_providers,
    create_configured_providers,
    create_provider,
)
from article_updater.llm.providers.gemini import GeminiProvider, _extract_text as gemini_text
from article_updater.llm.providers.openai_compatible import OpenAICompatibleProvider


ARTICLE = ArticleRecord(id=1, title="T", url="https://site.com/blog/x")


def test_available_providers_contains_expected_backends():
    names = available_providers()
    assert "gemini" in names
    assert "openai" in names
    assert "openai_compatible" in names
    assert "groq" in names


def test_create_provider_gemini():
    provider = create_provider(
        ProviderConfig(
            name="gemini",
            label="gemini",
            model="gemini-2.0-flash",
            api_key="test-key",
            base_url="https://generativelanguage.googleapis.com",
        ),
        LoggingConfig(),
        llm_logger=None,
    )
    assert isinstance(provider, GeminiProvider)


def test_create_provider_openai_compatible():
    provider = create_provider(
        ProviderConfig(
            name="openai_compatible",
            label="groq",
            model="llama-3.1-70b-versatile",
            api_key="test-key",
            base_url="https://api.groq.com/openai/v1",
        ),
        LoggingConfig(),
        llm_logger=None,
    )
    assert isinstance(provider, OpenAICompatibleProvider)
    assert provider.label == "groq"


def test_create_provider_rejects_unknown_backend():
    with pytest.raises(ValueError, match="Unsupported provider"):
        create_provider(
            ProviderConfig(
                name="unknown-provider",
                model="x",
                api_key="test-key",
                base_url="https://example.com",
            ),
            LoggingConfig(),
            llm_logger=None,
        )


def test_configured_providers_skip_missing_keys(monkeypatch):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    cfgs = [
        ProviderConfig(label="groq", api_key_env="GROQ_API_KEY"),
        ProviderConfig(label="openai", api_key_env="OPENAI_API_KEY"),
    ]

    providers = create_configured_providers(cfgs, LoggingConfig())

    assert [p.label for p in providers] == ["openai"]


def test_openai_compatible_rewrite_reads_first_choice(monkeypatch):
    provider = OpenAICompatibleProvider(ProviderConfig(label="openai"), "sk-test", LoggingConfig())
    sent: dict = {}

    async def fake_post(payload):
        sent.update(payload)
        return {"choices": [{"message": {"content": "  Rewritten text \n"}}]}

    monkeypatch.setattr(provider, "_post", fake_post)

    text = asyncio.run(provider.rewrite(ARTICLE, "system prompt", '{"original_title": "T"}'))

    assert text == "Rewritten text"
    assert sent["messages"][0] == {"role": "system", "content": "system prompt"}


def test_provider_error_yields_empty_text(monkeypatch):
    provider = OpenAICompatibleProvider(ProviderConfig(label="groq"), "sk-test", LoggingConfig())

    async def failing_post(payload):
        raise httpx.ReadTimeout("timed out")

    monkeypatch.setattr(provider, "_post", failing_post)

    assert asyncio.run(provider.rewrite(ARTICLE, "s", "u")) == ""


def test_gemini_extract_text_joins_non_thought_parts():
    data = {
        "candidates": [
            {
                "content": {
                    "parts": [
                        {"thought": True, "text": "internal reasoning"},
                        {"text": "Rewritten "},
                        {"text": "article"},
                    ]
                }
            }
        ]
    }

    assert gemini_text(data) == "Rewritten article"


def test_gemini_extract_text_falls_back_to_all_text_when_only_thought():
    data = {
        "candidates": [
            {
                "content": {
                    "parts": [
                        {"thought": True, "text": "first"},
                        {"thought": True, "text": " second"},
                    ]
                }
            }
        ]
    }

    assert gemini_text(data) == "first second"


def test_missing_api_key_is_rejected():
    with pytest.raises(ValueError, match="Missing API key"):
        GeminiProvider(ProviderConfig(name="gemini", label="gemini"), None, LoggingConfig())
