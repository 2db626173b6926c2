"""Tests for the rewrite provider cascade and citation formatting."""

from __future__ import annotations

import asyncio
import json

import pytest

from article_updater.analyzers.rewriter import (
    RewriteEngine,
    simple_rewrite,
    with_citations,
)
from article_updater.config import RewriteConfig
from article_updater.core.errors import RewriteFailure
from article_updater.core.types import ArticleRecord, Reference


class _StubProvider:
    def __init__(self, label: str, text: str):
        self.label = label
        self.text = text
        self.prompts: list[tuple[str, str]] = []

    async def rewrite(self, original, system, user):  # noqa: ANN001
        self.prompts.append((system, user))
        return self.text


ORIGINAL = ArticleRecord(
    id=7,
    title="Chatbots vs Live Chat",
    url="https://beyondchats.com/blogs/chatbots-vs-live-chat/",
    source="BeyondChats",
    excerpt="Short excerpt",
    content="Original body text.",
)

REFERENCES = [
    Reference(url="https://a.example.com/blog/p", title="A", text="A" * 3000),
    Reference(url="https://b.example.com/news/q", title="B", text="B" * 3000),
]


def test_cascade_skips_empty_provider_output():
    first = _StubProvider("groq", "   ")
    second = _StubProvider("openai", "Rewritten article.")
    engine = RewriteEngine([first, second], RewriteConfig())

    result = asyncio.run(engine.rewrite(ORIGINAL, REFERENCES))

    assert result.text == "Rewritten article."
    assert result.provider == "openai"
    system, user = first.prompts[0]
    assert "factual accuracy" in system
    payload = json.loads(user)
    assert set(payload) == {"original_title", "original_content", "reference_1", "reference_2"}
    assert payload["original_content"] == "Original body text."


def test_fallback_is_used_without_providers():
    engine = RewriteEngine([], RewriteConfig())

    result = asyncio.run(engine.rewrite(ORIGINAL, REFERENCES))

    assert result.provider == "simple"
    assert result.text.startswith("Chatbots vs Live Chat\n")
    assert "A" * 2000 in result.text
    assert "A" * 2001 not in result.text
    assert "Original body text." in result.text
    assert result.text.rstrip().endswith("B" * 2000)


def test_simple_rewrite_falls_back_to_excerpt():
    record = ArticleRecord(id=1, title="T", url="https://site.com/a/b", excerpt="Only excerpt")

    text = simple_rewrite(record, REFERENCES[:1])

    assert "Only excerpt" in text


def test_rewrite_failure_when_nothing_to_merge():
    record = ArticleRecord(id=1, title="", url="https://site.com/a/b")
    empty = [Reference(url="https://a.example.com/x/y", title="", text="")]
    engine = RewriteEngine([_StubProvider("groq", "")], RewriteConfig())

    with pytest.raises(RewriteFailure):
        asyncio.run(engine.rewrite(record, empty))


def test_with_citations_appends_numbered_references():
    text = with_citations("Body", REFERENCES)

    assert text == "Body\n\nReferences:\n1. https://a.example.com/blog/p\n2. https://b.example.com/news/q\n"
