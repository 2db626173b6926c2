"""Tests for Langfuse tracing setup behavior."""

from __future__ import annotations

import sys
import types

from article_updater.config import LangfuseConfig
from article_updater.llm import tracing


def test_setup_langfuse_uses_only_langfuse_base_url_env(monkeypatch):
    captured: dict = {}

    class DummyLangfuse:
        def __init__(self, **kwargs):
            captured.update(kwargs)

    monkeypatch.setattr(tracing, "_TRACER", None)
    monkeypatch.setattr(tracing, "_CFG", None)
    fake_module = types.SimpleNamespace(Langfuse=DummyLangfuse)
    monkeypatch.setitem(sys.modules, "langfuse", fake_module)
    monkeypatch.setenv("LANGFUSE_PUBLIC_KEY", "pk-test")
    monkeypatch.setenv("LANGFUSE_SECRET_KEY", "sk-test")
    monkeypatch.setenv("LANGFUSE_BASE_URL", "https://us.cloud.langfuse.com")
    monkeypatch.setenv("LANGFUSE_HOST", "https://should-be-ignored.example.com")

    tracing.setup_langfuse(LangfuseConfig(enabled=True, timeout_seconds=45))

    assert captured["public_key"] == "pk-test"
    assert captured["secret_key"] == "sk-test"
    assert captured["base_url"] == "https://us.cloud.langfuse.com"
    assert captured["timeout"] == 45


def test_setup_langfuse_disables_tracer_when_keys_missing(monkeypatch):
    monkeypatch.setattr(tracing, "_TRACER", None)
    monkeypatch.setattr(tracing, "_CFG", None)
    monkeypatch.delenv("LANGFUSE_PUBLIC_KEY", raising=False)
    monkeypatch.delenv("LANGFUSE_SECRET_KEY", raising=False)

    tracing.setup_langfuse(LangfuseConfig(enabled=True))

    assert tracing._TRACER is None


def test_start_span_is_noop_without_tracer(monkeypatch):
    monkeypatch.setattr(tracing, "_TRACER", None)

    with tracing.start_span("article_updater.article", kind="chain", input_value={"id": 1}) as span:
        tracing.set_span_output(span, {"status": "created"})
        tracing.record_span_error(span, RuntimeError("boom"))

    assert span is None


def test_span_payloads_are_scrubbed_with_configured_redaction(monkeypatch):
    calls: list[dict] = []

    class DummySpan:
        def update(self, **kwargs):
            calls.append(kwargs)

    class DummyContext:
        def __enter__(self):
            return DummySpan()

        def __exit__(self, *exc):
            return False

    class DummyTracer:
        def start_as_current_span(self, **kwargs):
            calls.append(kwargs)
            return DummyContext()

    monkeypatch.setattr(tracing, "_TRACER", DummyTracer())
    monkeypatch.setattr(tracing, "_CFG", LangfuseConfig(redaction="redact_urls_authors", max_text_chars=40))

    with tracing.start_span(
        "article_updater.rewrite",
        kind="llm",
        input_value="see https://example.com/post for details",
        attributes={"article_id": 7, "skipped": None},
    ) as span:
        tracing.set_span_output(span, "x" * 100)

    assert calls[0]["input"] == "see [REDACTED_URL] for details"
    assert calls[0]["metadata"] == {"article_id": 7, "span.kind": "llm"}
    assert calls[1]["output"] == "x" * 40 + "...(truncated)"
