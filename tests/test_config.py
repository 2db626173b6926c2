"""Tests for YAML configuration loading and environment overrides."""

from __future__ import annotations

from article_updater.config import AppConfig, ProviderConfig, get_api_key, load_config
from article_updater.store.client import ArticleStore


def _clear_env(monkeypatch):
    for name in ("API_BASE_URL", "SEARXNG_URL", "PER_PAGE", "MIN_CONTENT"):
        monkeypatch.delenv(name, raising=False)


def test_missing_file_yields_defaults(monkeypatch, tmp_path):
    _clear_env(monkeypatch)

    cfg = load_config(str(tmp_path / "absent.yaml"))

    assert isinstance(cfg, AppConfig)
    assert cfg.store.base_url == "http://127.0.0.1:8000/api"
    assert cfg.fetch.concurrency == 3
    assert cfg.extract.min_content_chars == 800
    assert [p.label for p in cfg.rewrite.providers] == ["groq", "openai"]


def test_yaml_sections_merge_over_defaults(monkeypatch, tmp_path):
    _clear_env(monkeypatch)
    path = tmp_path / "config.yaml"
    path.write_text(
        "\n".join(
            [
                "store:",
                "  per_page: 20",
                "search:",
                "  use_seeds: false",
                "rewrite:",
                "  providers:",
                "    - name: gemini",
                "      label: gemini",
                "      model: gemini-2.0-flash",
                "      base_url: https://generativelanguage.googleapis.com",
                "unknown_section:",
                "  ignored: true",
            ]
        ),
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.store.per_page == 20
    assert cfg.store.max_pages == 10
    assert cfg.search.use_seeds is False
    assert cfg.search.excluded_domain == "beyondchats.com"
    assert len(cfg.rewrite.providers) == 1
    assert isinstance(cfg.rewrite.providers[0], ProviderConfig)
    assert cfg.rewrite.max_input_chars == 12000


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("API_BASE_URL", "http://store.internal")
    monkeypatch.setenv("SEARXNG_URL", "http://searx.internal/search")
    monkeypatch.setenv("PER_PAGE", "25")
    monkeypatch.setenv("MIN_CONTENT", "500")

    cfg = load_config(None)

    assert cfg.store.base_url == "http://store.internal/api"
    assert cfg.search.searx_url == "http://searx.internal/search"
    assert cfg.store.per_page == 25
    assert cfg.extract.min_content_chars == 500


def test_get_api_key_prefers_inline_value(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "from-env")

    assert get_api_key(ProviderConfig(api_key="inline", api_key_env="GROQ_API_KEY")) == "inline"
    assert get_api_key(ProviderConfig(api_key_env="GROQ_API_KEY")) == "from-env"


def test_api_base_url_is_host_root(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("API_BASE_URL", "http://127.0.0.1:8000/")

    cfg = load_config(None)

    assert cfg.store.base_url == "http://127.0.0.1:8000/api"
    assert ArticleStore(client=None, base_url=cfg.store.base_url).articles_url == (
        "http://127.0.0.1:8000/api/articles"
    )
