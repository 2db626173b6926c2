"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- StoreConfig: Backing article store API settings
- FetchConfig: HTTP fetching settings for search and reference pages
- ExtractConfig: Content extraction thresholds and tier order
- SearchConfig: Search provider endpoints and domain blocklist
- RewriteConfig: LLM provider cascade and fallback truncation limits
- PipelineConfig: Lineage tags and work-queue sizing
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml


@dataclass
class StoreConfig:
    """Configuration for the backing article store.

    Attributes:
        base_url: Base URL of the store API (``/articles`` is appended)
        per_page: Page size used when listing the full corpus
        max_pages: Hard stop for pagination
    """

    base_url: str = "http://127.0.0.1:8000/api"
    per_page: int = 50
    max_pages: int = 10


@dataclass
class FetchConfig:
    """Configuration for outbound HTTP requests.

    Attributes:
        timeout_seconds: Request timeout applied to every external call
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
        accept_language: Accept-Language header sent with every request
        concurrency: Maximum number of reference pages fetched at once
        max_candidates: Maximum accepted candidates to fetch per topic
    """

    timeout_seconds: float = 60.0
    trust_env: bool = True
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    accept_language: str = "en-US,en;q=0.9"
    concurrency: int = 3
    max_candidates: int = 6


@dataclass
class ExtractConfig:
    """Configuration for HTML content extraction.

    Attributes:
        order: Extraction tiers to try, in order ("readability", "containers", "regex")
        min_extract_chars: Minimum text length for a tier to be accepted
        min_content_chars: A reference must be strictly longer than this
    """

    order: list[str] = field(default_factory=lambda: ["readability", "containers", "regex"])
    min_extract_chars: int = 300
    min_content_chars: int = 800


@dataclass
class SearchConfig:
    """Configuration for the search provider cascade.

    Attributes:
        searx_url: Search endpoint of the meta-search aggregator
        duckduckgo_url: DuckDuckGo HTML endpoint
        bing_url: Bing search endpoint
        excluded_domain: Domain of the ingestion source, never a reference
        blocked_domains: Host fragments that are never article candidates
        max_results: Maximum URLs returned by a single provider
        use_seeds: Whether to fall back to curated topic seeds
    """

    searx_url: str = "https://searxng.matrixaiserver.com/search"
    duckduckgo_url: str = "https://duckduckgo.com/html/"
    bing_url: str = "https://www.bing.com/search"
    excluded_domain: str = "beyondchats.com"
    blocked_domains: list[str] = field(
        default_factory=lambda: [
            "w3.org",
            "web.archive.org",
            "youtube.com",
            "youtu.be",
            "twitter.com",
            "x.com",
            "facebook.com",
            "instagram.com",
            "reddit.com",
            "linkedin.com",
            "amazon.",
            "github.com",
            "google.",
            "webcache.googleusercontent.com",
        ]
    )
    max_results: int = 10
    use_seeds: bool = True


@dataclass
class ProviderConfig:
    """Configuration for a single text-generation provider.

    Attributes:
        name: Provider backend ("openai_compatible" or "gemini")
        label: Human readable name used in logs and output ("groq", "openai")
        model: Model identifier
        api_key_env: Environment variable holding the API key
        base_url: Base URL of the provider API
        api_key: Optional inline API key (overrides env var)
        temperature: Sampling temperature
        trust_env: Whether to respect system proxy settings for API requests
    """

    name: str = "openai_compatible"
    label: str = "openai"
    model: str = "gpt-4o-mini"
    api_key_env: str | None = None
    base_url: str = "https://api.openai.com/v1"
    api_key: str | None = None
    temperature: float = 0.7
    trust_env: bool = True


def _default_providers() -> list[ProviderConfig]:
    return [
        ProviderConfig(
            name="openai_compatible",
            label="groq",
            model=os.getenv("GROQ_MODEL", "llama-3.1-70b-versatile"),
            api_key_env="GROQ_API_KEY",
            base_url="https://api.groq.com/openai/v1",
        ),
        ProviderConfig(
            name="openai_compatible",
            label="openai",
            model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            api_key_env="OPENAI_API_KEY",
            base_url="https://api.openai.com/v1",
        ),
    ]


@dataclass
class RewriteConfig:
    """Configuration for the rewrite engine.

    Attributes:
        providers: Ordered provider cascade; providers without a key are skipped
        max_input_chars: Maximum characters of each text block sent to a provider
        fallback_reference_chars: Reference truncation for the deterministic fallback
        fallback_original_chars: Original truncation for the deterministic fallback
    """

    providers: list[ProviderConfig] = field(default_factory=_default_providers)
    max_input_chars: int = 12000
    fallback_reference_chars: int = 2000
    fallback_original_chars: int = 5000


@dataclass
class PipelineConfig:
    """Configuration for lineage tags and work selection.

    Attributes:
        source_tag: Canonical source tag of ingested originals
        updated_tag: Source tag written on rewritten records
        updated_marker: Case-insensitive marker identifying updated records
        updated_param: Query parameter that disambiguates updated URLs
        oldest_count: Size of the oldest-originals work queue
    """

    source_tag: str = "BeyondChats"
    updated_tag: str = "BeyondChats-Updated"
    updated_marker: str = "updated"
    updated_param: str = "updated"
    oldest_count: int = 5


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to stderr
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        directory: Directory for log files
        filename: Name of the main log file
        llm_log_enabled: Whether to enable separate LLM interaction logging
        llm_log_detail: LLM log detail level ("response_only", "prompt_response")
        llm_log_redaction: Redaction mode for LLM logs ("none", "redact_content", "redact_urls_authors")
        llm_log_file: Name of the LLM log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    directory: str = "logs"
    filename: str = "run.jsonl"
    llm_log_enabled: bool = False
    llm_log_detail: str = "response_only"
    llm_log_redaction: str = "redact_urls_authors"
    llm_log_file: str = "llm.jsonl"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (optional)
        secret_key: Langfuse secret key (optional)
        base_url: Langfuse base URL (optional)
        environment: Langfuse environment label (optional)
        release: Langfuse release identifier (optional)
        timeout_seconds: Timeout for Langfuse ingestion requests
        redaction: Redaction mode for prompt/response payloads
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    base_url: str | None = None
    environment: str | None = None
    release: str | None = None
    timeout_seconds: int = 30
    redaction: str = "redact_urls_authors"
    max_text_chars: int = 20000


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    store: StoreConfig = field(default_factory=StoreConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    rewrite: RewriteConfig = field(default_factory=RewriteConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults and env overrides."""
    raw: dict[str, Any] = {}
    if path and os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    cfg = _merge_config(AppConfig(), raw)
    _apply_env(cfg)
    return cfg


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    rewrite_data = dict(data.get("rewrite", {}))
    providers = rewrite_data.pop("providers", None)
    rewrite = RewriteConfig(**rewrite_data)
    if providers is not None:
        rewrite.providers = [
            p if isinstance(p, ProviderConfig) else ProviderConfig(**p) for p in providers
        ]

    return AppConfig(
        store=StoreConfig(**data.get("store", {})),
        fetch=FetchConfig(**data.get("fetch", {})),
        extract=ExtractConfig(**data.get("extract", {})),
        search=SearchConfig(**data.get("search", {})),
        rewrite=rewrite,
        pipeline=PipelineConfig(**data.get("pipeline", {})),
        logging=LoggingConfig(**data.get("logging", {})),
        langfuse=LangfuseConfig(**data.get("langfuse", {})),
    )


def _apply_env(cfg: AppConfig) -> None:
    """Apply the environment overrides used by deployments."""
    if os.getenv("API_BASE_URL"):
        # The variable names the host root; the article routes live under /api
        cfg.store.base_url = os.environ["API_BASE_URL"].rstrip("/") + "/api"
    if os.getenv("SEARXNG_URL"):
        cfg.search.searx_url = os.environ["SEARXNG_URL"]
    if os.getenv("PER_PAGE"):
        cfg.store.per_page = int(os.environ["PER_PAGE"])
    if os.getenv("MIN_CONTENT"):
        cfg.extract.min_content_chars = int(os.environ["MIN_CONTENT"])


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    if cfg.api_key_env:
        return os.getenv(cfg.api_key_env)
    defaults = {
        "gemini": "GOOGLE_API_KEY",
        "openai": "OPENAI_API_KEY",
        "openai_compatible": "OPENAI_API_KEY",
        "openai-compatible": "OPENAI_API_KEY",
    }
    env_name = defaults.get(cfg.name.lower(), "OPENAI_API_KEY")
    return os.getenv(env_name)
