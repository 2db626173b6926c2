"""Abstract interface for rewrite text-generation providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging

from ...config import LoggingConfig, ProviderConfig
from ...core.types import ArticleRecord
from ...utils.logging import log_event, scrub_text


class RewriteProvider(ABC):
    """Provider interface for rewriting an article from a prompt pair.

    Attributes:
        cfg: Provider settings
        api_key: Credential for the provider API
        log_cfg: Logging settings controlling LLM log detail and redaction
        llm_logger: Optional dedicated LLM interaction logger
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        log_cfg: LoggingConfig,
        llm_logger: logging.Logger | None = None,
        timeout: float = 60.0,
    ):
        if not api_key:
            raise ValueError(f"Missing API key for provider {cfg.label}")
        self.cfg = cfg
        self.api_key = api_key
        self.log_cfg = log_cfg
        self.llm_logger = llm_logger
        self.timeout = timeout

    @property
    def label(self) -> str:
        return self.cfg.label or self.cfg.name

    @abstractmethod
    async def rewrite(self, original: ArticleRecord, system: str, user: str) -> str:
        """Return the rewritten article text, or an empty string on failure."""
        raise NotImplementedError

    def _log_llm_response(
        self,
        original: ArticleRecord,
        status: str,
        content: str,
        prompt: str,
    ) -> None:
        if self.llm_logger is None:
            return
        detail = self.log_cfg.llm_log_detail
        redaction = self.log_cfg.llm_log_redaction
        payload = {
            "event": "llm_rewrite_response",
            "status": status,
            "provider": self.label,
            "model": self.cfg.model,
            "article_id": original.id,
            "article_title": original.title,
        }
        if detail == "prompt_response":
            payload["raw_prompt"] = scrub_text(prompt, redaction)
        payload["raw_response"] = scrub_text(content, redaction)
        log_event(self.llm_logger, "LLM response", **payload)
