"""
Article rewriting through a provider cascade.

Configured providers are tried in order; an empty response or provider
error moves on to the next one. When no provider produces text, a
deterministic merge of the original and its references is used, so a
rewrite is always available.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

from ..config import RewriteConfig
from ..core.errors import RewriteFailure
from ..core.types import ArticleRecord, Reference
from ..llm.prompts import build_rewrite_system_prompt, build_rewrite_user_prompt
from ..llm.providers.base import RewriteProvider
from ..utils.logging import log_event

FALLBACK_LABEL = "simple"


@dataclass
class RewriteResult:
    """Rewritten article text and the tier that produced it."""

    text: str
    provider: str


def simple_rewrite(
    original: ArticleRecord,
    references: list[Reference],
    reference_chars: int = 2000,
    original_chars: int = 5000,
) -> str:
    """Merge title, first reference, original body and second reference."""
    first = references[0].text if len(references) > 0 else ""
    second = references[1].text if len(references) > 1 else ""
    return "\n".join(
        [
            original.title,
            "\n",
            first[:reference_chars],
            "\n",
            original.body()[:original_chars],
            "\n",
            second[:reference_chars],
        ]
    )


def with_citations(text: str, references: list[Reference]) -> str:
    """Append the numbered references block to a rewrite."""
    lines = [f"{idx}. {ref.url}" for idx, ref in enumerate(references, start=1)]
    return text + "\n\nReferences:\n" + "\n".join(lines) + "\n"


class RewriteEngine:
    """Rewrites an original article using its references.

    Attributes:
        providers: Ordered provider cascade, possibly empty
        cfg: Rewrite settings (input and fallback truncation)
        logger: Optional logger for structured events
    """

    def __init__(
        self,
        providers: list[RewriteProvider],
        cfg: RewriteConfig | None = None,
        logger: logging.Logger | None = None,
    ):
        self.providers = providers
        self.cfg = cfg or RewriteConfig()
        self.logger = logger

    @property
    def primary_label(self) -> str:
        return self.providers[0].label if self.providers else FALLBACK_LABEL

    async def rewrite(self, original: ArticleRecord, references: list[Reference]) -> RewriteResult:
        system = build_rewrite_system_prompt()
        user = build_rewrite_user_prompt(original, references, self.cfg.max_input_chars)
        for provider in self.providers:
            text = await provider.rewrite(original, system, user)
            if text.strip():
                return RewriteResult(text=text, provider=provider.label)
            log_event(
                self.logger,
                "Rewrite provider returned nothing",
                event="rewrite_provider_empty",
                provider=provider.label,
                article_id=original.id,
            )

        text = simple_rewrite(
            original,
            references,
            reference_chars=self.cfg.fallback_reference_chars,
            original_chars=self.cfg.fallback_original_chars,
        )
        if not text.strip():
            raise RewriteFailure(f"No rewrite produced for article {original.id}")
        return RewriteResult(text=text, provider=FALLBACK_LABEL)
