"""
Reference discovery for a rewrite topic.

Combines the search cascade, the URL classifier and the content
extractor: candidates are classified and deduplicated by host, the first
few accepted candidates are fetched with bounded concurrency, and the
first two whose text clears the content threshold become references.
Candidate order is preserved throughout, so earlier providers win.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from ..config import ExtractConfig, FetchConfig
from ..core.types import ExtractedContent, Reference, ReferenceSelection, SearchDecision
from ..core.urls import UrlClassifier
from ..search.orchestrator import SearchOrchestrator, SearchOutcome
from ..utils.logging import log_event

MAX_REFERENCES = 2


class Extractor(Protocol):
    async def extract(self, url: str) -> ExtractedContent | None: ...


class ReferenceSelector:
    """Finds up to two substantive external references for a topic.

    Attributes:
        orchestrator: Search provider cascade
        extractor: Page fetcher/extractor
        classifier: URL classifier applied to search candidates
        concurrency: Maximum extraction fetches in flight
        max_candidates: Accepted candidates fetched per topic
        min_content_chars: References must be strictly longer than this
    """

    def __init__(
        self,
        orchestrator: SearchOrchestrator,
        extractor: Extractor,
        classifier: UrlClassifier,
        fetch_cfg: FetchConfig | None = None,
        extract_cfg: ExtractConfig | None = None,
        logger: logging.Logger | None = None,
    ):
        fetch_cfg = fetch_cfg or FetchConfig()
        extract_cfg = extract_cfg or ExtractConfig()
        self.orchestrator = orchestrator
        self.extractor = extractor
        self.classifier = classifier
        self.concurrency = max(1, fetch_cfg.concurrency)
        self.max_candidates = fetch_cfg.max_candidates
        self.min_content_chars = extract_cfg.min_content_chars
        self.logger = logger

    async def find_references(self, topic: str) -> ReferenceSelection:
        """Search, classify and extract until up to two references qualify.

        Returns whatever was found (zero, one or two references); deciding
        whether that is enough is up to the caller.
        """
        outcome = await self.orchestrator.search(topic)
        filtered = self.classifier.filter_with_reasons(outcome.urls)
        valid = await self._collect(filtered.accepted[: self.max_candidates])
        decision = self._decision(outcome, valid)
        decision.rejected_urls = filtered.rejected
        return self._selection(valid, decision)

    async def find_references_relaxed(self, topic: str, limit: int = 10) -> ReferenceSelection:
        """Retry discovery through the primary provider only.

        Candidates skip classification (providers already drop the
        ingestion domain) and up to ``limit`` of them are fetched.
        """
        outcome = await self.orchestrator.search_primary(topic)
        valid = await self._collect(outcome.urls[:limit])
        return self._selection(valid, self._decision(outcome, valid))

    async def _collect(self, urls: list[str]) -> list[Reference]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def run_one(url: str) -> ExtractedContent | None:
            async with semaphore:
                try:
                    return await self.extractor.extract(url)
                except Exception as exc:  # noqa: BLE001
                    if self.logger is not None:
                        self.logger.warning("Extraction of %s failed: %s", url, exc)
                    return None

        # gather keeps results aligned with candidate order
        contents = await asyncio.gather(*(run_one(url) for url in urls))
        references: list[Reference] = []
        for url, content in zip(urls, contents):
            if content is None or len(content.text) <= self.min_content_chars:
                continue
            references.append(Reference(url=url, title=content.title, text=content.text))
        return references

    def _decision(self, outcome: SearchOutcome, valid: list[Reference]) -> SearchDecision:
        return SearchDecision(
            query=outcome.query,
            provider=outcome.provider,
            accepted_urls=[ref.url for ref in valid],
            last_provider_analysis=outcome.last_analysis,
        )

    def _selection(self, valid: list[Reference], decision: SearchDecision) -> ReferenceSelection:
        references = valid[:MAX_REFERENCES]
        log_event(
            self.logger,
            "References selected",
            event="references_selected",
            query=decision.query,
            provider=decision.provider,
            qualified=len(valid),
            selected=[ref.url for ref in references],
        )
        return ReferenceSelection(references=references, decision=decision)
