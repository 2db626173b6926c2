"""
Search provider cascade.

Providers are kept as an explicit ordered list and queried one after
another. Candidates accumulate in provider order; the cascade stops as
soon as the accumulated candidates contain at least two URLs the
classifier accepts. A provider that raises is logged and skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging

import httpx

from ..config import SearchConfig
from ..core.errors import FetchFailure
from ..core.types import ProviderAnalysis
from ..core.urls import UrlClassifier
from ..utils.logging import log_event
from .providers import (
    BingProvider,
    DuckDuckGoProvider,
    ProviderResult,
    SearchProvider,
    SearxProvider,
    SeedProvider,
)


@dataclass
class SearchOutcome:
    """Accumulated candidates from the provider cascade.

    Attributes:
        query: Query sent to the providers
        urls: Candidate URLs in provider priority order
        provider: Last provider consulted
        providers_tried: Names of every provider consulted, in order
        analyses: Response-shape validation results, in order
    """

    query: str
    urls: list[str] = field(default_factory=list)
    provider: str | None = None
    providers_tried: list[str] = field(default_factory=list)
    analyses: list[ProviderAnalysis] = field(default_factory=list)

    @property
    def last_analysis(self) -> ProviderAnalysis | None:
        return self.analyses[-1] if self.analyses else None


class SearchOrchestrator:
    """Runs search providers in priority order until enough candidates exist.

    Attributes:
        providers: Ordered provider cascade
        classifier: Classifier deciding which candidates count
        excluded_domain: Ingestion domain excluded from every query
        min_candidates: Accepted candidates needed to stop the cascade
    """

    def __init__(
        self,
        providers: list[SearchProvider],
        classifier: UrlClassifier,
        excluded_domain: str = "",
        logger: logging.Logger | None = None,
        min_candidates: int = 2,
    ):
        self.providers = providers
        self.classifier = classifier
        self.excluded_domain = excluded_domain
        self.logger = logger
        self.min_candidates = min_candidates

    @classmethod
    def from_config(
        cls,
        client: httpx.AsyncClient,
        cfg: SearchConfig,
        logger: logging.Logger | None = None,
    ) -> "SearchOrchestrator":
        classifier = UrlClassifier.from_config(cfg)
        providers: list[SearchProvider] = [
            SearxProvider(client, cfg, classifier, logger),
            DuckDuckGoProvider(client, cfg),
            BingProvider(client, cfg),
        ]
        if cfg.use_seeds:
            providers.append(SeedProvider(client, cfg))
        return cls(providers, classifier, cfg.excluded_domain, logger)

    def build_query(self, topic: str) -> str:
        if not self.excluded_domain:
            return topic
        return f"{topic} -site:{self.excluded_domain}"

    async def search(self, topic: str) -> SearchOutcome:
        """Query providers in order, accumulating candidates until enough are accepted."""
        outcome = SearchOutcome(query=self.build_query(topic))
        for provider in self.providers:
            result = await self._run(provider, outcome.query)
            outcome.provider = provider.name
            outcome.providers_tried.append(provider.name)
            if result is None:
                continue
            outcome.analyses.extend(result.analyses)
            for url in result.urls:
                if url not in outcome.urls:
                    outcome.urls.append(url)
            accepted = self.classifier.filter_with_reasons(outcome.urls).accepted
            if len(accepted) >= self.min_candidates:
                break
        return outcome

    async def search_primary(self, topic: str) -> SearchOutcome:
        """Query only the highest-priority provider."""
        outcome = SearchOutcome(query=self.build_query(topic))
        if not self.providers:
            return outcome
        provider = self.providers[0]
        outcome.provider = provider.name
        outcome.providers_tried.append(provider.name)
        result = await self._run(provider, outcome.query)
        if result is not None:
            outcome.analyses.extend(result.analyses)
            outcome.urls = list(result.urls)
        return outcome

    async def _run(self, provider: SearchProvider, query: str) -> ProviderResult | None:
        try:
            result = await provider.search(query)
        except (httpx.HTTPError, FetchFailure, ValueError) as exc:
            log_event(
                self.logger,
                "Search provider failed",
                event="search_provider_failed",
                provider=provider.name,
                error=f"{type(exc).__name__}: {exc}",
            )
            return None
        log_event(
            self.logger,
            "Search provider returned",
            event="search_provider_returned",
            provider=provider.name,
            count=len(result.urls),
        )
        return result
