"""
Search providers used to discover reference article candidates.

Providers, in cascade priority order:
1. SearxProvider: meta-search aggregator, tried as JSON, text, JSON POST and HTML
2. DuckDuckGoProvider: HTML results page, links marked with ``result__a``
3. BingProvider: HTML results page, heading links
4. SeedProvider: curated URLs keyed by topic keywords

Every provider drops results hosted on the ingestion source domain.
Providers raise ``httpx.HTTPError`` or ``FetchFailure`` on failed requests;
they are never retried.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import logging
from typing import Any
from urllib.parse import parse_qs, urlsplit

from bs4 import BeautifulSoup
import httpx

from ..config import SearchConfig
from ..core.errors import FetchFailure
from ..core.types import ProviderAnalysis
from ..core.urls import UrlClassifier, host_matches, parse_host
from ..fetch.fetcher import fetch_url
from ..utils.logging import log_event
from .seeds import topic_seeds
from .validator import validate_response


@dataclass
class ProviderResult:
    """URLs returned by one provider, in result order.

    Attributes:
        provider: Provider name
        urls: Candidate URLs, deduplicated
        analyses: Shape validation results, for providers that validate responses
    """

    provider: str
    urls: list[str] = field(default_factory=list)
    analyses: list[ProviderAnalysis] = field(default_factory=list)


class SearchProvider(ABC):
    """Interface for one search surface in the cascade."""

    name: str = "provider"

    def __init__(self, client: httpx.AsyncClient, cfg: SearchConfig):
        self.client = client
        self.cfg = cfg

    @abstractmethod
    async def search(self, query: str) -> ProviderResult:
        raise NotImplementedError

    def _keep(self, urls: list[str]) -> list[str]:
        """Deduplicate http(s) URLs and drop the ingestion source domain."""
        kept: list[str] = []
        for url in urls:
            host = parse_host(url)
            if host is None or host_matches(host, self.cfg.excluded_domain):
                continue
            if url not in kept:
                kept.append(url)
        return kept

    async def _get_page(self, url: str, params: dict[str, Any]) -> str:
        """GET a results page through the shared fetcher, raising FetchFailure on error."""
        target = str(httpx.URL(url, params=params))
        result = await fetch_url(self.client, target)
        if not result.ok:
            raise FetchFailure(target, result.error or "empty response")
        return result.text or ""


@dataclass(frozen=True)
class SearxAttempt:
    """One request shape tried against the aggregator.

    Attributes:
        method: HTTP method
        requested: Response format asked for ("json", "text" or "html")
        form: Send the query as a form body instead of query parameters
    """

    method: str
    requested: str
    form: bool = False


SEARX_ATTEMPTS: tuple[SearxAttempt, ...] = (
    SearxAttempt("GET", "json"),
    SearxAttempt("POST", "text", form=True),
    SearxAttempt("POST", "json", form=True),
    SearxAttempt("GET", "html"),
)


class SearxProvider(SearchProvider):
    """Meta-search aggregator with response-shape validation.

    Each attempt in ``SEARX_ATTEMPTS`` is validated; the first one yielding
    at least two eligible URLs wins. The final HTML attempt returns whatever
    it found.
    """

    name = "searx"

    def __init__(
        self,
        client: httpx.AsyncClient,
        cfg: SearchConfig,
        classifier: UrlClassifier,
        logger: logging.Logger | None = None,
    ):
        super().__init__(client, cfg)
        self.classifier = classifier
        self.logger = logger

    async def search(self, query: str) -> ProviderResult:
        result = ProviderResult(provider=self.name)
        for index, attempt in enumerate(SEARX_ATTEMPTS):
            is_last = index == len(SEARX_ATTEMPTS) - 1
            try:
                body = await self._request(query, attempt)
            except httpx.HTTPError as exc:
                log_event(
                    self.logger,
                    "Search attempt failed",
                    event="search_attempt_failed",
                    provider=self.name,
                    mode=attempt.requested,
                    error=f"{type(exc).__name__}: {exc}",
                )
                continue

            analysis = validate_response(query, attempt.requested, body, self.classifier)
            result.analyses.append(analysis)
            if len(analysis.valid_urls) >= 2 or is_last:
                result.urls = self._keep(analysis.valid_urls)[: self.cfg.max_results]
                return result
        return result

    async def _request(self, query: str, attempt: SearxAttempt) -> str:
        fields = {"q": query}
        headers = {}
        if attempt.requested in {"json", "text"}:
            fields["format"] = attempt.requested
        if attempt.requested == "json":
            headers["Accept"] = "application/json"
        elif attempt.requested == "html":
            headers["Accept"] = "text/html"

        if attempt.form:
            resp = await self.client.request(
                attempt.method, self.cfg.searx_url, data=fields, headers=headers
            )
        else:
            resp = await self.client.request(
                attempt.method, self.cfg.searx_url, params=fields, headers=headers
            )
        resp.raise_for_status()
        return resp.text


class DuckDuckGoProvider(SearchProvider):
    """DuckDuckGo HTML endpoint; result links carry the ``result__a`` class."""

    name = "duckduckgo"

    async def search(self, query: str) -> ProviderResult:
        html = await self._get_page(self.cfg.duckduckgo_url, {"q": query})
        return ProviderResult(provider=self.name, urls=self._keep(parse_duckduckgo_links(html)))


def parse_duckduckgo_links(html: str) -> list[str]:
    soup = BeautifulSoup(html, "html.parser")
    urls: list[str] = []
    for anchor in soup.find_all("a"):
        classes = anchor.get("class") or []
        if "result__a" not in classes:
            continue
        href = _unwrap_duckduckgo_redirect(str(anchor.get("href") or ""))
        if href.startswith(("http://", "https://")):
            urls.append(href)
    return urls


def _unwrap_duckduckgo_redirect(href: str) -> str:
    """Resolve ``//duckduckgo.com/l/?uddg=<target>`` redirect links."""
    if "duckduckgo.com/l/" not in href:
        return href
    target = parse_qs(urlsplit(href).query).get("uddg")
    return target[0] if target else href


class BingProvider(SearchProvider):
    """Bing results page; organic results are heading links."""

    name = "bing"

    async def search(self, query: str) -> ProviderResult:
        html = await self._get_page(self.cfg.bing_url, {"q": query, "count": 20})
        return ProviderResult(provider=self.name, urls=self._keep(parse_bing_links(html)))


def parse_bing_links(html: str) -> list[str]:
    soup = BeautifulSoup(html, "html.parser")
    urls: list[str] = []
    for anchor in soup.select("li.b_algo h2 a, h2 a"):
        href = str(anchor.get("href") or "")
        if href.startswith(("http://", "https://")):
            urls.append(href)
    return urls


class SeedProvider(SearchProvider):
    """Curated reference URLs for recurring topics; never touches the network."""

    name = "seeds"

    async def search(self, query: str) -> ProviderResult:
        return ProviderResult(provider=self.name, urls=self._keep(topic_seeds(query)))
