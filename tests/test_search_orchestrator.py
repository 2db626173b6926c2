"""Tests for the search provider cascade and individual providers."""

from __future__ import annotations

import asyncio
import json

import httpx

from article_updater.config import SearchConfig
from article_updater.core.urls import UrlClassifier
from article_updater.search.orchestrator import SearchOrchestrator
from article_updater.search.providers import (
    BingProvider,
    DuckDuckGoProvider,
    ProviderResult,
    SearchProvider,
    SearxProvider,
    SeedProvider,
    parse_bing_links,
    parse_duckduckgo_links,
)


class _StubProvider(SearchProvider):
    def __init__(self, name: str, urls: list[str] | None = None, error: Exception | None = None):
        self.name = name
        self.urls = urls or []
        self.error = error
        self.calls: list[str] = []

    async def search(self, query: str) -> ProviderResult:
        self.calls.append(query)
        if self.error is not None:
            raise self.error
        return ProviderResult(provider=self.name, urls=list(self.urls))


def _classifier() -> UrlClassifier:
    return UrlClassifier(["youtube.com", "beyondchats.com"])


def test_cascade_accumulates_until_two_urls_accepted():
    first = _StubProvider("searx", ["https://alpha.example.com/blog/one"])
    second = _StubProvider(
        "duckduckgo",
        ["https://alpha.example.com/blog/two", "https://beta.example.org/news/three"],
    )
    third = _StubProvider("bing", ["https://gamma.example.net/posts/four"])
    orchestrator = SearchOrchestrator([first, second, third], _classifier(), "beyondchats.com")

    outcome = asyncio.run(orchestrator.search("Chatbots for support"))

    assert outcome.query == "Chatbots for support -site:beyondchats.com"
    assert outcome.providers_tried == ["searx", "duckduckgo"]
    assert outcome.provider == "duckduckgo"
    assert outcome.urls == [
        "https://alpha.example.com/blog/one",
        "https://alpha.example.com/blog/two",
        "https://beta.example.org/news/three",
    ]
    assert third.calls == []


def test_failing_provider_is_skipped():
    broken = _StubProvider("searx", error=httpx.ConnectError("down"))
    working = _StubProvider(
        "duckduckgo",
        ["https://alpha.example.com/blog/one", "https://beta.example.org/news/two"],
    )
    orchestrator = SearchOrchestrator([broken, working], _classifier())

    outcome = asyncio.run(orchestrator.search("topic"))

    assert outcome.query == "topic"
    assert outcome.providers_tried == ["searx", "duckduckgo"]
    assert len(outcome.urls) == 2


def test_search_primary_only_queries_first_provider():
    first = _StubProvider("searx", ["https://alpha.example.com/blog/one"])
    second = _StubProvider("duckduckgo", ["https://beta.example.org/news/two"])
    orchestrator = SearchOrchestrator([first, second], _classifier(), "beyondchats.com")

    outcome = asyncio.run(orchestrator.search_primary("topic"))

    assert outcome.urls == ["https://alpha.example.com/blog/one"]
    assert second.calls == []


def _searx_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_searx_returns_anchors_when_json_request_gets_html():
    html = """
    <html><body>
      <a href="https://alpha.example.com/blog/first">1</a>
      <a href="https://beta.example.org/news/second">2</a>
      <a href="https://beyondchats.com/blogs/self">self</a>
    </body></html>
    """
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, text=html)

    cfg = SearchConfig(searx_url="https://searx.test/search")

    async def run():
        async with _searx_client(handler) as client:
            provider = SearxProvider(client, cfg, UrlClassifier.from_config(cfg))
            return await provider.search("chatbots")

    result = asyncio.run(run())

    assert len(requests) == 1
    assert requests[0].url.params["format"] == "json"
    assert result.urls == [
        "https://alpha.example.com/blog/first",
        "https://beta.example.org/news/second",
    ]
    assert "text_format_returned_html" in result.analyses[0].issues


def test_searx_falls_through_to_text_attempt():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, text=json.dumps({"results": []}))
        body = request.content.decode()
        assert "format=text" in body
        return httpx.Response(
            200,
            text="1. https://alpha.example.com/blog/first\n2. https://beta.example.org/news/second\n",
        )

    cfg = SearchConfig(searx_url="https://searx.test/search")

    async def run():
        async with _searx_client(handler) as client:
            provider = SearxProvider(client, cfg, UrlClassifier.from_config(cfg))
            return await provider.search("chatbots")

    result = asyncio.run(run())

    assert [a.mode for a in result.analyses] == ["json", "text"]
    assert "json_results_empty" in result.analyses[0].issues
    assert result.urls == [
        "https://alpha.example.com/blog/first",
        "https://beta.example.org/news/second",
    ]


def test_searx_tolerates_failed_attempts():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.headers.get("Accept") == "text/html":
            return httpx.Response(
                200, text='<html><a href="https://alpha.example.com/blog/only">x</a></html>'
            )
        return httpx.Response(503, text="unavailable")

    cfg = SearchConfig(searx_url="https://searx.test/search")

    async def run():
        async with _searx_client(handler) as client:
            provider = SearxProvider(client, cfg, UrlClassifier.from_config(cfg))
            return await provider.search("chatbots")

    result = asyncio.run(run())

    assert result.urls == ["https://alpha.example.com/blog/only"]
    assert [a.mode for a in result.analyses] == ["html"]


def test_parse_duckduckgo_links_unwraps_redirects():
    html = """
    <a class="result__a" href="//duckduckgo.com/l/?uddg=https%3A%2F%2Falpha.example.com%2Fblog%2Fpost&rut=x">A</a>
    <a class="result__a" href="https://beta.example.org/news/item">B</a>
    <a class="other" href="https://gamma.example.net/ignored/link">C</a>
    """

    assert parse_duckduckgo_links(html) == [
        "https://alpha.example.com/blog/post",
        "https://beta.example.org/news/item",
    ]


def test_parse_bing_links_reads_heading_anchors():
    html = """
    <ol><li class="b_algo"><h2><a href="https://alpha.example.com/blog/post">A</a></h2></li>
    <li class="b_algo"><h2><a href="/relative">B</a></h2></li></ol>
    """

    assert parse_bing_links(html) == ["https://alpha.example.com/blog/post"]


def test_seed_provider_matches_topic_keywords():
    async def run():
        async with httpx.AsyncClient() as client:
            provider = SeedProvider(client, SearchConfig())
            return await provider.search("Live chat vs chatbot: which wins?")

    result = asyncio.run(run())

    assert result.urls[0].startswith("https://freshdesk.com/")
    assert len(result.urls) == 2


def test_http_error_page_falls_through_to_next_provider():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "duckduckgo.test":
            return httpx.Response(500, text="error")
        return httpx.Response(
            200,
            text='<li class="b_algo"><h2><a href="https://alpha.example.com/blog/a">A</a></h2></li>'
            '<li class="b_algo"><h2><a href="https://beta.example.org/news/b">B</a></h2></li>',
        )

    cfg = SearchConfig(
        duckduckgo_url="https://duckduckgo.test/html/",
        bing_url="https://bing.test/search",
    )

    async def run():
        async with _searx_client(handler) as client:
            providers = [DuckDuckGoProvider(client, cfg), BingProvider(client, cfg)]
            orchestrator = SearchOrchestrator(providers, UrlClassifier.from_config(cfg), cfg.excluded_domain)
            return await orchestrator.search("chatbots")

    outcome = asyncio.run(run())

    assert outcome.providers_tried == ["duckduckgo", "bing"]
    assert outcome.urls == ["https://alpha.example.com/blog/a", "https://beta.example.org/news/b"]
