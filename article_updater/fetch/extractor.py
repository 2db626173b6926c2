"""
HTML content extraction with multiple fallback strategies.

This module provides a chain of extraction tiers, tried in order until
one yields enough text:
1. readability: Mozilla's readability algorithm (default primary)
2. containers: paragraphs of the first article/main/#content/body container
3. regex: textual paragraph split over raw markup, used when DOM parsing fails

HTML is sanitized before any tier runs: inline styles, <style> blocks and
stylesheet links are removed so malformed CSS cannot break the parsers.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from bs4 import BeautifulSoup
import httpx
from lxml.etree import ParserError
from readability import Document
from readability.readability import Unparseable

from ..config import ExtractConfig
from ..core.errors import ParseFailure
from ..core.types import ExtractedContent
from ..utils.logging import log_event
from .fetcher import categorize_error, fetch_url

Extractor = Callable[[str], ExtractedContent | None]

_CONTAINER_SELECTORS = ("article", "main", "#content", "body")

_UNSET_RULES = (
    re.compile(r"border-width\s*:\s*unset", re.IGNORECASE),
    re.compile(r"border\s*:\s*unset", re.IGNORECASE),
    re.compile(r"outline\s*:\s*unset", re.IGNORECASE),
)
_UNSET_VALUE = re.compile(r":\s*unset", re.IGNORECASE)
_STYLE_BLOCK = re.compile(r"<style[\s\S]*?</style>", re.IGNORECASE)
_SCRIPT_BLOCK = re.compile(r"<script[\s\S]*?</script>", re.IGNORECASE)
_STYLESHEET_LINK = re.compile(r"<link[^>]+rel=[\"']?stylesheet[\"']?[^>]*>", re.IGNORECASE)
_INLINE_STYLE = re.compile(r"\sstyle=\"[^\"]*\"", re.IGNORECASE)
_PARAGRAPH_SPLIT = re.compile(r"</?p[^>]*>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")


def sanitize_html(html: str | None) -> str:
    """Strip CSS that strict parsers are known to choke on."""
    text = str(html or "")
    for rule in _UNSET_RULES:
        text = rule.sub("", text)
    text = _UNSET_VALUE.sub(": initial", text)
    text = _STYLE_BLOCK.sub("", text)
    text = _STYLESHEET_LINK.sub("", text)
    text = _INLINE_STYLE.sub("", text)
    return text


def extract_content(
    html: str,
    order: list[str] | None = None,
    min_chars: int = 300,
) -> ExtractedContent | None:
    """Extract a title/text pair from HTML using a chain of extractors.

    Tries each tier in order until one produces at least ``min_chars``
    characters. A tier that cannot parse the document is skipped. The
    regex tier is a last resort for markup the DOM parser rejects, so it
    is skipped once the containers tier has parsed the document.

    Args:
        html: The sanitized HTML content to extract from
        order: Tier names to try ("readability", "containers", "regex")
        min_chars: Minimum text length for a tier result to be accepted

    Returns:
        ExtractedContent from the first successful tier, or None if all fail
    """
    dom_parsed = False
    for method in order or ["readability", "containers", "regex"]:
        extractor = _get_extractor(method)
        if not extractor or (method == "regex" and dom_parsed):
            continue
        try:
            content = extractor(html)
        except ParseFailure:
            continue
        if method == "containers":
            dom_parsed = True
        if content and len(content.text) >= min_chars:
            return content
    return None


def _get_extractor(name: str) -> Extractor | None:
    """Get the extractor function for a given tier name."""
    if name == "readability":
        return _extract_readability
    if name == "containers":
        return _extract_containers
    if name == "regex":
        return _extract_regex
    return None


def _extract_readability(html: str) -> ExtractedContent | None:
    """Extract the main article body using readability scoring.

    Readability is the same algorithm used in Firefox's Reader View.
    The simplified HTML it returns is reduced to text with BeautifulSoup.
    """
    try:
        doc = Document(html)
        content_html = doc.summary()
        title = doc.short_title() or ""
    except (Unparseable, ParserError, ValueError) as exc:
        raise ParseFailure(str(exc)) from exc
    soup = BeautifulSoup(content_html, "html.parser")
    text = soup.get_text(separator="\n")
    cleaned = "\n".join(line.strip() for line in text.splitlines() if line.strip())
    if not cleaned:
        return None
    return ExtractedContent(title=title.strip(), text=cleaned, method="readability")


def _extract_containers(html: str) -> ExtractedContent | None:
    """Join the paragraphs of the first matching content container."""
    try:
        soup = BeautifulSoup(html, "html.parser")
    except Exception as exc:  # noqa: BLE001
        raise ParseFailure(f"{type(exc).__name__}: {exc}") from exc

    target = None
    for selector in _CONTAINER_SELECTORS:
        target = soup.select_one(selector)
        if target is not None:
            break
    if target is None:
        raise ParseFailure("no container element")

    paragraphs = [p.get_text().strip() for p in target.find_all("p")]
    text = "\n".join(p for p in paragraphs if p)
    if not text:
        return None
    title = soup.title.get_text().strip() if soup.title else ""
    return ExtractedContent(title=title, text=text, method="containers")


def _extract_regex(html: str) -> ExtractedContent | None:
    """Split raw markup on paragraph tags and strip the remaining tags textually."""
    plain = _SCRIPT_BLOCK.sub("", html)
    plain = _STYLE_BLOCK.sub("", plain)
    chunks = [_TAG.sub("", chunk).strip() for chunk in _PARAGRAPH_SPLIT.split(plain)]
    text = "\n".join(chunk for chunk in chunks if chunk)
    if not text:
        return None
    return ExtractedContent(title="", text=text, method="regex")


class ContentExtractor:
    """Fetches reference pages and reduces them to clean text.

    Attributes:
        client: Shared async HTTP client
        cfg: Extraction settings (tier order and thresholds)
        logger: Optional logger for structured fetch events
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        cfg: ExtractConfig,
        logger: logging.Logger | None = None,
    ):
        self.client = client
        self.cfg = cfg
        self.logger = logger

    async def extract(self, url: str) -> ExtractedContent | None:
        result = await fetch_url(self.client, url)
        if not result.ok:
            log_event(
                self.logger,
                "Reference fetch failed",
                event="reference_fetch_failed",
                url=url,
                status_code=result.status_code,
                error=result.error,
                category=categorize_error(result.error, result.status_code),
            )
            return None

        content = extract_content(
            sanitize_html(result.text),
            order=self.cfg.order,
            min_chars=self.cfg.min_extract_chars,
        )
        log_event(
            self.logger,
            "Reference extracted" if content else "Reference extraction empty",
            event="reference_extracted" if content else "reference_extraction_empty",
            url=url,
            method=content.method if content else None,
            chars=len(content.text) if content else 0,
        )
        return content
