"""
Response-shape validation for search provider payloads.

The aggregator endpoint does not reliably honor the requested format: a
JSON request may come back as an HTML page and a text request as either.
Raw responses are first classified into a tagged payload (JSON, text or
HTML) and then validated by the validator registered for that tag, which
extracts candidate URLs and records any issues.
"""

from __future__ import annotations

import json
import re
from typing import Callable

from bs4 import BeautifulSoup

from ..core.types import (
    HtmlPayload,
    JsonPayload,
    ProviderAnalysis,
    SearchResponsePayload,
    TextPayload,
)
from ..core.urls import UrlClassifier

_URL_RE = re.compile(r"(https?://[^\s)\"']+)")


def classify_response(requested: str, body: str) -> tuple[SearchResponsePayload, list[str]]:
    """Wrap a raw response body in the payload type matching its actual shape.

    Args:
        requested: Format that was asked for ("json", "text" or "html")
        body: Raw response body

    Returns:
        The tagged payload and the shape issues noticed while classifying
    """
    issues: list[str] = []
    looks_html = "<html" in body.lower()

    if requested == "json" and not looks_html:
        try:
            return JsonPayload(json.loads(body)), issues
        except ValueError:
            issues.append("json_decode_failed")
            return TextPayload(body), issues

    if looks_html:
        if requested != "html":
            issues.append("text_format_returned_html")
        return HtmlPayload(body), issues

    return TextPayload(body), issues


def anchor_urls(html: str) -> list[str]:
    """Return href values of every anchor in an HTML document."""
    soup = BeautifulSoup(html, "html.parser")
    return [str(a.get("href") or "") for a in soup.find_all("a")]


def parse_urls_from_text(text: str) -> list[str]:
    return _URL_RE.findall(text)


def _validate_json(payload: JsonPayload, issues: list[str]) -> list[str]:
    data = payload.data
    items = data.get("results") if isinstance(data, dict) else None
    if not isinstance(items, list):
        items = []
    if not items:
        issues.append("json_results_empty")
    return [str(item["url"]) for item in items if isinstance(item, dict) and item.get("url")]


def _validate_text(payload: TextPayload, issues: list[str]) -> list[str]:
    return parse_urls_from_text(payload.body)


def _validate_html(payload: HtmlPayload, issues: list[str]) -> list[str]:
    try:
        return anchor_urls(payload.body)
    except Exception:  # noqa: BLE001
        issues.append("html_parse_failed")
        return parse_urls_from_text(payload.body)


_VALIDATORS: dict[type, Callable[..., list[str]]] = {
    JsonPayload: _validate_json,
    TextPayload: _validate_text,
    HtmlPayload: _validate_html,
}

_MODES: dict[type, str] = {
    JsonPayload: "json",
    TextPayload: "text",
    HtmlPayload: "html",
}


def validate_payload(
    query: str,
    payload: SearchResponsePayload,
    classifier: UrlClassifier,
    issues: list[str] | None = None,
) -> ProviderAnalysis:
    """Extract eligible, deduplicated URLs from a tagged payload.

    Args:
        query: The query that produced the payload
        payload: Tagged response payload
        classifier: URL classifier used to drop ineligible candidates
        issues: Issues already noticed while classifying the response

    Returns:
        ProviderAnalysis with the valid URLs in response order
    """
    found_issues = list(issues or [])
    validator = _VALIDATORS[type(payload)]
    candidates = validator(payload, found_issues)

    valid: list[str] = []
    for url in candidates:
        if url not in valid and classifier.is_eligible(url):
            valid.append(url)
    if len(valid) < 2:
        found_issues.append("insufficient_valid_article_urls")
    return ProviderAnalysis(
        query=query,
        mode=_MODES[type(payload)],
        issues=found_issues,
        valid_urls=valid,
    )


def validate_response(
    query: str,
    requested: str,
    body: str,
    classifier: UrlClassifier,
) -> ProviderAnalysis:
    """Classify a raw response body and validate it in one step."""
    payload, issues = classify_response(requested, body)
    return validate_payload(query, payload, classifier, issues)
