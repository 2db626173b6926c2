"""
HTTP fetching for search pages and reference articles.

All outbound requests share one ``httpx.AsyncClient`` carrying the
browser-like headers and the fixed request timeout. Requests are never
retried: a failed fetch is reported in the result and the caller moves
on to its next strategy.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from ..config import FetchConfig


@dataclass
class FetchResult:
    """Result of an HTTP fetch operation.

    Either text will be populated (success) or error will be populated (failure),
    but never both. status_code may be None for network-level failures.

    Attributes:
        url: The URL that was fetched
        status_code: HTTP status code, or None if request failed before getting response
        text: The response body text, or None on error
        error: Error message if fetch failed, None on success
    """
    url: str
    status_code: int | None
    text: str | None
    error: str | None

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None


def build_http_client(cfg: FetchConfig) -> httpx.AsyncClient:
    """Create the shared async client used for every external call."""
    headers = {
        "User-Agent": cfg.user_agent,
        "Accept-Language": cfg.accept_language,
    }
    return httpx.AsyncClient(
        timeout=httpx.Timeout(cfg.timeout_seconds),
        headers=headers,
        follow_redirects=True,
        trust_env=cfg.trust_env,
    )


async def fetch_url(client: httpx.AsyncClient, url: str) -> FetchResult:
    """Fetch a URL once and return its body.

    Non-2xx responses are reported as errors so that callers treat them
    like network failures.

    Args:
        client: Shared async HTTP client
        url: The URL to fetch

    Returns:
        FetchResult with text on success or error message on failure
    """
    try:
        resp = await client.get(url)
    except httpx.TimeoutException as exc:
        return FetchResult(url=url, status_code=None, text=None, error=f"TimeoutError: {exc}")
    except httpx.HTTPError as exc:
        return FetchResult(url=url, status_code=None, text=None, error=f"{type(exc).__name__}: {exc}")

    if resp.status_code >= 400:
        return FetchResult(
            url=url,
            status_code=resp.status_code,
            text=None,
            error=f"HTTP {resp.status_code}",
        )
    return FetchResult(url=url, status_code=resp.status_code, text=resp.text, error=None)


def categorize_error(error: str | None, status_code: int | None) -> str:
    """Categorize fetch errors for better logging.

    Args:
        error: Error message from fetch attempt
        status_code: HTTP status code if available

    Returns:
        Error category: "network_failed", "blocked", "timeout", "unknown"
    """
    if not error:
        return "unknown"
    error_lower = error.lower()
    if "timeout" in error_lower or "timed out" in error_lower:
        return "timeout"
    if status_code in {401, 403, 429} or "blocked" in error_lower:
        return "blocked"
    if "connect" in error_lower or "connection" in error_lower:
        return "network_failed"
    return "unknown"
