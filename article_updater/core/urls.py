"""
URL classification and identity helpers.

This module decides which URLs are worth fetching as reference articles
and how stored records are grouped:
1. UrlClassifier: eligibility and per-host deduplication of candidates
2. base_identity: normalized URL joining originals to updated records
3. with_query_param: appends the disambiguation parameter to a URL
"""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlsplit, urlunsplit

from ..config import SearchConfig
from .types import RejectedUrl


@dataclass
class FilterResult:
    accepted: list[str] = field(default_factory=list)
    rejected: list[RejectedUrl] = field(default_factory=list)


def parse_host(url: str) -> str | None:
    """Return the lowercase hostname of an http(s) URL, or None if malformed."""
    if not isinstance(url, str) or not url.strip():
        return None
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
    except ValueError:
        return None
    if parts.scheme not in {"http", "https"} or not host:
        return None
    return host.lower()


def host_matches(host: str, domain: str) -> bool:
    """Check a hostname against a blocklist entry.

    Entries ending with a dot ("google.", "amazon.") match any label
    sequence starting with that name, so regional TLDs are covered.
    Other entries match the domain itself and its subdomains.
    """
    domain = domain.lower().strip()
    if not domain:
        return False
    if domain.endswith("."):
        return host.startswith(domain) or f".{domain}" in host
    return host == domain or host.endswith(f".{domain}")


class UrlClassifier:
    """Decides whether URLs are eligible, non-self-referential article candidates.

    Attributes:
        blocked_domains: Host entries that are never article candidates
        min_path_depth: Minimum number of non-empty path segments
    """

    def __init__(self, blocked_domains: list[str], min_path_depth: int = 2):
        self.blocked_domains = [d for d in blocked_domains if d]
        self.min_path_depth = min_path_depth

    @classmethod
    def from_config(cls, cfg: SearchConfig) -> "UrlClassifier":
        """Build a classifier that also blocks the ingestion and aggregator hosts."""
        blocked = list(cfg.blocked_domains)
        blocked.append(cfg.excluded_domain)
        aggregator = parse_host(cfg.searx_url)
        if aggregator:
            blocked.append(aggregator)
        return cls(blocked)

    def is_eligible(self, url: str) -> bool:
        host = parse_host(url)
        if host is None:
            return False
        if self.is_blocked_host(host):
            return False
        return path_depth(url) >= self.min_path_depth

    def is_blocked_host(self, host: str) -> bool:
        return any(host_matches(host, domain) for domain in self.blocked_domains)

    def filter_with_reasons(self, urls: list[str]) -> FilterResult:
        """Split candidates into accepted and rejected, one accepted URL per host.

        The first eligible URL seen for a hostname wins; later URLs on the
        same host are rejected as ``duplicate_domain``.
        """
        result = FilterResult()
        seen_hosts: set[str] = set()
        for url in urls:
            host = parse_host(url)
            if host is None:
                result.rejected.append(RejectedUrl(url=url, reason="invalid_url"))
                continue
            if not self.is_eligible(url):
                result.rejected.append(
                    RejectedUrl(url=url, reason="not_article_or_excluded_domain")
                )
                continue
            if host in seen_hosts:
                result.rejected.append(RejectedUrl(url=url, reason="duplicate_domain"))
                continue
            seen_hosts.add(host)
            result.accepted.append(url)
        return result


def path_depth(url: str) -> int:
    try:
        path = urlsplit(url).path.lower()
    except ValueError:
        return 0
    return len([segment for segment in path.split("/") if segment])


def base_identity(url: str) -> str:
    """Normalize a URL to scheme://host/path.

    Query string and fragment are dropped, which also removes the
    ``updated`` disambiguation parameter. Unparsable input is cut at the
    first ``?`` or ``#``.
    """
    url = (url or "").strip()
    try:
        parts = urlsplit(url)
        if parts.scheme and parts.netloc:
            return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path, "", ""))
    except ValueError:
        pass
    return url.split("?")[0].split("#")[0]


def with_query_param(url: str, name: str, value: str) -> str:
    """Return ``url`` with ``name=value`` set, replacing any existing value.

    Other query pairs are kept exactly as written.
    """
    parts = urlsplit(url)
    pairs = [p for p in parts.query.split("&") if p and p.split("=", 1)[0] != name]
    pairs.append(f"{name}={value}")
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "&".join(pairs), parts.fragment))
