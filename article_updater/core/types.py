"""
Core data types for the article updater.

This module defines the fundamental data structures used throughout the pipeline:
- ArticleRecord: A record owned by the backing article store
- ExtractedContent: Title/text reduced from a fetched HTML page
- Reference: External article accepted as rewrite material
- SearchResponsePayload: Tagged union of raw search provider responses
- ProviderAnalysis / SearchDecision: Telemetry of one reference discovery
- ProcessOutcome: Result of running the pipeline for one original article
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union


@dataclass(frozen=True)
class ArticleRecord:
    """Represents an article as stored by the backing store.

    Records are immutable snapshots; changes are made only through the
    store API.

    Attributes:
        id: Store-assigned identifier
        title: Article headline
        url: Article URL, unique within the store
        source: Free-text lineage tag ("BeyondChats", "BeyondChats-Updated")
        author: Optional author name
        image_url: Optional hero image URL
        excerpt: Optional short summary
        content: Optional full body text
        published_at: Optional ISO 8601 publication timestamp
    """

    id: int
    title: str
    url: str
    source: str = ""
    author: str | None = None
    image_url: str | None = None
    excerpt: str | None = None
    content: str | None = None
    published_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ArticleRecord":
        return cls(
            id=int(data.get("id") or 0),
            title=str(data.get("title") or ""),
            url=str(data.get("url") or ""),
            source=str(data.get("source") or ""),
            author=data.get("author"),
            image_url=data.get("image_url"),
            excerpt=data.get("excerpt"),
            content=data.get("content"),
            published_at=data.get("published_at"),
        )

    def published_timestamp(self) -> float:
        """Return the publication time as epoch seconds, 0 when unknown."""
        if not self.published_at:
            return 0.0
        try:
            return datetime.fromisoformat(self.published_at.replace("Z", "+00:00")).timestamp()
        except ValueError:
            return 0.0

    def body(self) -> str:
        """Return the content, falling back to the excerpt."""
        return (self.content or self.excerpt or "").strip()


@dataclass(frozen=True)
class ExtractedContent:
    """Clean title/text pair reduced from an HTML page.

    Attributes:
        title: Page title, may be empty
        text: Extracted plain text
        method: Name of the extraction tier that produced the text
    """

    title: str
    text: str
    method: str = ""


@dataclass(frozen=True)
class Reference:
    """External article used to enrich a rewrite."""

    url: str
    title: str
    text: str


@dataclass(frozen=True)
class JsonPayload:
    """Search response that was decoded as JSON."""

    data: Any


@dataclass(frozen=True)
class TextPayload:
    """Search response requested in plain text format."""

    body: str


@dataclass(frozen=True)
class HtmlPayload:
    """Search response that is an HTML results page."""

    body: str


SearchResponsePayload = Union[JsonPayload, TextPayload, HtmlPayload]


@dataclass
class ProviderAnalysis:
    """Validation result for one search provider response.

    Attributes:
        query: The query that was sent
        mode: Payload tag that was validated ("json", "text", "html")
        issues: Problems noticed in the payload
        valid_urls: Deduplicated eligible URLs found in the payload
    """

    query: str
    mode: str
    issues: list[str] = field(default_factory=list)
    valid_urls: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "mode": self.mode,
            "issues": list(self.issues),
            "valid_urls": list(self.valid_urls),
        }


@dataclass
class RejectedUrl:
    url: str
    reason: str


@dataclass
class SearchDecision:
    """Telemetry describing how references were chosen for one topic.

    Attributes:
        query: Topic the references were searched for
        provider: Name of the provider whose results were used
        accepted_urls: URLs whose extracted text met the content threshold
        rejected_urls: URLs dropped by the classifier, with reasons
        last_provider_analysis: Last aggregator validation result, if any
    """

    query: str
    provider: str | None = None
    accepted_urls: list[str] = field(default_factory=list)
    rejected_urls: list[RejectedUrl] = field(default_factory=list)
    last_provider_analysis: ProviderAnalysis | None = None

    def to_dict(self) -> dict[str, Any]:
        analysis = self.last_provider_analysis
        return {
            "query": self.query,
            "provider": self.provider,
            "accepted": list(self.accepted_urls),
            "rejected": [{"url": r.url, "reason": r.reason} for r in self.rejected_urls],
            "searx_validation": analysis.to_dict() if analysis else None,
        }


@dataclass
class ReferenceSelection:
    references: list[Reference]
    decision: SearchDecision


@dataclass
class ProcessOutcome:
    """Result of processing a single original article.

    Attributes:
        article: The original article that was processed
        status: "created", "updated", "insufficient_refs" or "store_failure"
        record_id: Id of the created or updated record, if any
        references: URLs cited by the published record
        decision: Reference discovery telemetry
        llm: Label of the provider tier that produced the rewrite
        error: Error message on failure
        fallback: True when produced by the relaxed single-provider search
    """

    article: ArticleRecord
    status: str
    record_id: int | None = None
    references: list[str] = field(default_factory=list)
    decision: SearchDecision | None = None
    llm: str | None = None
    error: str | None = None
    fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.status == "created":
            payload["created_id"] = self.record_id
        elif self.status == "updated":
            payload["updated_id"] = self.record_id
        payload["article_id"] = self.article.id
        payload["title"] = self.article.title
        if self.status in {"created", "updated"}:
            payload["refs"] = list(self.references)
            payload["llm"] = self.llm
            if self.fallback:
                payload["fallback"] = True
        else:
            payload["reason"] = self.status
        if self.error:
            payload["error"] = self.error
        if self.decision is not None:
            payload["decision"] = self.decision.to_dict()
        return payload
