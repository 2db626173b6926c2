"""
Lineage rules for original and updated article records.

The store keeps flat records only. An updated record is linked to its
original by sharing the same base identity (normalized URL). The helpers
here are pure and operate on immutable snapshots of the corpus:
1. Lineage predicates for original and updated records
2. Selection of the latest updated counterpart
3. Planning of redundant duplicates for cleanup
4. The oldest-originals work queue
5. The payload written for a rewritten article
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
import time
from typing import Any, Iterable

from ..config import PipelineConfig
from .types import ArticleRecord
from .urls import base_identity, with_query_param


@dataclass(frozen=True)
class Lineage:
    """Source-tag rules for telling originals from updated records.

    Attributes:
        source_tag: Canonical tag of ingested originals
        updated_tag: Tag written on rewritten records
        updated_marker: Case-insensitive substring marking updated records
        updated_param: Query parameter used to keep updated URLs unique
    """

    source_tag: str = "BeyondChats"
    updated_tag: str = "BeyondChats-Updated"
    updated_marker: str = "updated"
    updated_param: str = "updated"

    @classmethod
    def from_config(cls, cfg: PipelineConfig) -> "Lineage":
        return cls(
            source_tag=cfg.source_tag,
            updated_tag=cfg.updated_tag,
            updated_marker=cfg.updated_marker,
            updated_param=cfg.updated_param,
        )

    def is_original(self, record: ArticleRecord) -> bool:
        return (record.source or "").lower() == self.source_tag.lower()

    def is_updated(self, record: ArticleRecord) -> bool:
        return self.updated_marker.lower() in (record.source or "").lower()


def latest_updated_for_base(
    records: Iterable[ArticleRecord], base: str, lineage: Lineage
) -> ArticleRecord | None:
    """Return the highest-id updated record sharing ``base``, if any."""
    candidates = [
        r for r in records if lineage.is_updated(r) and base_identity(r.url) == base
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda r: r.id)


def redundant_updated(records: Iterable[ArticleRecord], lineage: Lineage) -> list[ArticleRecord]:
    """List updated records that are not the newest for their base identity.

    Records are grouped by base identity; in every group holding more than
    one updated record, all but the highest id are returned.
    """
    groups: dict[str, list[ArticleRecord]] = defaultdict(list)
    for record in records:
        if lineage.is_updated(record):
            groups[base_identity(record.url)].append(record)

    redundant: list[ArticleRecord] = []
    for group in groups.values():
        if len(group) < 2:
            continue
        ordered = sorted(group, key=lambda r: r.id, reverse=True)
        redundant.extend(ordered[1:])
    return redundant


def oldest_originals(
    records: Iterable[ArticleRecord], lineage: Lineage, count: int = 5
) -> list[ArticleRecord]:
    """Return the ``count`` oldest originals.

    Sorted by publication timestamp ascending (undated records count as 0),
    then by id ascending.
    """
    originals = [r for r in records if lineage.is_original(r)]
    ordered = sorted(originals, key=lambda r: (r.published_timestamp(), r.id))
    return ordered[:count]


def disambiguation_value(now: float | None = None) -> str:
    """Millisecond timestamp used as the ``updated`` query value."""
    return str(int((time.time() if now is None else now) * 1000))


def build_updated_payload(
    original: ArticleRecord,
    content: str,
    lineage: Lineage,
    now: float | None = None,
) -> dict[str, Any]:
    """Build the store payload for the rewritten counterpart of ``original``."""
    return {
        "title": original.title,
        "url": with_query_param(original.url, lineage.updated_param, disambiguation_value(now)),
        "author": original.author or "",
        "image_url": original.image_url or "",
        "excerpt": original.excerpt or "",
        "content": content,
        "published_at": original.published_at or None,
        "source": lineage.updated_tag,
    }
