"""Tests for lineage rules, duplicate planning and the oldest-originals queue."""

from __future__ import annotations

from article_updater.core.types import ArticleRecord
from article_updater.core.versioning import (
    Lineage,
    build_updated_payload,
    latest_updated_for_base,
    oldest_originals,
    redundant_updated,
)


LINEAGE = Lineage()


def _record(id: int, url: str, source: str = "BeyondChats", published_at: str | None = None) -> ArticleRecord:
    return ArticleRecord(id=id, title=f"Title {id}", url=url, source=source, published_at=published_at)


def test_lineage_predicates():
    assert LINEAGE.is_original(_record(1, "https://s.com/a/b"))
    assert not LINEAGE.is_original(_record(2, "https://s.com/a/b", source="BeyondChats-Updated"))
    assert LINEAGE.is_updated(_record(3, "https://s.com/a/b", source="BeyondChats-Updated"))
    assert LINEAGE.is_updated(_record(4, "https://s.com/a/b", source="manually UPDATED copy"))
    assert not LINEAGE.is_updated(_record(5, "https://s.com/a/b", source="Other"))


def test_oldest_originals_sorts_undated_first_then_by_id():
    records = [
        _record(4, "https://s.com/blogs/d", published_at="2023-05-01T00:00:00Z"),
        _record(3, "https://s.com/blogs/c"),
        _record(2, "https://s.com/blogs/b", published_at="2021-01-01T00:00:00Z"),
        _record(1, "https://s.com/blogs/a", published_at="2021-01-01T00:00:00Z"),
        _record(9, "https://s.com/blogs/e", source="BeyondChats-Updated"),
        _record(6, "https://s.com/blogs/f", published_at="not a date"),
    ]

    queue = oldest_originals(records, LINEAGE, count=4)

    assert [r.id for r in queue] == [3, 6, 1, 2]


def test_latest_updated_for_base_picks_highest_id():
    records = [
        _record(1, "https://s.com/blogs/a"),
        _record(5, "https://s.com/blogs/a?updated=1", source="BeyondChats-Updated"),
        _record(8, "https://s.com/blogs/a?updated=2", source="BeyondChats-Updated"),
        _record(9, "https://s.com/blogs/other?updated=3", source="BeyondChats-Updated"),
    ]

    latest = latest_updated_for_base(records, "https://s.com/blogs/a", LINEAGE)

    assert latest is not None and latest.id == 8
    assert latest_updated_for_base(records, "https://s.com/blogs/missing", LINEAGE) is None


def test_redundant_updated_keeps_newest_per_base():
    records = [
        _record(1, "https://s.com/blogs/a"),
        _record(2, "https://s.com/blogs/a?updated=1", source="BeyondChats-Updated"),
        _record(3, "https://s.com/blogs/a?updated=2", source="BeyondChats-Updated"),
        _record(4, "https://s.com/blogs/a?updated=3", source="BeyondChats-Updated"),
        _record(5, "https://s.com/blogs/b?updated=1", source="BeyondChats-Updated"),
    ]

    redundant = redundant_updated(records, LINEAGE)

    assert sorted(r.id for r in redundant) == [2, 3]


def test_build_updated_payload_marks_lineage_and_disambiguates_url():
    lineage = Lineage(source_tag="Origin", updated_tag="Origin-Updated")
    original = ArticleRecord(
        id=1,
        title="X",
        url="https://site.com/blog/x",
        source="Origin",
        author="Ann",
        published_at="2024-01-01T00:00:00Z",
    )

    payload = build_updated_payload(original, "new content", lineage, now=1700000000.0)

    assert payload["url"] == "https://site.com/blog/x?updated=1700000000000"
    assert "updated" in payload["source"].lower()
    assert payload["content"] == "new content"
    assert payload["author"] == "Ann"
    assert payload["published_at"] == "2024-01-01T00:00:00Z"
