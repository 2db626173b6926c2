"""
Client for the backing article store.

The store is a plain REST resource under ``/articles``; it has no notion
of versions. Every non-2xx response and every transport error surfaces as
``StoreFailure`` so the pipeline can decide per call site whether the
failure is fatal, recorded or swallowed.
"""

from __future__ import annotations

from typing import Any

import httpx

from ..config import StoreConfig
from ..core.errors import StoreFailure
from ..core.types import ArticleRecord


class ArticleStore:
    """Thin async wrapper over the store's article endpoints.

    Attributes:
        client: Shared HTTP client
        base_url: Store API root, ``/articles`` is appended
        per_page: Page size for corpus listing
        max_pages: Pagination hard stop
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        per_page: int = 50,
        max_pages: int = 10,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.per_page = per_page
        self.max_pages = max_pages

    @classmethod
    def from_config(cls, client: httpx.AsyncClient, cfg: StoreConfig) -> "ArticleStore":
        return cls(client, cfg.base_url, cfg.per_page, cfg.max_pages)

    @property
    def articles_url(self) -> str:
        return f"{self.base_url}/articles"

    async def list_page(self, page: int = 1, per_page: int | None = None) -> tuple[list[ArticleRecord], str | None]:
        """Fetch one page of records and the next-page cursor."""
        params = {"page": page, "per_page": per_page or self.per_page}
        data = await self._request("GET", self.articles_url, params=params)
        if not isinstance(data, dict):
            raise StoreFailure(None, "Unexpected listing response")
        items = data.get("data") or []
        records = [ArticleRecord.from_dict(item) for item in items if isinstance(item, dict)]
        return records, data.get("next_page_url")

    async def fetch_all(self) -> list[ArticleRecord]:
        """Fetch the whole corpus, following the pagination cursor."""
        records: list[ArticleRecord] = []
        page = 1
        while page <= self.max_pages:
            batch, next_url = await self.list_page(page)
            records.extend(batch)
            if not next_url:
                break
            page += 1
        return records

    async def latest(self) -> ArticleRecord | None:
        data = await self._request("GET", self.articles_url, params={"per_page": 1})
        items = data.get("data") if isinstance(data, dict) else None
        if not items:
            return None
        return ArticleRecord.from_dict(items[0])

    async def get(self, article_id: int) -> ArticleRecord:
        data = await self._request("GET", f"{self.articles_url}/{article_id}")
        return ArticleRecord.from_dict(_unwrap(data))

    async def create(self, payload: dict[str, Any]) -> ArticleRecord:
        data = await self._request("POST", self.articles_url, json=payload)
        return ArticleRecord.from_dict(_unwrap(data))

    async def update(self, article_id: int, payload: dict[str, Any]) -> ArticleRecord:
        data = await self._request("PATCH", f"{self.articles_url}/{article_id}", json=payload)
        return ArticleRecord.from_dict(_unwrap(data))

    async def delete(self, article_id: int) -> None:
        await self._request("DELETE", f"{self.articles_url}/{article_id}")

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self.client.request(
                method, url, headers={"Accept": "application/json"}, **kwargs
            )
        except httpx.HTTPError as exc:
            raise StoreFailure(None, f"{type(exc).__name__}: {exc}") from exc

        if response.status_code >= 300:
            raise StoreFailure(response.status_code, response.text[:500])
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise StoreFailure(response.status_code, "Response is not JSON") from exc


def _unwrap(data: Any) -> dict[str, Any]:
    # Some store deployments wrap single resources in {"data": {...}}
    if isinstance(data, dict) and isinstance(data.get("data"), dict):
        return data["data"]
    if not isinstance(data, dict):
        raise StoreFailure(None, "Unexpected record response")
    return data
