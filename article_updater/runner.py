"""
Pipeline orchestration for the article updater.

This module coordinates the per-article workflow:
1. Discover references for the original's title
2. Rewrite the original with the references (provider cascade)
3. Publish the result idempotently: update the latest updated
   counterpart when one exists, otherwise create a new record

Articles are processed strictly one at a time so that no two writes
target the same base identity concurrently. The mode functions at the
bottom implement the CLI's work selection.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import httpx

from .analyzers.reference_selector import ReferenceSelector
from .analyzers.rewriter import RewriteEngine, with_citations
from .config import AppConfig, PipelineConfig
from .core.errors import ArticleUpdaterError, InsufficientReferences, StoreFailure
from .core.types import ArticleRecord, ProcessOutcome, ReferenceSelection
from .core.urls import base_identity
from .core.versioning import (
    Lineage,
    build_updated_payload,
    latest_updated_for_base,
    oldest_originals,
    redundant_updated,
)
from .fetch.extractor import ContentExtractor
from .fetch.fetcher import build_http_client
from .llm.providers import create_configured_providers
from .llm.tracing import record_span_error, set_span_output, setup_langfuse, start_span
from .search.orchestrator import SearchOrchestrator
from .store.client import ArticleStore
from .utils.logging import log_event, setup_llm_logger, setup_logging

MIN_REFERENCES = 2


class Pipeline:
    """Runs reference discovery, rewriting and publishing against a store.

    Attributes:
        store: Backing article store client
        selector: Reference selector (search + extraction)
        engine: Rewrite engine (provider cascade + fallback)
        lineage: Original/updated source-tag rules
        cfg: Pipeline settings
        logger: Optional logger for structured events
        clock: Time source for the URL disambiguation value
    """

    def __init__(
        self,
        store: ArticleStore,
        selector: ReferenceSelector,
        engine: RewriteEngine,
        cfg: PipelineConfig | None = None,
        logger: logging.Logger | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.cfg = cfg or PipelineConfig()
        self.store = store
        self.selector = selector
        self.engine = engine
        self.lineage = Lineage.from_config(self.cfg)
        self.logger = logger
        self.clock = clock

    @classmethod
    def from_config(
        cls,
        client: httpx.AsyncClient,
        cfg: AppConfig,
        logger: logging.Logger | None = None,
        llm_logger: logging.Logger | None = None,
    ) -> "Pipeline":
        orchestrator = SearchOrchestrator.from_config(client, cfg.search, logger)
        extractor = ContentExtractor(client, cfg.extract, logger)
        selector = ReferenceSelector(
            orchestrator,
            extractor,
            orchestrator.classifier,
            cfg.fetch,
            cfg.extract,
            logger,
        )
        providers = create_configured_providers(
            cfg.rewrite.providers,
            cfg.logging,
            llm_logger,
            timeout=cfg.fetch.timeout_seconds,
            logger=logger,
        )
        engine = RewriteEngine(providers, cfg.rewrite, logger)
        store = ArticleStore.from_config(client, cfg.store)
        return cls(store, selector, engine, cfg.pipeline, logger)

    async def process_article(self, original: ArticleRecord) -> ProcessOutcome:
        """Run the full workflow for one original.

        Too few references yields an ``insufficient_refs`` outcome; a
        store rejection while publishing yields ``store_failure``.
        """
        with start_span(
            "article_updater.article",
            kind="chain",
            input_value={"article_id": original.id, "title": original.title},
        ) as span:
            self._state(original, "searching")
            selection = await self.selector.find_references(original.title)
            if len(selection.references) < MIN_REFERENCES:
                self._state(original, "insufficient_references", found=len(selection.references))
                outcome = ProcessOutcome(
                    article=original,
                    status="insufficient_refs",
                    decision=selection.decision,
                )
            else:
                outcome = await self.publish(original, selection)
            set_span_output(span, outcome.to_dict())
            return outcome

    async def publish(
        self,
        original: ArticleRecord,
        selection: ReferenceSelection,
        fallback: bool = False,
    ) -> ProcessOutcome:
        """Rewrite ``original`` and write it back as its updated counterpart."""
        references = selection.references[:MIN_REFERENCES]
        self._state(original, "rewriting")
        result = await self.engine.rewrite(original, references)
        content = with_citations(result.text, references)
        payload = build_updated_payload(original, content, self.lineage, now=self.clock())

        self._state(original, "publishing")
        outcome = ProcessOutcome(
            article=original,
            status="failed",
            references=[ref.url for ref in references],
            decision=selection.decision,
            llm=result.provider,
            fallback=fallback,
        )
        try:
            # Fresh snapshot so repeated runs see records written earlier in this run
            records = await self.store.fetch_all()
            existing = latest_updated_for_base(records, base_identity(original.url), self.lineage)
            if existing is not None:
                record = await self.store.update(existing.id, payload)
                outcome.status = "updated"
                outcome.record_id = record.id or existing.id
            else:
                record = await self.store.create(payload)
                outcome.status = "created"
                outcome.record_id = record.id
        except StoreFailure as exc:
            outcome.status = "store_failure"
            outcome.error = str(exc)
            if self.logger is not None:
                self.logger.warning("Publishing article %s failed: %s", original.id, exc)
            return outcome

        self._state(original, "done", status=outcome.status, record_id=outcome.record_id)
        return outcome

    async def cleanup_duplicates(self, records: list[ArticleRecord] | None = None) -> list[int]:
        """Delete all but the newest updated record per base identity.

        Deletion is best-effort: a rejected delete is logged and not counted.
        """
        if records is None:
            records = await self.store.fetch_all()
        deleted: list[int] = []
        for record in redundant_updated(records, self.lineage):
            try:
                await self.store.delete(record.id)
            except StoreFailure as exc:
                if self.logger is not None:
                    self.logger.debug("Delete of %s failed: %s", record.id, exc)
                continue
            deleted.append(record.id)
        log_event(self.logger, "Duplicates cleaned", event="duplicates_cleaned", deleted=deleted)
        return deleted

    async def run_latest(self) -> dict[str, Any]:
        """Process the newest record; too few references is fatal.

        One relaxed re-search through the primary provider is attempted
        before giving up.
        """
        original = await self.store.latest()
        if original is None:
            raise ArticleUpdaterError("No articles found in the store")

        self._state(original, "searching")
        selection = await self.selector.find_references(original.title)
        fallback = False
        if len(selection.references) < MIN_REFERENCES:
            log_event(
                self.logger,
                "Retrying reference search with primary provider",
                event="relaxed_search",
                article_id=original.id,
                found=len(selection.references),
            )
            selection = await self.selector.find_references_relaxed(original.title)
            fallback = True
        if len(selection.references) < MIN_REFERENCES:
            raise InsufficientReferences(original.title, len(selection.references))
        outcome = await self.publish(original, selection, fallback=fallback)
        return outcome.to_dict()

    async def run_all(self, limit: int = 5) -> list[dict[str, Any]]:
        """Process originals in store order until ``limit`` are published."""
        records = await self.store.fetch_all()
        results: list[dict[str, Any]] = []
        published = 0
        for original in records:
            if published >= limit:
                break
            if not self.lineage.is_original(original):
                continue
            outcome = await self.process_article(original)
            results.append(outcome.to_dict())
            if outcome.status in {"created", "updated"}:
                published += 1
        return results

    async def run_update_five(self) -> dict[str, Any]:
        records = await self.store.fetch_all()
        deleted = await self.cleanup_duplicates(records)
        processed: list[dict[str, Any]] = []
        for original in oldest_originals(records, self.lineage, self.cfg.oldest_count):
            outcome = await self.process_article(original)
            processed.append(outcome.to_dict())
        return {"deleted_duplicates": deleted, "processed": processed}

    async def run_dedupe(self) -> dict[str, Any]:
        deleted = await self.cleanup_duplicates()
        return {"deleted": deleted}

    async def run_one(self, article_id: int | None = None, skip: int = 0) -> dict[str, Any]:
        """Process one article, by id or by offset into the oldest-originals queue."""
        if article_id is not None:
            original = await self.store.get(article_id)
        else:
            records = await self.store.fetch_all()
            queue = oldest_originals(records, self.lineage, self.cfg.oldest_count)
            if not queue:
                raise ArticleUpdaterError("No original articles found")
            skip = max(0, skip)
            original = queue[skip] if skip < len(queue) else queue[0]
        outcome = await self.process_article(original)
        return outcome.to_dict()

    def _state(self, article: ArticleRecord, state: str, **fields: Any) -> None:
        log_event(
            self.logger,
            f"Article {article.id}: {state}",
            event="article_state",
            state=state,
            article_id=article.id,
            **fields,
        )


MODES = ("latest", "all", "update-five", "dedupe", "one")


async def run_mode(
    pipeline: Pipeline,
    mode: str,
    limit: int = 5,
    article_id: int | None = None,
    skip: int = 0,
) -> Any:
    if mode == "latest":
        return await pipeline.run_latest()
    if mode == "all":
        return await pipeline.run_all(limit)
    if mode == "update-five":
        return await pipeline.run_update_five()
    if mode == "dedupe":
        return await pipeline.run_dedupe()
    if mode == "one":
        return await pipeline.run_one(article_id, skip)
    raise ArticleUpdaterError(f"Unknown mode: {mode}. Supported: {', '.join(MODES)}")


async def run_pipeline(
    mode: str,
    cfg: AppConfig,
    limit: int = 5,
    article_id: int | None = None,
    skip: int = 0,
) -> Any:
    """Run one CLI mode end to end and return its JSON-ready result.

    Raises:
        ArticleUpdaterError: On unrecoverable failure (unknown mode, empty
            store, fatal insufficient references, store unreachable)
    """
    if mode not in MODES:
        raise ArticleUpdaterError(f"Unknown mode: {mode}. Supported: {', '.join(MODES)}")

    logger = setup_logging(cfg.logging)
    llm_logger = setup_llm_logger(cfg.logging)
    setup_langfuse(cfg.langfuse)

    with start_span(
        "article_updater.run",
        kind="chain",
        input_value={"mode": mode, "limit": limit, "id": article_id, "skip": skip},
    ) as run_span:
        log_event(logger, "Pipeline start", event="pipeline_start", mode=mode)
        async with build_http_client(cfg.fetch) as client:
            pipeline = Pipeline.from_config(client, cfg, logger, llm_logger)
            try:
                result = await run_mode(pipeline, mode, limit, article_id, skip)
            except ArticleUpdaterError as exc:
                record_span_error(run_span, exc)
                raise
        log_event(logger, "Pipeline complete", event="pipeline_complete", mode=mode)
        set_span_output(run_span, result)
        return result
