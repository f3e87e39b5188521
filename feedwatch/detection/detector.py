"""Change detection — one site at a time and across the whole fleet."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone

from feedwatch.errors import FetchError, StoreError
from feedwatch.fetch import Fetcher
from feedwatch.models import (
    ArticleInfo,
    ArticleRecord,
    DetectionResult,
    FleetResult,
    SiteConfig,
    SiteState,
)
from feedwatch.store import SiteStore

from .extractor import ContentExtractor
from .fingerprint import fingerprint

logger = logging.getLogger(__name__)

EXTRACTION_EMPTY_ERROR = "extraction produced no content; check the title selector"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SiteDetector:
    """Fetch, extract and compare one site against its stored state."""

    def __init__(
        self,
        fetcher: Fetcher,
        store: SiteStore,
        extractor: ContentExtractor | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._store = store
        self._extractor = extractor or ContentExtractor()

    async def detect(self, site: SiteConfig) -> DetectionResult:
        """Detect changes on *site*. Failures end up in ``result.error``."""
        result = DetectionResult(site_id=site.id)
        try:
            return await self._detect(site, result)
        except Exception as exc:
            logger.exception("detection failed", extra={"site_id": site.id})
            result.changed = False
            result.new_articles = []
            result.error = str(exc) or type(exc).__name__
            return result

    async def _detect(self, site: SiteConfig, result: DetectionResult) -> DetectionResult:
        started = time.monotonic()

        try:
            markup = await self._fetcher.fetch(site.url)
        except FetchError as exc:
            result.error = f"fetch failed: {exc}"
            logger.warning(
                "fetch failed",
                extra={"site_id": site.id, "url": site.url, "kind": exc.kind, "status": exc.status_code},
            )
            return result

        extraction = self._extractor.extract(markup, site)
        result.current_content = extraction.content
        result.articles = extraction.articles
        if not extraction.content:
            result.error = EXTRACTION_EMPTY_ERROR
            logger.warning("no content extracted", extra={"site_id": site.id, "selector": site.title_selector})
            return result

        try:
            previous = await self._store.get_site_state(site.id)
            known_urls = await self._store.filter_known_urls(a.url for a in extraction.articles if a.url)
        except StoreError as exc:
            result.error = f"store read failed: {exc}"
            logger.warning("store read failed", extra={"site_id": site.id}, exc_info=True)
            return result

        if previous is None:
            result.changed = True
        else:
            result.previous_state = previous
            result.previous_content = previous.content
            if fingerprint(extraction.content) != previous.content_hash:
                result.changed = True

        result.new_articles = _new_articles(extraction.articles, known_urls)
        if result.new_articles:
            result.changed = True

        logger.info(
            "site detected",
            extra={
                "site_id": site.id,
                "changed": result.changed,
                "first_run": previous is None,
                "articles": len(result.articles),
                "new_articles": len(result.new_articles),
                "duration_ms": int((time.monotonic() - started) * 1000),
            },
        )
        return result


def _new_articles(articles: list[ArticleInfo], known_urls: set[str]) -> list[ArticleInfo]:
    """Articles whose URL is not in the history, first occurrence only."""
    seen = set(known_urls)
    new: list[ArticleInfo] = []
    for article in articles:
        if not article.url or article.url in seen:
            continue
        seen.add(article.url)
        new.append(article)
    return new


class FleetDetector:
    """Runs ``SiteDetector`` over every enabled site and persists the outcome."""

    def __init__(self, detector: SiteDetector, store: SiteStore) -> None:
        self._detector = detector
        self._store = store

    async def run(self, sites: list[SiteConfig]) -> FleetResult:
        """Detect all enabled *sites* concurrently, then write states and articles in bulk."""
        enabled = [site for site in sites if site.enabled]
        started_at = _utcnow()
        logger.info("fleet run started", extra={"sites": len(sites), "enabled": len(enabled)})

        settled = await asyncio.gather(
            *(self._detector.detect(site) for site in enabled),
            return_exceptions=True,
        )

        results: list[DetectionResult] = []
        for site, outcome in zip(enabled, settled):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error("detection crashed", extra={"site_id": site.id}, exc_info=outcome)
                outcome = DetectionResult(site_id=site.id, error=str(outcome) or type(outcome).__name__)
            results.append(outcome)

        # One timestamp for the whole batch
        now = _utcnow()
        states: list[SiteState] = []
        records: list[ArticleRecord] = []
        batch_urls: set[str] = set()
        for site, result in zip(enabled, results):
            if not result.ok:
                continue
            states.append(_build_state(site, result, now))
            for article in result.new_articles:
                if article.url in batch_urls:
                    continue
                batch_urls.add(article.url)
                records.append(
                    ArticleRecord(
                        site_id=site.id,
                        site_name=site.name,
                        title=article.title,
                        url=article.url,
                        discovered_at=now,
                    )
                )

        await self._persist(states, records)

        fleet = FleetResult(results=results, new_articles=records, started_at=started_at, finished_at=_utcnow())
        logger.info("fleet run completed", extra=fleet.stats)
        return fleet

    async def run_site(self, site: SiteConfig) -> FleetResult:
        """Detect a single site (even a disabled one) and persist its outcome."""
        return await self.run([site.model_copy(update={"enabled": True})])

    async def _persist(self, states: list[SiteState], records: list[ArticleRecord]) -> None:
        # A failed save is logged only; the next run will detect the same change again.
        try:
            await self._store.upsert_site_states(states)
        except StoreError:
            logger.warning("saving site states failed", extra={"count": len(states)}, exc_info=True)

        try:
            await self._store.insert_articles(records)
        except StoreError:
            logger.warning("saving new articles failed", extra={"count": len(records)}, exc_info=True)
        else:
            if records:
                logger.info("new articles saved", extra={"count": len(records)})


def _build_state(site: SiteConfig, result: DetectionResult, now: datetime) -> SiteState:
    previous_changed = result.previous_state.last_changed if result.previous_state else None
    return SiteState(
        site_id=site.id,
        content_hash=fingerprint(result.current_content),
        content=result.current_content,
        last_checked=now,
        last_changed=now if result.changed else previous_changed,
        known_article_urls=[a.url for a in result.articles if a.url],
    )
