"""Service layer — builds API payloads from detection runs and the store."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from feedwatch.api.schemas import (
    ArticleOut,
    RecentArticle,
    RunStats,
    SiteDetail,
    SiteResultOut,
    SiteStatus,
    StatusResponse,
    TriggerResponse,
)
from feedwatch.config import Settings
from feedwatch.feeds import FeedFormat, FeedOptions, render_feed
from feedwatch.models import ArticleRecord, DetectionResult, FleetResult, SiteConfig, SiteState
from feedwatch.runner import DetectionService
from feedwatch.store import SiteStore

logger = logging.getLogger(__name__)

CONTENT_PREVIEW_CHARS = 500
RECENT_ARTICLES = 10


def _site_result(site: SiteConfig, result: DetectionResult, preview: bool = False) -> SiteResultOut:
    return SiteResultOut(
        site_id=site.id,
        site_name=site.name,
        site_url=site.url,
        changed=result.changed,
        error=result.error,
        article_count=len(result.articles),
        articles=[ArticleOut(title=a.title, url=a.url) for a in result.articles],
        new_articles=[ArticleOut(title=a.title, url=a.url) for a in result.new_articles],
        content_preview=result.current_content[:CONTENT_PREVIEW_CHARS] if preview else None,
    )


def build_trigger_response(service: DetectionService, fleet: FleetResult, single_site: bool = False) -> TriggerResponse:
    results = []
    for result in fleet.results:
        site = service.get_site(result.site_id)
        if site is None:
            continue
        results.append(_site_result(site, result, preview=single_site))

    duration = fleet.finished_at - fleet.started_at
    return TriggerResponse(
        timestamp=fleet.finished_at,
        duration_ms=int(duration.total_seconds() * 1000),
        stats=RunStats(**fleet.stats),
        results=results,
    )


def _site_status(site: SiteConfig, state: SiteState | None) -> SiteStatus:
    return SiteStatus(
        id=site.id,
        name=site.name,
        url=site.url,
        enabled=site.enabled,
        last_checked=state.last_checked if state else None,
        last_changed=state.last_changed if state else None,
        has_content=bool(state and state.content),
    )


def _recent(article: ArticleRecord) -> RecentArticle:
    return RecentArticle(
        site=article.site_name,
        title=article.title,
        url=article.url,
        discovered_at=article.discovered_at,
    )


async def build_status(service: DetectionService, store: SiteStore, settings: Settings) -> StatusResponse:
    states = await store.get_all_site_states()
    articles = await store.get_articles(limit=settings.max_articles)
    sites = [_site_status(site, states.get(site.id)) for site in service.sites]
    return StatusResponse(
        last_updated=datetime.now(timezone.utc),
        running=service.running,
        total_sites=len(sites),
        enabled_sites=sum(1 for s in sites if s.enabled),
        total_articles=len(articles),
        sites=sites,
        recent_articles=[_recent(a) for a in articles[:RECENT_ARTICLES]],
    )


async def build_site_detail(site: SiteConfig, store: SiteStore, limit: int = 100) -> SiteDetail:
    state = await store.get_site_state(site.id)
    articles = await store.get_articles(limit=limit, site_id=site.id)
    return SiteDetail(
        site=_site_status(site, state),
        description=site.description,
        known_article_urls=state.known_article_urls if state else [],
        articles=[_recent(a) for a in articles],
    )


async def build_feed(
    store: SiteStore,
    settings: Settings,
    fmt: FeedFormat,
    limit: int,
    site: SiteConfig | None = None,
    feed_url: str = "",
) -> tuple[str, str]:
    """Render the feed for all sites, or for *site* only. Returns ``(body, media_type)``."""
    articles = await store.get_articles(limit=limit, site_id=site.id if site else None)
    if site is not None:
        options = FeedOptions(
            title=f"{settings.feed_title} - {site.name}",
            description=site.description or f"New articles from {site.name}",
            link=site.url,
            feed_url=feed_url,
        )
    else:
        options = FeedOptions(
            title=settings.feed_title,
            description=settings.feed_description,
            link=settings.public_base_url,
            feed_url=feed_url,
        )
    logger.debug("rendering feed", extra={"format": fmt, "articles": len(articles), "site_id": site.id if site else None})
    return render_feed(fmt, articles, options)
