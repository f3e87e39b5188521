"""In-memory store backend."""

from __future__ import annotations

import logging
from typing import Iterable

from feedwatch.models import ArticleRecord, SiteState

logger = logging.getLogger(__name__)


class InMemoryStore:
    """Keeps everything in process memory. Used for local runs and tests.

    The article list is capped at *max_articles* (newest kept); the URL
    history used for deduplication is not capped.
    """

    def __init__(self, max_articles: int = 500) -> None:
        self._max_articles = max_articles
        self._states: dict[str, SiteState] = {}
        self._articles: list[ArticleRecord] = []
        self._urls: set[str] = set()

    async def get_site_state(self, site_id: str) -> SiteState | None:
        return self._states.get(site_id)

    async def get_all_site_states(self) -> dict[str, SiteState]:
        return dict(self._states)

    async def get_all_article_urls(self) -> set[str]:
        return set(self._urls)

    async def filter_known_urls(self, urls: Iterable[str]) -> set[str]:
        return {url for url in urls if url in self._urls}

    async def upsert_site_states(self, states: list[SiteState]) -> None:
        for state in states:
            self._states[state.site_id] = state.model_copy()

    async def insert_articles(self, records: list[ArticleRecord]) -> None:
        if not records:
            return
        self._articles = [*records, *self._articles][: self._max_articles]
        self._urls.update(r.url for r in records)
        logger.debug("articles stored", extra={"count": len(records)})

    async def get_articles(self, limit: int = 100, site_id: str | None = None) -> list[ArticleRecord]:
        articles = self._articles
        if site_id is not None:
            articles = [a for a in articles if a.site_id == site_id]
        return articles[:limit]

    async def aclose(self) -> None:
        return None
