"""Store protocol consumed by the detection pipeline and the API."""

from __future__ import annotations

from typing import Iterable, Protocol

from feedwatch.models import ArticleRecord, SiteState


class SiteStore(Protocol):
    """Persistent site state plus the append-only article history.

    Write methods raise ``StoreError`` on failure; callers decide whether
    that is fatal.
    """

    async def get_site_state(self, site_id: str) -> SiteState | None: ...

    async def get_all_site_states(self) -> dict[str, SiteState]: ...

    async def get_all_article_urls(self) -> set[str]: ...

    async def filter_known_urls(self, urls: Iterable[str]) -> set[str]:
        """Return the subset of *urls* already present in the article history."""
        ...

    async def upsert_site_states(self, states: list[SiteState]) -> None: ...

    async def insert_articles(self, records: list[ArticleRecord]) -> None: ...

    async def get_articles(self, limit: int = 100, site_id: str | None = None) -> list[ArticleRecord]:
        """Return stored articles, newest first."""
        ...

    async def aclose(self) -> None: ...
