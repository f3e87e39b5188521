"""Shared fixtures: stores, site configs and a canned page fetcher."""

from __future__ import annotations

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis

from feedwatch.errors import FetchError
from feedwatch.models import SiteConfig
from feedwatch.store import InMemoryStore, RedisStore


class FakeFetcher:
    """Serves canned markup per URL; an exception value is raised instead."""

    def __init__(self, pages: dict[str, str | Exception] | None = None) -> None:
        self.pages: dict[str, str | Exception] = dict(pages or {})
        self.calls: list[str] = []

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        page = self.pages.get(url)
        if page is None:
            raise FetchError(url, "http_status", f"HTTP 404 Not Found: {url}", status_code=404)
        if isinstance(page, Exception):
            raise page
        return page


def make_site(site_id: str = "blog", **overrides) -> SiteConfig:
    defaults = dict(
        id=site_id,
        name=f"{site_id.title()} Blog",
        url=f"https://{site_id}.example.com/blog/",
        title_selector="h2",
        link_selector="//a/@href",
    )
    defaults.update(overrides)
    return SiteConfig(**defaults)


def blog_page(*posts: tuple[str, str]) -> str:
    """Markup with one ``<a href><h2>title</h2></a>`` per (title, href) pair."""
    items = "\n".join(f'<li><a href="{href}"><h2>{title}</h2></a></li>' for title, href in posts)
    return f"<html><body><nav><span>menu</span></nav><ul>{items}</ul></body></html>"


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore(max_articles=500)


@pytest_asyncio.fixture
async def redis_store():
    """RedisStore backed by an in-memory FakeRedis instance."""
    client = FakeRedis(decode_responses=True)
    store = RedisStore(client, max_articles=500)
    yield store
    await client.aclose()


@pytest_asyncio.fixture(params=["memory", "redis"])
async def store(request):
    """Each store backend in turn."""
    if request.param == "memory":
        yield InMemoryStore(max_articles=3)
        return
    client = FakeRedis(decode_responses=True)
    yield RedisStore(client, max_articles=3)
    await client.aclose()
