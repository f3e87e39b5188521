"""Redis store backend — site states, article history and URL index."""

from __future__ import annotations

import logging
from typing import Iterable

import redis.asyncio as redis
from redis.backoff import ExponentialBackoff
from redis.retry import Retry

from feedwatch.errors import StoreError
from feedwatch.models import ArticleRecord, SiteState

logger = logging.getLogger(__name__)

KEY_PREFIX = "feedwatch:"
SITE_STATES_KEY = f"{KEY_PREFIX}site_states"
ARTICLES_KEY = f"{KEY_PREFIX}articles"
ARTICLE_URLS_KEY = f"{KEY_PREFIX}article_urls"


class RedisStore:
    """Async Redis implementation of the site store.

    Layout:

    - ``site_states``: hash of site id to ``SiteState`` JSON
    - ``articles``: list of ``ArticleRecord`` JSON, newest first, trimmed
      to *max_articles*
    - ``article_urls``: set of every article URL ever stored (never trimmed)
    """

    def __init__(self, client: redis.Redis, max_articles: int = 500) -> None:
        self._client = client
        self._max_articles = max_articles

    async def get_site_state(self, site_id: str) -> SiteState | None:
        try:
            raw = await self._client.hget(SITE_STATES_KEY, site_id)
        except redis.RedisError as exc:
            raise StoreError(f"could not read state for {site_id}") from exc
        if raw is None:
            logger.debug("no stored state", extra={"site_id": site_id})
            return None
        return SiteState.model_validate_json(raw)

    async def get_all_site_states(self) -> dict[str, SiteState]:
        try:
            raw = await self._client.hgetall(SITE_STATES_KEY)
        except redis.RedisError as exc:
            raise StoreError("could not read site states") from exc
        return {site_id: SiteState.model_validate_json(payload) for site_id, payload in raw.items()}

    async def get_all_article_urls(self) -> set[str]:
        try:
            return set(await self._client.smembers(ARTICLE_URLS_KEY))
        except redis.RedisError as exc:
            raise StoreError("could not read article urls") from exc

    async def filter_known_urls(self, urls: Iterable[str]) -> set[str]:
        candidates = list(dict.fromkeys(urls))
        if not candidates:
            return set()
        try:
            flags = await self._client.smismember(ARTICLE_URLS_KEY, candidates)
        except redis.RedisError as exc:
            raise StoreError("could not check article urls") from exc
        return {url for url, known in zip(candidates, flags) if known}

    async def upsert_site_states(self, states: list[SiteState]) -> None:
        if not states:
            return
        mapping = {state.site_id: state.model_dump_json() for state in states}
        try:
            await self._client.hset(SITE_STATES_KEY, mapping=mapping)
        except redis.RedisError as exc:
            raise StoreError(f"could not save {len(states)} site states") from exc
        logger.debug("site states saved", extra={"count": len(states)})

    async def insert_articles(self, records: list[ArticleRecord]) -> None:
        if not records:
            return
        # LPUSH prepends one value at a time; push in reverse so the batch
        # keeps its own order at the head of the list.
        payloads = [r.model_dump_json() for r in reversed(records)]
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.lpush(ARTICLES_KEY, *payloads)
                pipe.ltrim(ARTICLES_KEY, 0, self._max_articles - 1)
                pipe.sadd(ARTICLE_URLS_KEY, *{r.url for r in records})
                await pipe.execute()
        except redis.RedisError as exc:
            raise StoreError(f"could not insert {len(records)} articles") from exc
        logger.debug("articles stored", extra={"count": len(records)})

    async def get_articles(self, limit: int = 100, site_id: str | None = None) -> list[ArticleRecord]:
        end = -1 if site_id is not None else limit - 1
        try:
            raw = await self._client.lrange(ARTICLES_KEY, 0, end)
        except redis.RedisError as exc:
            raise StoreError("could not read articles") from exc

        articles = [ArticleRecord.model_validate_json(item) for item in raw]
        if site_id is not None:
            articles = [a for a in articles if a.site_id == site_id]
        return articles[:limit]

    async def aclose(self) -> None:
        await self._client.aclose()


async def create_redis_client(redis_url: str) -> redis.Redis:
    # Strip credentials for logging (everything before @ if present)
    safe_url = redis_url.split("@")[-1] if "@" in redis_url else redis_url
    logger.info("connecting to redis", extra={"redis_url": safe_url})
    retry = Retry(ExponentialBackoff(), retries=3)
    return redis.from_url(
        redis_url,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        health_check_interval=30,
        retry=retry,
        retry_on_error=[redis.ConnectionError, redis.TimeoutError],
    )
