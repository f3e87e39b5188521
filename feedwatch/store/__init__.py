"""Store backends with a settings-driven factory."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .base import SiteStore
from .memory import InMemoryStore
from .redis import RedisStore, create_redis_client

if TYPE_CHECKING:
    from feedwatch.config import Settings

__all__ = [
    "InMemoryStore",
    "RedisStore",
    "SiteStore",
    "build_store",
    "create_redis_client",
]

logger = logging.getLogger(__name__)


async def build_store(settings: Settings) -> SiteStore:
    """Build the store backend named by ``settings.store_backend``."""
    if settings.store_backend == "redis":
        client = await create_redis_client(settings.redis_url)
        return RedisStore(client, max_articles=settings.max_articles)

    logger.warning("using in-memory store; state is lost on restart")
    return InMemoryStore(max_articles=settings.max_articles)
