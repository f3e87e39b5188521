"""Pydantic Settings — loads configuration from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "extra": "ignore"}

    api_key: str = ""
    cron_secret: str = ""

    sites_file: str = "sites.yaml"

    store_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379"
    max_articles: int = 500

    fetch_timeout_seconds: float = 30.0
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    check_interval_seconds: int = 3600

    feed_title: str = "feedwatch"
    feed_description: str = "New articles from blogs without a feed"
    public_base_url: str = "http://localhost:8000"
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
