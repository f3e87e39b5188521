"""Response Pydantic models."""

from datetime import datetime

from pydantic import BaseModel


class ArticleOut(BaseModel):
    title: str
    url: str | None = None


class SiteResultOut(BaseModel):
    site_id: str
    site_name: str
    site_url: str
    changed: bool
    error: str | None = None
    article_count: int = 0
    articles: list[ArticleOut] = []
    new_articles: list[ArticleOut] = []
    content_preview: str | None = None


class RunStats(BaseModel):
    total: int = 0
    changed: int = 0
    errors: int = 0
    new_articles: int = 0


class TriggerResponse(BaseModel):
    success: bool = True
    timestamp: datetime
    duration_ms: int = 0
    stats: RunStats = RunStats()
    results: list[SiteResultOut] = []


class SiteStatus(BaseModel):
    id: str
    name: str
    url: str
    enabled: bool
    last_checked: datetime | None = None
    last_changed: datetime | None = None
    has_content: bool = False


class RecentArticle(BaseModel):
    site: str
    title: str
    url: str
    discovered_at: datetime


class StatusResponse(BaseModel):
    last_updated: datetime
    running: bool = False
    total_sites: int = 0
    enabled_sites: int = 0
    total_articles: int = 0
    sites: list[SiteStatus] = []
    recent_articles: list[RecentArticle] = []


class SiteDetail(BaseModel):
    site: SiteStatus
    description: str | None = None
    known_article_urls: list[str] = []
    articles: list[RecentArticle] = []
