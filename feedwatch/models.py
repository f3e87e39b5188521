"""Domain models shared by the detection pipeline, the stores and the API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SiteConfig(BaseModel):
    """A page to watch and the selectors that pull article titles out of it."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    name: str
    url: str
    title_selector: str = ""
    link_selector: str | None = None
    description: str | None = None
    enabled: bool = True


class SiteState(BaseModel):
    """Last-seen state for one site, overwritten on every successful run."""

    site_id: str
    content_hash: str
    content: str
    last_checked: datetime
    last_changed: datetime | None = None
    known_article_urls: list[str] = []


class ArticleRecord(BaseModel):
    """An article discovered by a fleet run. Never mutated once stored."""

    site_id: str
    site_name: str
    title: str
    url: str
    discovered_at: datetime


@dataclass(frozen=True)
class ArticleInfo:
    title: str
    url: str | None = None


@dataclass
class ExtractionResult:
    """Titles extracted from one page and the canonical string that gets hashed."""

    content: str = ""
    articles: list[ArticleInfo] = field(default_factory=list)


@dataclass
class DetectionResult:
    """Outcome of detecting one site in one run."""

    site_id: str
    changed: bool = False
    current_content: str = ""
    articles: list[ArticleInfo] = field(default_factory=list)
    new_articles: list[ArticleInfo] = field(default_factory=list)
    error: str | None = None
    previous_content: str | None = None
    previous_state: SiteState | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class FleetResult:
    """Aggregate of one fleet run."""

    results: list[DetectionResult]
    new_articles: list[ArticleRecord]
    started_at: datetime
    finished_at: datetime

    @property
    def stats(self) -> dict[str, int]:
        return {
            "total": len(self.results),
            "changed": sum(1 for r in self.results if r.changed),
            "errors": sum(1 for r in self.results if r.error),
            "new_articles": len(self.new_articles),
        }
