"""RSS 2.0, Atom 1.0 and JSON Feed 1.1 rendering of stored articles."""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime
from html import escape
from typing import Literal

from feedwatch.models import ArticleRecord

FeedFormat = Literal["rss", "atom", "json"]

FEED_MEDIA_TYPES: dict[str, str] = {
    "rss": "application/rss+xml; charset=utf-8",
    "atom": "application/atom+xml; charset=utf-8",
    "json": "application/feed+json; charset=utf-8",
}

GENERATOR = "feedwatch"
ATOM_NS = "http://www.w3.org/2005/Atom"


@dataclass(frozen=True)
class FeedOptions:
    title: str
    description: str
    link: str
    feed_url: str = ""
    language: str = "en"


def _updated(articles: list[ArticleRecord]) -> datetime:
    return articles[0].discovered_at if articles else datetime.now(timezone.utc)


def _content_html(article: ArticleRecord) -> str:
    return f'<p>Source: <a href="{escape(article.url)}">{escape(article.site_name)}</a></p>'


def render_rss(articles: list[ArticleRecord], options: FeedOptions) -> str:
    rss = ET.Element("rss", version="2.0")
    channel = ET.SubElement(rss, "channel")
    ET.SubElement(channel, "title").text = options.title
    ET.SubElement(channel, "link").text = options.link
    ET.SubElement(channel, "description").text = options.description
    ET.SubElement(channel, "language").text = options.language
    ET.SubElement(channel, "lastBuildDate").text = format_datetime(_updated(articles))
    ET.SubElement(channel, "generator").text = GENERATOR

    for article in articles:
        item = ET.SubElement(channel, "item")
        ET.SubElement(item, "title").text = article.title
        ET.SubElement(item, "link").text = article.url
        ET.SubElement(item, "guid", isPermaLink="true").text = article.url
        ET.SubElement(item, "pubDate").text = format_datetime(article.discovered_at)
        ET.SubElement(item, "category").text = article.site_name
        ET.SubElement(item, "description").text = _content_html(article)

    return ET.tostring(rss, encoding="utf-8", xml_declaration=True).decode("utf-8")


def render_atom(articles: list[ArticleRecord], options: FeedOptions) -> str:
    ET.register_namespace("", ATOM_NS)

    def _tag(name: str) -> str:
        return f"{{{ATOM_NS}}}{name}"

    feed = ET.Element(_tag("feed"))
    ET.SubElement(feed, _tag("id")).text = options.link
    ET.SubElement(feed, _tag("title")).text = options.title
    ET.SubElement(feed, _tag("subtitle")).text = options.description
    ET.SubElement(feed, _tag("link"), href=options.link, rel="alternate")
    if options.feed_url:
        ET.SubElement(feed, _tag("link"), href=options.feed_url, rel="self")
    ET.SubElement(feed, _tag("updated")).text = _updated(articles).isoformat()
    ET.SubElement(feed, _tag("generator")).text = GENERATOR

    for article in articles:
        entry = ET.SubElement(feed, _tag("entry"))
        ET.SubElement(entry, _tag("id")).text = article.url
        ET.SubElement(entry, _tag("title")).text = article.title
        ET.SubElement(entry, _tag("link"), href=article.url, rel="alternate")
        ET.SubElement(entry, _tag("published")).text = article.discovered_at.isoformat()
        ET.SubElement(entry, _tag("updated")).text = article.discovered_at.isoformat()
        author = ET.SubElement(entry, _tag("author"))
        ET.SubElement(author, _tag("name")).text = article.site_name
        ET.SubElement(entry, _tag("content"), type="html").text = _content_html(article)

    return ET.tostring(feed, encoding="utf-8", xml_declaration=True).decode("utf-8")


def render_json_feed(articles: list[ArticleRecord], options: FeedOptions) -> str:
    payload: dict = {
        "version": "https://jsonfeed.org/version/1.1",
        "title": options.title,
        "home_page_url": options.link,
        "description": options.description,
        "language": options.language,
        "items": [
            {
                "id": article.url,
                "url": article.url,
                "title": article.title,
                "content_html": _content_html(article),
                "summary": f"From {article.site_name}",
                "date_published": article.discovered_at.isoformat(),
                "authors": [{"name": article.site_name}],
            }
            for article in articles
        ],
    }
    if options.feed_url:
        payload["feed_url"] = options.feed_url
    return json.dumps(payload, ensure_ascii=False, indent=2)


def render_feed(fmt: FeedFormat, articles: list[ArticleRecord], options: FeedOptions) -> tuple[str, str]:
    """Render *articles* in *fmt*; returns ``(body, media_type)``."""
    renderers = {
        "rss": render_rss,
        "atom": render_atom,
        "json": render_json_feed,
    }
    return renderers[fmt](articles, options), FEED_MEDIA_TYPES[fmt]
