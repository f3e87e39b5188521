"""Content extraction — titles and links from page markup."""

from __future__ import annotations

import logging
from urllib.parse import urljoin, urlparse

from feedwatch.errors import XPathTranslationError
from feedwatch.models import ArticleInfo, ExtractionResult, SiteConfig

from .query import MatchedElement, QueryEngine, SoupQueryEngine
from .xpath import TranslatedSelector, looks_like_xpath, xpath_to_css

logger = logging.getLogger(__name__)


def normalize_url(url: str, base_url: str) -> str:
    """Make *url* absolute against the page it was found on."""
    url = url.strip()
    if not url:
        return ""
    if url.startswith(("http://", "https://")):
        return url

    base = urlparse(base_url)
    if not base.scheme or not base.netloc:
        return url
    if url.startswith("//"):
        return f"{base.scheme}:{url}"
    if url.startswith("/"):
        return f"{base.scheme}://{base.netloc}{url}"
    return urljoin(base_url, url)


def resolve_selector(selector: str) -> TranslatedSelector | None:
    """Turn a configured selector into CSS, translating XPath when needed.

    Returns ``None`` (after logging) when the XPath cannot be translated.
    """
    if not looks_like_xpath(selector):
        return TranslatedSelector(selector=selector.strip())
    try:
        translated = xpath_to_css(selector)
    except XPathTranslationError:
        logger.warning("xpath translation failed", extra={"xpath": selector}, exc_info=True)
        return None
    logger.debug(
        "xpath translated",
        extra={"xpath": selector, "css": translated.selector, "attr": translated.attr_name},
    )
    return translated


class ContentExtractor:
    """Runs a site's title and link selectors over fetched markup."""

    def __init__(self, engine: QueryEngine | None = None) -> None:
        self._engine = engine or SoupQueryEngine()

    def extract(self, markup: str, site: SiteConfig) -> ExtractionResult:
        titles = self._titles(markup, site.title_selector) if site.title_selector else []
        urls = self._urls(markup, site.link_selector, site.url) if site.link_selector else []

        # Titles and links pair up by the index of the matched element. A blank
        # title drops its whole slot; a missing link leaves url unset.
        articles: list[ArticleInfo] = []
        for index, raw_title in enumerate(titles):
            title = raw_title.strip()
            if not title:
                continue
            url = urls[index] if index < len(urls) else None
            articles.append(ArticleInfo(title=title, url=url))

        if site.link_selector and len(urls) != len(titles):
            logger.debug(
                "title and link counts differ",
                extra={"site_id": site.id, "titles": len(titles), "links": len(urls)},
            )

        content = "\n".join(a.title for a in articles)
        return ExtractionResult(content=content, articles=articles)

    def _match(self, markup: str, selector: str) -> tuple[list[MatchedElement], TranslatedSelector | None]:
        resolved = resolve_selector(selector)
        if resolved is None or not resolved.selector:
            return [], resolved
        return self._engine.query(markup, resolved.selector), resolved

    def _titles(self, markup: str, selector: str) -> list[str]:
        elements, resolved = self._match(markup, selector)
        if resolved is not None and resolved.is_attr and resolved.attr_name:
            return [el.attributes.get(resolved.attr_name, "") for el in elements]
        return [el.text for el in elements]

    def _urls(self, markup: str, selector: str, base_url: str) -> list[str | None]:
        elements, resolved = self._match(markup, selector)
        attr_name = resolved.attr_name if resolved is not None and resolved.is_attr else None

        urls: list[str | None] = []
        for el in elements:
            raw = ""
            if attr_name:
                raw = el.attributes.get(attr_name, "").strip()
            if not raw:
                raw = el.attributes.get("href", "").strip()
            urls.append(normalize_url(raw, base_url) or None)
        return urls


def extract_articles(
    markup: str,
    site: SiteConfig,
    engine: QueryEngine | None = None,
) -> ExtractionResult:
    """Extract articles from *markup* with a one-off extractor."""
    return ContentExtractor(engine).extract(markup, site)
