"""Command-line harness for checking selectors and running detection locally."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from feedwatch.config import get_settings
from feedwatch.detection import ContentExtractor, FleetDetector, SiteDetector, fingerprint, xpath_to_css
from feedwatch.errors import FeedwatchError, FetchError
from feedwatch.fetch import PageFetcher
from feedwatch.logging_config import setup_logging
from feedwatch.models import SiteConfig
from feedwatch.runner import DetectionService
from feedwatch.sites import find_site, load_site_configs
from feedwatch.store import build_store

logger = logging.getLogger(__name__)

PREVIEW_ARTICLES = 10
FALLBACK_SELECTORS = ("//h1", "//h2", "//article//h2", "//main//h2", "//title")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="feedwatch", description=__doc__)
    parser.add_argument("--sites-file", help="site configuration YAML (defaults to SITES_FILE)")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="fetch and extract without touching the store")
    check.add_argument("site_id", nargs="?", help="only check this site")

    run = sub.add_parser("run", help="run one detection pass and save the results")
    run.add_argument("--site", dest="site_id", help="only run this site")

    translate = sub.add_parser("translate", help="print the CSS selector for an XPath")
    translate.add_argument("xpath")

    return parser.parse_args(argv)


def _select_sites(sites: list[SiteConfig], site_id: str | None) -> list[SiteConfig]:
    if site_id is None:
        return [s for s in sites if s.enabled]
    site = find_site(sites, site_id)
    if site is None:
        available = ", ".join(s.id for s in sites)
        raise FeedwatchError(f"unknown site {site_id!r}; available: {available}")
    return [site]


async def check_site(fetcher: PageFetcher, extractor: ContentExtractor, site: SiteConfig) -> bool:
    """Print what the configured selectors extract from *site*. Returns success."""
    print("=" * 70)
    print(f"{site.name} ({site.id})")
    print(f"  url:   {site.url}")
    print(f"  title: {site.title_selector}")
    if site.link_selector:
        print(f"  link:  {site.link_selector}")

    try:
        markup = await fetcher.fetch(site.url)
    except FetchError as exc:
        print(f"  fetch failed: {exc}")
        return False
    print(f"  fetched {len(markup) / 1024:.1f}KB")

    extraction = extractor.extract(markup, site)
    if not extraction.content:
        print("  no content extracted; trying common selectors:")
        for selector in FALLBACK_SELECTORS:
            probe = extractor.extract(markup, site.model_copy(update={"title_selector": selector, "link_selector": None}))
            if probe.content:
                print(f"    {selector} -> {len(probe.articles)} matches")
        return False

    articles = extraction.articles
    print(f"  {len(articles)} articles:")
    for index, article in enumerate(articles[:PREVIEW_ARTICLES], start=1):
        title = article.title if len(article.title) <= 60 else article.title[:60] + "..."
        print(f"   {index:>2}. {title}")
        if article.url:
            print(f"       {article.url}")
    if len(articles) > PREVIEW_ARTICLES:
        print(f"   ... and {len(articles) - PREVIEW_ARTICLES} more")

    if site.link_selector:
        with_url = sum(1 for a in articles if a.url)
        print(f"  links: {with_url}/{len(articles)} articles have a url")
    print(f"  hash: {fingerprint(extraction.content)[:16]}...")
    return True


async def _check(sites: list[SiteConfig], timeout: float, user_agent: str) -> int:
    fetcher = PageFetcher(timeout=timeout, user_agent=user_agent)
    extractor = ContentExtractor()
    try:
        outcomes = [await check_site(fetcher, extractor, site) for site in sites]
    finally:
        await fetcher.aclose()
    print(f"\n{sum(outcomes)}/{len(outcomes)} sites extracted content")
    return 0 if all(outcomes) else 1


async def _run(sites: list[SiteConfig], site_id: str | None) -> int:
    settings = get_settings()
    store = await build_store(settings)
    fetcher = PageFetcher(timeout=settings.fetch_timeout_seconds, user_agent=settings.user_agent)
    service = DetectionService(FleetDetector(SiteDetector(fetcher, store), store), sites)
    try:
        if site_id is not None:
            fleet = await service.run_site(_select_sites(sites, site_id)[0])
        else:
            fleet = await service.run_all()
    finally:
        await fetcher.aclose()
        await store.aclose()

    summary = {
        "stats": fleet.stats,
        "errors": {r.site_id: r.error for r in fleet.results if r.error},
        "new_articles": [{"site": a.site_id, "title": a.title, "url": a.url} for a in fleet.new_articles],
    }
    print(json.dumps(summary, indent=2, ensure_ascii=False))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, stream=sys.stderr)

    if args.command == "translate":
        try:
            translated = xpath_to_css(args.xpath)
        except FeedwatchError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
        print(translated.selector)
        if translated.is_attr:
            print(f"attribute: {translated.attr_name}")
        return 0

    try:
        sites = load_site_configs(args.sites_file or settings.sites_file)
        if args.command == "check":
            return asyncio.run(_check(_select_sites(sites, args.site_id), settings.fetch_timeout_seconds, settings.user_agent))
        return asyncio.run(_run(sites, args.site_id))
    except FeedwatchError as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
