"""Change detection pipeline: selector translation, extraction, diffing."""

from __future__ import annotations

from .detector import EXTRACTION_EMPTY_ERROR, FleetDetector, SiteDetector
from .extractor import ContentExtractor, extract_articles, normalize_url
from .fingerprint import fingerprint
from .query import MatchedElement, QueryEngine, SoupQueryEngine
from .xpath import TranslatedSelector, looks_like_xpath, xpath_to_css

__all__ = [
    "EXTRACTION_EMPTY_ERROR",
    "ContentExtractor",
    "FleetDetector",
    "MatchedElement",
    "QueryEngine",
    "SiteDetector",
    "SoupQueryEngine",
    "TranslatedSelector",
    "extract_articles",
    "fingerprint",
    "looks_like_xpath",
    "normalize_url",
    "xpath_to_css",
]
