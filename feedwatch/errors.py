"""Exception types raised across the detection pipeline."""

from __future__ import annotations

from typing import Literal

FetchErrorKind = Literal["timeout", "http_status", "network"]


class FeedwatchError(Exception):
    """Base class for all service errors."""


class FetchError(FeedwatchError):
    """A page could not be fetched."""

    def __init__(
        self,
        url: str,
        kind: FetchErrorKind,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.kind = kind
        self.status_code = status_code


class StoreError(FeedwatchError):
    """A store backend failed to read or write."""


class SiteConfigError(FeedwatchError):
    """The site configuration file is missing or invalid."""


class XPathTranslationError(FeedwatchError):
    """An XPath expression uses syntax outside the supported subset."""


class RunInProgressError(FeedwatchError):
    """A fleet run was requested while another one is still running."""
