"""Page fetcher — async HTTP GET of a site's source page."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from feedwatch.errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9,zh-CN;q=0.8",
    "Cache-Control": "no-cache",
}


class Fetcher(Protocol):
    """Protocol for page fetchers."""

    async def fetch(self, url: str) -> str: ...


class PageFetcher:
    """Fetches raw page markup over a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        user_agent: str = "feedwatch/0.1.0",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            follow_redirects=True,
            headers={**DEFAULT_HEADERS, "User-Agent": user_agent},
            timeout=timeout,
        )

    async def fetch(self, url: str) -> str:
        """Return the body of *url*, raising ``FetchError`` on any failure."""
        logger.debug("fetching page", extra={"url": url})
        try:
            resp = await self._client.get(url, timeout=self._timeout)
            resp.raise_for_status()
        except httpx.TimeoutException as exc:
            raise FetchError(url, "timeout", f"request timed out after {self._timeout:g}s: {url}") from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise FetchError(
                url,
                "http_status",
                f"HTTP {status} {exc.response.reason_phrase}: {url}",
                status_code=status,
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(url, "network", f"{type(exc).__name__}: {exc}") from exc

        logger.debug(
            "page fetched",
            extra={"url": url, "status": resp.status_code, "bytes": len(resp.content)},
        )
        return resp.text

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
