"""Run-level coordination: one fleet run at a time, plus the periodic loop."""

from __future__ import annotations

import asyncio
import logging

from feedwatch.detection import FleetDetector
from feedwatch.errors import RunInProgressError
from feedwatch.models import FleetResult, SiteConfig
from feedwatch.sites import find_site

logger = logging.getLogger(__name__)


class DetectionService:
    """Serializes fleet runs triggered by the scheduler, the API and the CLI."""

    def __init__(self, fleet: FleetDetector, sites: list[SiteConfig]) -> None:
        self._fleet = fleet
        self._sites = list(sites)
        self._lock = asyncio.Lock()

    @property
    def sites(self) -> list[SiteConfig]:
        return list(self._sites)

    @property
    def running(self) -> bool:
        return self._lock.locked()

    def get_site(self, site_id: str) -> SiteConfig | None:
        return find_site(self._sites, site_id)

    async def run_all(self, *, wait: bool = False) -> FleetResult:
        """Run every enabled site.

        With ``wait=False`` a run already in progress raises
        ``RunInProgressError`` instead of queueing behind it.
        """
        if not wait and self._lock.locked():
            raise RunInProgressError("a detection run is already in progress")
        async with self._lock:
            return await self._fleet.run(self._sites)

    async def run_site(self, site: SiteConfig, *, wait: bool = False) -> FleetResult:
        if not wait and self._lock.locked():
            raise RunInProgressError("a detection run is already in progress")
        async with self._lock:
            return await self._fleet.run_site(site)


async def run_periodically(service: DetectionService, interval_seconds: float) -> None:
    """Run the fleet every *interval_seconds* until cancelled."""
    logger.info("scheduler started", extra={"interval_seconds": interval_seconds})
    while True:
        try:
            result = await service.run_all(wait=True)
            logger.info("scheduled run finished", extra=result.stats)
        except Exception:
            logger.exception("scheduled run failed")
        await asyncio.sleep(interval_seconds)
