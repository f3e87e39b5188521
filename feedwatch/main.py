"""FastAPI app entrypoint."""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from feedwatch.api.routes import router
from feedwatch.config import get_settings
from feedwatch.detection import FleetDetector, SiteDetector
from feedwatch.fetch import PageFetcher
from feedwatch.logging_config import setup_logging
from feedwatch.runner import DetectionService, run_periodically
from feedwatch.sites import load_site_configs
from feedwatch.store import build_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # Initialize logging FIRST so all subsequent operations produce JSON logs
    setup_logging(settings.log_level)
    logger.info("starting feedwatch")

    sites = load_site_configs(settings.sites_file)
    store = await build_store(settings)
    fetcher = PageFetcher(timeout=settings.fetch_timeout_seconds, user_agent=settings.user_agent)
    fleet = FleetDetector(SiteDetector(fetcher, store), store)
    service = DetectionService(fleet, sites)

    app.state.settings = settings
    app.state.store = store
    app.state.service = service

    scheduler = None
    if settings.check_interval_seconds > 0:
        scheduler = asyncio.create_task(run_periodically(service, settings.check_interval_seconds))

    logger.info(
        "feedwatch ready",
        extra={
            "sites": len(sites),
            "store_backend": settings.store_backend,
            "check_interval_seconds": settings.check_interval_seconds,
        },
    )

    yield

    logger.info("shutting down feedwatch")
    if scheduler is not None:
        scheduler.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await scheduler
    await fetcher.aclose()
    await store.aclose()


app = FastAPI(title="feedwatch", lifespan=lifespan)
app.include_router(router)


@app.get("/health")
async def health():
    return {"status": "ok"}
