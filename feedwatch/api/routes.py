"""GET /feed, GET /status, GET /sites/{id}, POST /trigger, GET /cron handlers."""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from feedwatch.api.schemas import SiteDetail, StatusResponse, TriggerResponse
from feedwatch.api.service import build_feed, build_site_detail, build_status, build_trigger_response
from feedwatch.auth.dependencies import require_api_key, require_cron_secret
from feedwatch.config import Settings
from feedwatch.errors import RunInProgressError, StoreError
from feedwatch.models import SiteConfig
from feedwatch.runner import DetectionService
from feedwatch.store import SiteStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(request: Request) -> DetectionService:
    return request.app.state.service


def _get_store(request: Request) -> SiteStore:
    return request.app.state.store


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _lookup_site(service: DetectionService, site_id: str) -> SiteConfig:
    site = service.get_site(site_id)
    if site is None:
        raise HTTPException(status_code=404, detail=f"Unknown site: {site_id}")
    return site


@router.get("/feed")
async def get_feed(
    request: Request,
    format: Literal["rss", "atom", "json"] = "rss",
    site: str | None = None,
    limit: int = Query(100, ge=1, le=500),
    service: DetectionService = Depends(_get_service),
    store: SiteStore = Depends(_get_store),
    settings: Settings = Depends(_get_settings),
):
    site_config = _lookup_site(service, site) if site else None
    try:
        body, media_type = await build_feed(
            store, settings, format, limit, site=site_config, feed_url=str(request.url)
        )
    except StoreError:
        logger.warning("feed read failed", exc_info=True)
        raise HTTPException(status_code=503, detail="Store unavailable")
    return Response(
        content=body,
        media_type=media_type,
        headers={"Cache-Control": "public, max-age=600"},
    )


@router.get("/status", response_model=StatusResponse)
async def get_status(
    service: DetectionService = Depends(_get_service),
    store: SiteStore = Depends(_get_store),
    settings: Settings = Depends(_get_settings),
):
    try:
        return await build_status(service, store, settings)
    except StoreError:
        logger.warning("status read failed", exc_info=True)
        raise HTTPException(status_code=503, detail="Store unavailable")


@router.get("/sites/{site_id}", response_model=SiteDetail)
async def get_site(
    site_id: str,
    limit: int = Query(100, ge=1, le=500),
    service: DetectionService = Depends(_get_service),
    store: SiteStore = Depends(_get_store),
):
    site = _lookup_site(service, site_id)
    try:
        return await build_site_detail(site, store, limit=limit)
    except StoreError:
        logger.warning("site read failed", extra={"site_id": site_id}, exc_info=True)
        raise HTTPException(status_code=503, detail="Store unavailable")


@router.post("/trigger", response_model=TriggerResponse, dependencies=[Depends(require_api_key)])
async def trigger(
    site: str | None = None,
    service: DetectionService = Depends(_get_service),
):
    site_config = _lookup_site(service, site) if site else None
    try:
        if site_config is not None:
            fleet = await service.run_site(site_config)
        else:
            fleet = await service.run_all()
    except RunInProgressError:
        raise HTTPException(status_code=409, detail="Detection already in progress")

    logger.info("manual trigger finished", extra={"site_id": site, **fleet.stats})
    return build_trigger_response(service, fleet, single_site=site_config is not None)


@router.get("/cron", response_model=TriggerResponse, dependencies=[Depends(require_cron_secret)])
async def cron(service: DetectionService = Depends(_get_service)):
    try:
        fleet = await service.run_all()
    except RunInProgressError:
        raise HTTPException(status_code=409, detail="Detection already in progress")
    return build_trigger_response(service, fleet)
