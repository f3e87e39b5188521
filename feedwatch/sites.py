"""Site configuration loading from a YAML file."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from feedwatch.errors import SiteConfigError
from feedwatch.models import SiteConfig

logger = logging.getLogger(__name__)


def parse_site_configs(data: object) -> list[SiteConfig]:
    """Validate the decoded YAML document and return sites in file order.

    The document is either a list of site mappings or a mapping with a
    ``sites`` key holding that list.
    """
    if isinstance(data, dict):
        data = data.get("sites", [])
    if data is None:
        return []
    if not isinstance(data, list):
        raise SiteConfigError("site configuration must be a list of sites")

    sites: list[SiteConfig] = []
    seen_ids: set[str] = set()
    for index, entry in enumerate(data):
        try:
            site = SiteConfig.model_validate(entry)
        except ValidationError as exc:
            raise SiteConfigError(f"invalid site at position {index}: {exc}") from exc
        if site.id in seen_ids:
            raise SiteConfigError(f"duplicate site id: {site.id}")
        seen_ids.add(site.id)
        sites.append(site)
    return sites


def load_site_configs(path: str | Path) -> list[SiteConfig]:
    """Load site configurations from a YAML file."""
    config_path = Path(path)
    if not config_path.exists():
        raise SiteConfigError(f"site configuration not found at {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise SiteConfigError(f"could not parse {config_path}: {exc}") from exc

    sites = parse_site_configs(data)
    logger.info(
        "site configuration loaded",
        extra={
            "path": str(config_path),
            "sites": len(sites),
            "enabled": sum(1 for s in sites if s.enabled),
        },
    )
    return sites


def find_site(sites: list[SiteConfig], site_id: str) -> SiteConfig | None:
    for site in sites:
        if site.id == site_id:
            return site
    return None
