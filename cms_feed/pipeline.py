"""
cms-feed — Items pipeline.

fetch (items ‖ schema ‖ assets) → enrich → project → filter → shape

Everything here is request-scoped; the only shared input is the frozen
Settings.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from .cms import CMSClient
from .config import ConfigurationError, Settings
from .enrichment import enrich_items
from .filters import FilterClause, FilterSyntaxError, filter_items, parse_filters
from .models import CMSItem
from .projection import project_item, shape_item
from .responses import items_data

logger = logging.getLogger("cms_feed.pipeline")


@dataclass
class PipelineResult:
    items: list[dict]
    total_count: Optional[int]

    def to_data(self) -> dict:
        return items_data(self.items, self.total_count)


def load_filters(settings: Settings) -> tuple[FilterClause, ...]:
    """Parse FILTERS; strict-mode syntax errors become ConfigurationError."""
    try:
        return parse_filters(settings.filters, strict=settings.filters_strict)
    except FilterSyntaxError as exc:
        raise ConfigurationError(
            "Invalid FILTERS expression",
            details=[{"field": "FILTERS", "message": str(exc)}],
        ) from exc


def make_client(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> CMSClient:
    return CMSClient(
        settings.cms_base_url,
        settings.cms_token,
        project_id=settings.project_id,
        workspace_id=settings.workspace_id,
        max_concurrency=settings.max_concurrency,
        timeout=settings.timeout,
        transport=transport,
    )


async def fetch_enriched(settings: Settings, cms: CMSClient) -> tuple[list[CMSItem], Optional[int]]:
    if not settings.enrich_items:
        resp = await cms.get_items(settings.model_id)
        return resp.items, resp.total_count

    items_resp, model, assets = await asyncio.gather(
        cms.get_items(settings.model_id),
        cms.get_model(settings.model_id),
        cms.get_assets(settings.project_id),
    )
    items = enrich_items(items_resp.items, model.schema_.fields, assets)
    return items, items_resp.total_count


async def run_pipeline(
    settings: Settings,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> PipelineResult:
    """
    Produce the public item list for the configured model.

    Raises ConfigurationError before any network call when required
    settings are missing, and CMSFetchError when any CMS call fails.
    """
    settings.validate()
    clauses = load_filters(settings)

    async with make_client(settings, transport) as cms:
        items, total_count = await fetch_enriched(settings, cms)

    projected = [project_item(item, settings.response_fields) for item in items]
    admitted = filter_items(projected, clauses)
    logger.info(
        "Model %s: %d fetched, %d after filters",
        settings.model_id, len(items), len(admitted),
    )

    return PipelineResult(
        items=[shape_item(item, settings.response_shape) for item in admitted],
        total_count=total_count,
    )
