"""
cms-feed — CMS integration API client.

Three read-only calls: list a model's items (all pages), get a model with
its schema, and list a project's assets. Every failure surfaces as
CMSFetchError so callers never have to know about httpx.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ValidationError

from .models import CMSAssetsResponse, CMSItemsResponse, CMSModel

logger = logging.getLogger("cms_feed.cms")

PAGE_SIZE = 100
DEFAULT_MAX_CONCURRENCY = 5
DEFAULT_TIMEOUT = 30.0


class CMSFetchError(Exception):
    """A CMS request failed: transport error, non-2xx status or bad payload."""


class CMSClient:
    """
    Async client for the CMS integration API.

    Use as an async context manager; one underlying httpx.AsyncClient is
    shared by every request made inside the block.

        async with CMSClient(base_url, token) as cms:
            items = await cms.get_items("model-id")

    When *workspace_id* is given, paths are scoped as
    ``/{workspace}/projects/{project}/...`` and *project_id* is required.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        project_id: str = "",
        workspace_id: str = "",
        page_size: int = PAGE_SIZE,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if workspace_id and not project_id:
            raise ValueError("[cms] workspace-scoped client requires project_id")
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.project_id = project_id
        self.workspace_id = workspace_id
        self.page_size = page_size
        self.max_concurrency = max(1, max_concurrency)
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "CMSClient":
        self._client = httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # URL building
    # ------------------------------------------------------------------

    def _scope(self) -> str:
        if self.workspace_id:
            return f"{self.base_url}/{self.workspace_id}/projects/{self.project_id}"
        return self.base_url

    def model_url(self, model_id: str) -> str:
        return f"{self._scope()}/models/{model_id}"

    def items_url(self, model_id: str) -> str:
        return f"{self.model_url(model_id)}/items"

    def assets_url(self, project_id: str) -> str:
        if self.workspace_id:
            return f"{self._scope()}/assets"
        return f"{self.base_url}/projects/{project_id}/assets"

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def _get(self, url: str, params: dict | None, model: type[BaseModel]) -> Any:
        if self._client is None:
            raise RuntimeError("CMSClient must be used inside 'async with'")
        try:
            resp = await self._client.get(url, params=params)
            resp.raise_for_status()
            return model.model_validate(resp.json())
        except httpx.HTTPStatusError as exc:
            logger.error("CMS returned HTTP %d for %s", exc.response.status_code, url)
            raise CMSFetchError(f"HTTP {exc.response.status_code} from {url}") from exc
        except httpx.HTTPError as exc:
            logger.error("CMS request to %s failed: %s", url, exc)
            raise CMSFetchError(f"Request to {url} failed: {exc}") from exc
        except (ValueError, ValidationError) as exc:
            logger.error("CMS returned an unexpected payload for %s: %s", url, exc)
            raise CMSFetchError(f"Unexpected payload from {url}") from exc

    async def _get_page(self, model_id: str, page: int) -> CMSItemsResponse:
        return await self._get(
            self.items_url(model_id),
            {"page": page, "perPage": self.page_size},
            CMSItemsResponse,
        )

    async def get_items(self, model_id: str) -> CMSItemsResponse:
        """
        Fetch every item of *model_id*.

        Page 1 reports totalCount; the remaining pages are fetched
        concurrently (at most max_concurrency in flight) and appended in
        page order. Any failed page fails the whole call.
        """
        first = await self._get_page(model_id, 1)
        items = list(first.items)

        if first.total_count is None:
            return CMSItemsResponse(items=items, totalCount=len(items))

        total_pages = math.ceil(first.total_count / self.page_size)
        if total_pages > 1:
            semaphore = asyncio.Semaphore(self.max_concurrency)

            async def fetch(page: int) -> CMSItemsResponse:
                async with semaphore:
                    return await self._get_page(model_id, page)

            logger.info(
                "Fetching %d more pages of model %s (%d items total)",
                total_pages - 1, model_id, first.total_count,
            )
            # gather() returns results in argument order, not completion order
            pages = await asyncio.gather(*(fetch(p) for p in range(2, total_pages + 1)))
            for page in pages:
                items.extend(page.items)

        return CMSItemsResponse(items=items, totalCount=first.total_count)

    async def get_model(self, model_id: str) -> CMSModel:
        """Fetch the model definition, including its schema fields."""
        return await self._get(self.model_url(model_id), None, CMSModel)

    async def get_assets(self, project_id: str) -> CMSAssetsResponse:
        """Fetch the project's asset list (single request, no pagination)."""
        return await self._get(
            self.assets_url(project_id), {"perPage": self.page_size}, CMSAssetsResponse
        )
