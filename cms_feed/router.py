"""
cms-feed — Router factory.

Creates a FastAPI APIRouter that serves:
  GET /api/items  → enriched, projected, filtered items of the configured model
  GET /healthz    → liveness probe (no auth)

Any other method on /api/items is answered with 405 in the standard error
envelope rather than FastAPI's default body. Methods missing from
ROUTED_METHODS reach the same envelope through create_app's 405 handler.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import httpx
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from .auth import authenticate
from .cms import CMSFetchError
from .config import ConfigurationError, Settings
from .pipeline import run_pipeline
from .responses import (
    CONFIGURATION_ERROR,
    FETCH_FAILED,
    INTERNAL_ERROR,
    METHOD_NOT_ALLOWED,
    UNAUTHORIZED,
    send_error,
    send_success,
)

logger = logging.getLogger("cms_feed.router")

ITEMS_PATH = "/api/items"
ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def items_router(
    *,
    get_settings: Callable[[], Settings],
    transport: Optional[httpx.AsyncBaseTransport] = None,
    path: str = ITEMS_PATH,
) -> APIRouter:
    """
    Create an APIRouter serving the items endpoint.

    Args:
        get_settings: Returns the Settings to use for a request. Called per
                      request so deployments and tests can swap settings.
        transport: Optional httpx transport for the CMS client (tests pass
                   an httpx.MockTransport).
        path: Mount path of the items endpoint.
    """
    if not callable(get_settings):
        raise ValueError("[cms-feed] items_router requires a callable get_settings")

    router = APIRouter()

    # ------------------------------------------------------------------
    # Items endpoint
    # ------------------------------------------------------------------

    @router.api_route(path, methods=ROUTED_METHODS)
    async def items(request: Request) -> JSONResponse:
        try:
            if request.method != "GET":
                return send_error(
                    METHOD_NOT_ALLOWED,
                    f"Method {request.method} not allowed",
                    405,
                    headers={"Allow": "GET"},
                )

            settings = get_settings()

            if not authenticate(request.headers, settings.api_secret_key):
                return send_error(
                    UNAUTHORIZED,
                    "Invalid or missing authentication token",
                    401,
                )

            try:
                result = await run_pipeline(settings, transport=transport)
            except ConfigurationError as exc:
                logger.error("Configuration error: %s", exc.message)
                return send_error(CONFIGURATION_ERROR, exc.message, 500, details=exc.details)
            except CMSFetchError:
                logger.exception("Error fetching items")
                return send_error(FETCH_FAILED, "Failed to fetch items from CMS", 500)

            return send_success(result.to_data(), 200)

        except Exception:
            logger.exception("Unexpected error")
            return send_error(INTERNAL_ERROR, "An unexpected error occurred", 500)

    # ------------------------------------------------------------------
    # Health check
    # ------------------------------------------------------------------

    @router.get("/healthz")
    async def healthz() -> dict:
        return {"status": "ok"}

    return router
