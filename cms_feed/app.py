"""
cms-feed — FastAPI application.

    uvicorn --factory cms_feed.app:build_app --port 8080

Settings are read from the environment once, when the app is built.
Importing this module has no side effects.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import Settings, configure_logging
from .responses import METHOD_NOT_ALLOWED, send_error
from .router import items_router

logger = logging.getLogger("cms_feed")


async def _http_error(request: Request, exc: StarletteHTTPException):
    # routing raises 405 for methods no route lists
    if exc.status_code == 405:
        return send_error(
            METHOD_NOT_ALLOWED,
            f"Method {request.method} not allowed",
            405,
            headers={"Allow": "GET"},
        )
    return await http_exception_handler(request, exc)


def create_app(
    settings: Optional[Settings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the app. *transport* replaces the network for the CMS client."""
    if settings is None:
        settings = Settings.from_env()

    application = FastAPI(
        title="cms-feed",
        version=__version__,
        docs_url=None,
        redoc_url=None,
    )
    application.add_exception_handler(StarletteHTTPException, _http_error)

    if settings.cors_origin:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=[settings.cors_origin],
            allow_credentials=True,
            allow_methods=["GET"],
            allow_headers=["Authorization", "Content-Type"],
        )

    application.include_router(items_router(get_settings=lambda: settings, transport=transport))
    return application


def build_app() -> FastAPI:
    """uvicorn factory: configure logging from the environment, then build the app."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    logger.info(
        "Serving model %s (shape=%s, enrich=%s)",
        settings.model_id or "<unset>", settings.response_shape, settings.enrich_items,
    )
    return create_app(settings)
