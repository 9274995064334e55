"""
cms-feed — Configuration

All settings come from the process environment and are read once into a
frozen Settings instance.

Environment variables:
    REEARTH_CMS_INTEGRATION_API_BASE_URL      — CMS integration API base URL.
    REEARTH_CMS_INTEGRATION_API_ACCESS_TOKEN  — Bearer token for the CMS.
    REEARTH_CMS_MODEL_ID      — Required. Model whose items are served.
    REEARTH_CMS_PROJECT_ID    — Required when enrichment is on or a workspace is set.
    REEARTH_CMS_WORKSPACE_ID  — Optional. Switches to workspace-scoped CMS paths.
    API_SECRET_KEY            — Secret expected in Authorization: Bearer <secret>.
    CORS_ORIGIN               — Optional. Allowed browser origin.
    RESPONSE_FIELDS           — Optional. Comma-separated field allow-list.
    RESPONSE_SHAPE            — "flat" (default) or "nested".
    FILTERS                   — Optional. Row filter, e.g. "status===published|archived".
    FILTERS_STRICT            — "true" rejects malformed FILTERS instead of skipping clauses.
    ENRICH_ITEMS              — "false" disables schema names and asset URL resolution.
    CMS_MAX_CONCURRENCY       — Concurrent page requests (default: 5).
    CMS_TIMEOUT               — CMS request timeout in seconds (default: 30).
    PORT                      — HTTP listen port for `cms-feed serve` (default: 8080).
    LOG_LEVEL                 — Root log level (default: INFO).
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger("cms_feed.config")

SHAPE_FLAT = "flat"
SHAPE_NESTED = "nested"
VALID_SHAPES = (SHAPE_FLAT, SHAPE_NESTED)

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigurationError(Exception):
    """Required deployment configuration is missing or invalid."""

    def __init__(self, message: str, details: Optional[list[dict]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


def parse_response_fields(raw: str | None) -> tuple[str, ...] | None:
    """Split a comma-separated allow-list. Blank input means "no projection"."""
    if not raw:
        return None
    keys = tuple(part.strip() for part in raw.split(",") if part.strip())
    return keys or None


def _flag(raw: str | None, default: bool) -> bool:
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


def _int(raw: str | None, default: int, name: str) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %d", name, raw, default)
        return default
    return value if value > 0 else default


def _float(raw: str | None, default: float, name: str) -> float:
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r, using %s", name, raw, default)
        return default
    return value if math.isfinite(value) and value > 0 else default


def _shape(raw: str | None) -> str:
    shape = (raw or SHAPE_FLAT).strip().lower()
    if shape not in VALID_SHAPES:
        logger.warning("Unknown RESPONSE_SHAPE=%r, falling back to %r", raw, SHAPE_FLAT)
        return SHAPE_FLAT
    return shape


@dataclass(frozen=True)
class Settings:
    cms_base_url: str = ""
    cms_token: str = ""
    model_id: str = ""
    project_id: str = ""
    workspace_id: str = ""
    api_secret_key: str = ""
    cors_origin: str = ""
    response_fields: Optional[tuple[str, ...]] = None
    response_shape: str = SHAPE_FLAT
    filters: str = ""
    filters_strict: bool = False
    enrich_items: bool = True
    max_concurrency: int = 5
    timeout: float = 30.0
    port: int = 8080
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            cms_base_url=env.get("REEARTH_CMS_INTEGRATION_API_BASE_URL", "").rstrip("/"),
            cms_token=env.get("REEARTH_CMS_INTEGRATION_API_ACCESS_TOKEN", ""),
            model_id=env.get("REEARTH_CMS_MODEL_ID", "").strip(),
            project_id=env.get("REEARTH_CMS_PROJECT_ID", "").strip(),
            workspace_id=env.get("REEARTH_CMS_WORKSPACE_ID", "").strip(),
            api_secret_key=env.get("API_SECRET_KEY", ""),
            cors_origin=env.get("CORS_ORIGIN", ""),
            response_fields=parse_response_fields(env.get("RESPONSE_FIELDS")),
            response_shape=_shape(env.get("RESPONSE_SHAPE")),
            filters=env.get("FILTERS", ""),
            filters_strict=_flag(env.get("FILTERS_STRICT"), False),
            enrich_items=_flag(env.get("ENRICH_ITEMS"), True),
            max_concurrency=_int(env.get("CMS_MAX_CONCURRENCY"), 5, "CMS_MAX_CONCURRENCY"),
            timeout=_float(env.get("CMS_TIMEOUT"), 30.0, "CMS_TIMEOUT"),
            port=_int(env.get("PORT"), 8080, "PORT"),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def needs_project(self) -> bool:
        return self.enrich_items or bool(self.workspace_id)

    def validate(self) -> None:
        """Raise ConfigurationError for the first missing required setting."""
        if not self.model_id:
            raise ConfigurationError("Model ID not configured")
        if self.needs_project and not self.project_id:
            raise ConfigurationError("Project ID not configured")
        if not self.cms_base_url:
            raise ConfigurationError("CMS base URL not configured")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
