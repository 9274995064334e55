"""cms-feed CLI — serve the API or dump the items once."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
import sys

import click

from .cms import CMSFetchError
from .config import VALID_SHAPES, ConfigurationError, Settings, configure_logging, parse_response_fields
from .pipeline import run_pipeline
from .responses import CONFIGURATION_ERROR, FETCH_FAILED, error_body, success_body

logger = logging.getLogger("cms_feed.cli")


@click.group()
def main() -> None:
    """Headless-CMS items feed."""


@main.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind.")
@click.option("--port", type=int, default=None, help="Listen port (default: $PORT or 8080).")
def serve(host: str, port: int | None) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(
        "cms_feed.app:build_app",
        factory=True,
        host=host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


@main.command()
@click.option("--shape", type=click.Choice(VALID_SHAPES), default=None, help="Override RESPONSE_SHAPE.")
@click.option("--fields", default=None, help="Override RESPONSE_FIELDS (comma-separated).")
@click.option("--filters", default=None, help="Override FILTERS.")
@click.option("--strict", is_flag=True, help="Reject malformed FILTERS clauses.")
def items(shape: str | None, fields: str | None, filters: str | None, strict: bool) -> None:
    """Run the items pipeline once and print the response envelope."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    overrides: dict = {}
    if shape is not None:
        overrides["response_shape"] = shape
    if fields is not None:
        overrides["response_fields"] = parse_response_fields(fields)
    if filters is not None:
        overrides["filters"] = filters
    if strict:
        overrides["filters_strict"] = True
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    try:
        result = asyncio.run(run_pipeline(settings))
    except ConfigurationError as exc:
        click.echo(json.dumps(error_body(CONFIGURATION_ERROR, exc.message, exc.details), indent=2))
        sys.exit(1)
    except CMSFetchError as exc:
        logger.error("CMS fetch failed: %s", exc)
        click.echo(json.dumps(error_body(FETCH_FAILED, "Failed to fetch items from CMS"), indent=2))
        sys.exit(1)

    click.echo(json.dumps(success_body(result.to_data()), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
