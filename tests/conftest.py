"""Fixtures for cms-feed tests."""

from __future__ import annotations

import asyncio
import dataclasses
import math
from typing import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from cms_feed.app import create_app
from cms_feed.config import Settings

CMS_BASE_URL = "https://cms.test/api"
API_SECRET = "valid-token"
AUTH_HEADERS = {"Authorization": f"Bearer {API_SECRET}"}


# ---------------------------------------------------------------------------
# Fake CMS
# ---------------------------------------------------------------------------

def make_item(item_id: str, fields: list[dict], updated: bool = True) -> dict:
    item = {"id": item_id, "fields": fields, "createdAt": "2024-01-01T00:00:00Z"}
    if updated:
        item["updatedAt"] = "2024-01-01T01:00:00Z"
    return item


class FakeCMS:
    """In-memory CMS answering the three integration API endpoints."""

    def __init__(
        self,
        items: list[dict] | None = None,
        schema_fields: list[dict] | None = None,
        assets: list[dict] | None = None,
        per_page: int = 100,
    ):
        self.items = items or []
        self.schema_fields = schema_fields or []
        self.assets = assets or []
        self.per_page = per_page
        self.fail_paths: set[str] = set()
        self.fail_pages: set[int] = set()
        self.page_delays: dict[int, float] = {}
        self.omit_total = False
        self.requests: list[httpx.Request] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if any(path.endswith(p) for p in self.fail_paths):
            return httpx.Response(500, json={"error": "boom"})

        if path.endswith("/items"):
            return await self._items(request)
        if path.endswith("/assets"):
            return httpx.Response(200, json={"items": self.assets, "totalCount": len(self.assets)})
        if "/models/" in path:
            model_id = path.rsplit("/", 1)[-1]
            return httpx.Response(200, json={
                "id": model_id,
                "key": "test-model",
                "name": "Test Model",
                "projectId": "p1",
                "schemaId": "s1",
                "schema": {"id": "s1", "projectId": "p1", "fields": self.schema_fields},
            })
        return httpx.Response(404, json={"error": "not found"})

    async def _items(self, request: httpx.Request) -> httpx.Response:
        page = int(request.url.params.get("page", "1"))
        per_page = int(request.url.params.get("perPage", str(self.per_page)))

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.page_delays.get(page)
            if delay:
                await asyncio.sleep(delay)
        finally:
            self.in_flight -= 1

        if page in self.fail_pages:
            return httpx.Response(502, json={"error": "bad gateway"})

        start = (page - 1) * per_page
        body: dict = {
            "items": self.items[start:start + per_page],
            "page": page,
            "perPage": per_page,
        }
        if not self.omit_total:
            body["totalCount"] = len(self.items)
        return httpx.Response(200, json=body)

    def page_count(self) -> int:
        return math.ceil(len(self.items) / self.per_page)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


# ---------------------------------------------------------------------------
# Sample content
# ---------------------------------------------------------------------------

SAMPLE_ITEMS = [
    make_item("item_1", [
        {"id": "f1", "key": "title", "type": "text", "value": "Test Title"},
        {"id": "f2", "key": "description", "type": "textArea", "value": "Test Description"},
        {"id": "f3", "key": "internal", "type": "text", "value": "Internal Note"},
    ]),
]

SAMPLE_SCHEMA = [
    {"id": "sf1", "key": "title", "name": "Title", "type": "text", "multiple": False, "required": True},
    {"id": "sf2", "key": "description", "name": "Description", "type": "textArea", "multiple": False, "required": False},
    {"id": "sf3", "key": "internal", "name": "Internal", "type": "text", "multiple": False, "required": False},
]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def fake_cms() -> FakeCMS:
    return FakeCMS(items=list(SAMPLE_ITEMS), schema_fields=list(SAMPLE_SCHEMA))


@pytest.fixture()
def make_settings() -> Callable[..., Settings]:
    """Settings factory with a complete test configuration."""
    base = Settings(
        cms_base_url=CMS_BASE_URL,
        cms_token="cms-token",
        model_id="m1",
        project_id="p1",
        api_secret_key=API_SECRET,
    )

    def factory(**overrides) -> Settings:
        return dataclasses.replace(base, **overrides)

    return factory


@pytest.fixture()
def make_client(fake_cms: FakeCMS, make_settings) -> Callable[..., TestClient]:
    """Build a TestClient for the app wired to the fake CMS."""

    def factory(**overrides) -> TestClient:
        app = create_app(make_settings(**overrides), transport=fake_cms.transport())
        return TestClient(app)

    return factory


@pytest.fixture()
def client(make_client) -> TestClient:
    return make_client()
