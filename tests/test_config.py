"""Tests for settings, auth and response envelopes."""

from __future__ import annotations

import json

import pytest

from cms_feed.auth import authenticate, extract_bearer_token
from cms_feed.config import (
    SHAPE_FLAT,
    SHAPE_NESTED,
    ConfigurationError,
    Settings,
    parse_response_fields,
)
from cms_feed.responses import items_data, send_error, send_success


# ===================================================================
# Settings
# ===================================================================

class TestSettings:

    def test_from_env_reads_all_variables(self):
        s = Settings.from_env({
            "REEARTH_CMS_INTEGRATION_API_BASE_URL": "https://cms.test/api/",
            "REEARTH_CMS_INTEGRATION_API_ACCESS_TOKEN": "tok",
            "REEARTH_CMS_MODEL_ID": "m1",
            "REEARTH_CMS_PROJECT_ID": "p1",
            "REEARTH_CMS_WORKSPACE_ID": "ws",
            "API_SECRET_KEY": "secret",
            "CORS_ORIGIN": "https://app.test",
            "RESPONSE_FIELDS": "title, description ,",
            "RESPONSE_SHAPE": "Nested",
            "FILTERS": "status===published",
            "FILTERS_STRICT": "true",
            "ENRICH_ITEMS": "false",
            "CMS_MAX_CONCURRENCY": "8",
            "CMS_TIMEOUT": "10",
            "PORT": "9000",
            "LOG_LEVEL": "debug",
        })
        assert s.cms_base_url == "https://cms.test/api"
        assert s.cms_token == "tok"
        assert (s.model_id, s.project_id, s.workspace_id) == ("m1", "p1", "ws")
        assert s.api_secret_key == "secret"
        assert s.cors_origin == "https://app.test"
        assert s.response_fields == ("title", "description")
        assert s.response_shape == SHAPE_NESTED
        assert s.filters == "status===published"
        assert s.filters_strict is True
        assert s.enrich_items is False
        assert s.max_concurrency == 8
        assert s.timeout == 10.0
        assert s.port == 9000
        assert s.log_level == "DEBUG"

    def test_defaults(self):
        s = Settings.from_env({})
        assert s.response_fields is None
        assert s.response_shape == SHAPE_FLAT
        assert s.enrich_items is True
        assert s.filters_strict is False
        assert s.max_concurrency == 5
        assert s.timeout == 30.0

    def test_bad_values_fall_back(self):
        s = Settings.from_env({"RESPONSE_SHAPE": "tree", "CMS_MAX_CONCURRENCY": "lots", "PORT": "-1"})
        assert s.response_shape == SHAPE_FLAT
        assert s.max_concurrency == 5
        assert s.port == 8080

    @pytest.mark.parametrize("raw,expected", [
        ("2.5", 2.5),
        ("45", 45.0),
        ("soon", 30.0),
        ("0", 30.0),
        ("inf", 30.0),
    ])
    def test_fractional_timeout(self, raw, expected):
        assert Settings.from_env({"CMS_TIMEOUT": raw}).timeout == expected

    @pytest.mark.parametrize("raw,expected", [
        (None, None),
        ("", None),
        (" , ", None),
        ("title", ("title",)),
        ("title,description", ("title", "description")),
    ])
    def test_parse_response_fields(self, raw, expected):
        assert parse_response_fields(raw) == expected


class TestValidate:

    def _complete(self, **kw) -> Settings:
        base = dict(cms_base_url="https://cms.test", model_id="m1", project_id="p1")
        base.update(kw)
        return Settings(**base)

    def test_complete_settings_pass(self):
        self._complete().validate()

    def test_missing_model(self):
        with pytest.raises(ConfigurationError, match="Model ID not configured"):
            self._complete(model_id="").validate()

    def test_missing_project_when_enriching(self):
        with pytest.raises(ConfigurationError, match="Project ID not configured"):
            self._complete(project_id="").validate()

    def test_project_optional_without_enrichment(self):
        self._complete(project_id="", enrich_items=False).validate()

    def test_project_required_with_workspace(self):
        with pytest.raises(ConfigurationError, match="Project ID not configured"):
            self._complete(project_id="", enrich_items=False, workspace_id="ws").validate()

    def test_missing_base_url(self):
        with pytest.raises(ConfigurationError, match="CMS base URL not configured"):
            self._complete(cms_base_url="").validate()


# ===================================================================
# Auth
# ===================================================================

class TestAuth:

    def test_valid_token(self):
        assert authenticate({"authorization": "Bearer s3cret"}, "s3cret")

    def test_capitalised_header_name(self):
        assert authenticate({"Authorization": "Bearer s3cret"}, "s3cret")

    @pytest.mark.parametrize("headers", [
        {},
        {"authorization": "s3cret"},
        {"authorization": "Basic s3cret"},
        {"authorization": "Bearer "},
        {"authorization": "Bearer wrong"},
        {"authorization": "bearer s3cret"},
    ])
    def test_rejected(self, headers):
        assert not authenticate(headers, "s3cret")

    def test_unset_secret_rejects_everyone(self):
        assert not authenticate({"authorization": "Bearer "}, "")
        assert not authenticate({"authorization": "Bearer anything"}, "")

    def test_extract_bearer_token(self):
        assert extract_bearer_token({"authorization": "Bearer abc"}) == "abc"
        assert extract_bearer_token({"authorization": "Token abc"}) is None


# ===================================================================
# Envelopes
# ===================================================================

class TestEnvelopes:

    def test_success(self):
        resp = send_success(items_data([{"id": "1"}], 1))
        assert resp.status_code == 200
        assert json.loads(resp.body) == {"success": True, "data": {"items": [{"id": "1"}], "totalCount": 1}}

    def test_total_count_omitted_when_unknown(self):
        assert items_data([], None) == {"items": []}

    def test_error_without_details(self):
        resp = send_error("UNAUTHORIZED", "nope", 401)
        assert resp.status_code == 401
        assert json.loads(resp.body) == {"success": False, "error": {"code": "UNAUTHORIZED", "message": "nope"}}

    def test_error_with_details(self):
        details = [{"field": "FILTERS", "message": "bad"}]
        body = json.loads(send_error("CONFIGURATION_ERROR", "x", 500, details=details).body)
        assert body["error"]["details"] == details
