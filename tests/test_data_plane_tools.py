"""Tests for the MCP data plane: tool set, argument mapping and JSON results.

The server must expose only read-only search tools. Tool functions are
called directly with the search service swapped for one over the
in-memory marketplace.
"""

import json

import pytest

from conftest import build_marketplace
from marketplace_search.mcp import tools
from marketplace_search.mcp.server import SERVER_NAME, create_server
from marketplace_search.mcp.tools import DATA_PLANE_ALLOWED_TOOLS, PARAMETER_NAMES, to_query_params
from marketplace_search.services.search_service import SearchService

# Tools that must NEVER appear on the data plane
FORBIDDEN_TOOLS = {
    "ads_create",
    "ads_update",
    "ads_delete",
    "ads_archive",
    "categories_create",
    "seed",
    "ensure_indexes",
}


def _get_tool_names(server) -> set[str]:
    """Extract registered tool names from a FastMCP server."""
    # FastMCP stores tools in _tool_manager._tools dict
    return set(server._tool_manager._tools.keys())


def _tool(name):
    return create_server()._tool_manager._tools[name].fn


@pytest.fixture
def service(monkeypatch):
    store = build_marketplace()
    svc = SearchService(store=store, references=store)
    monkeypatch.setattr(tools, "_get_search_service", lambda: svc)
    return svc


class TestToolSet:
    def test_exposes_only_allowed_tools(self):
        server = create_server()
        assert server.name == SERVER_NAME
        assert _get_tool_names(server) == DATA_PLANE_ALLOWED_TOOLS

    def test_no_write_tools(self):
        assert not _get_tool_names(create_server()) & FORBIDDEN_TOOLS


class TestArgumentMapping:
    def test_snake_to_camel(self):
        params = to_query_params(category_id=["c1"], has_portfolio="true", min_author_rating=4.0)
        assert params == {"categoryId": ["c1"], "hasPortfolio": "true", "minAuthorRating": 4.0}

    def test_none_dropped(self):
        assert to_query_params(search=None, page=2) == {"page": 2}

    def test_every_external_name_is_camel_case(self):
        for external in PARAMETER_NAMES.values():
            assert "_" not in external


class TestAdsSearch:
    def test_default_search(self, service):
        result = json.loads(_tool("ads_search")())
        assert [ad["id"] for ad in result["data"]] == ["ad-l", "ad-s", "ad-p", "ad-a"]
        assert result["pagination"]["total"] == 4
        assert result["pagination"]["hasNext"] is False
        assert result["filters"]["isActive"] == "true"

    def test_filters_forwarded(self, service):
        result = json.loads(_tool("ads_search")(
            category_id=["electronics"], include_subcategories=True, tag_id=["t2"], tag_operator="or",
        ))
        assert [ad["id"] for ad in result["data"]] == ["ad-s", "ad-p"]

    def test_joined_plan_through_tool(self, service):
        result = json.loads(_tool("ads_search")(has_portfolio="false"))
        assert [ad["id"] for ad in result["data"]] == ["ad-l", "ad-s"]

    def test_camel_case_result_keys(self, service):
        ad = json.loads(_tool("ads_search")(search="guitar"))["data"][0]
        assert ad["exchangePreferences"] == "Swap for cooking classes"
        assert "exchange_preferences" not in ad
        assert ad["owner"]["name"] == "Sam Lee"

    def test_invalid_parameter_is_error_json(self, service):
        result = json.loads(_tool("ads_search")(min_rating=9.0))
        assert result == {
            "error": {"code": "invalid_parameter", "parameter": "minRating", "message": "must be <= 5"},
        }


class TestOtherTools:
    def test_owner_listing(self, service):
        result = json.loads(_tool("ads_owner_listing")(owner_id="u1"))
        assert [ad["id"] for ad in result["data"]] == ["ad-x", "ad-p", "ad-a"]

    def test_owner_listing_blank_owner(self, service):
        result = json.loads(_tool("ads_owner_listing")(owner_id=""))
        assert result["error"]["parameter"] == "ownerId"

    def test_explain_plan(self, service):
        result = json.loads(_tool("ads_explain_plan")(query={"hasPortfolio": "true"}))
        assert result["plan"] == "joined"
        assert result["detail"]["kind"] == "joined"

    def test_capabilities(self):
        result = json.loads(_tool("ads_capabilities")())
        assert "rating.average" in result["sort_fields"]
        assert result["tag_operators"] == ["or", "and"]
        assert result["tri_state_values"] == ["true", "false", "any"]
        assert "hasPortfolio" in result["parameters"]

    def test_health(self, service):
        _tool("ads_search")()
        result = json.loads(_tool("ads_health")())
        assert result["ok"] is True
        assert result["metrics"]["tool_calls"]["ads_search"] >= 1


class TestDataScope:
    def test_key_required_when_configured(self, monkeypatch, service):
        from marketplace_search.config.runtime import get_settings

        get_settings.cache_clear()
        monkeypatch.setenv("REQUIRE_DATA_KEY", "true")
        monkeypatch.delenv("MCP_DATA_KEY", raising=False)
        try:
            with pytest.raises(PermissionError):
                _tool("ads_search")()
            monkeypatch.setenv("MCP_DATA_KEY", "secret")
            json.loads(_tool("ads_search")())
        finally:
            get_settings.cache_clear()
