"""Tool registry for the MCP data plane.

Tools take the search parameters as optional snake_case arguments, forward
them under their external camelCase names to ``SearchService`` and return a
JSON string. Search errors become ``{"error": {...}}``; anything else
propagates.
"""

from __future__ import annotations

import json
import time
from functools import lru_cache
from typing import Any

from .auth import require_data_scope
from .observability import log_tool_invocation, metrics_snapshot

from ..config.runtime import get_settings
from ..domain.errors import SearchError
from ..domain.filter_spec import SORTABLE_FIELDS, SortOrder, TagOperator, TriState
from ..models.documents import AdvertisementType

# snake_case tool argument -> external query parameter
PARAMETER_NAMES = {
    "search": "search",
    "type": "type",
    "category_id": "categoryId",
    "include_subcategories": "includeSubcategories",
    "tag_id": "tagId",
    "tag_operator": "tagOperator",
    "location": "location",
    "is_urgent": "isUrgent",
    "is_active": "isActive",
    "is_archived": "isArchived",
    "owner_id": "ownerId",
    "profile_id": "profileId",
    "min_rating": "minRating",
    "max_rating": "maxRating",
    "min_views": "minViews",
    "max_views": "maxViews",
    "min_applications": "minApplications",
    "max_applications": "maxApplications",
    "expires_before": "expiresBefore",
    "expires_after": "expiresAfter",
    "min_created_at": "minCreatedAt",
    "max_created_at": "maxCreatedAt",
    "min_author_rating": "minAuthorRating",
    "max_author_rating": "maxAuthorRating",
    "longitude": "longitude",
    "latitude": "latitude",
    "max_distance": "maxDistance",
    "has_portfolio": "hasPortfolio",
    "languages": "languages",
    "page": "page",
    "limit": "limit",
    "sort_by": "sortBy",
    "sort_order": "sortOrder",
}


def to_query_params(**arguments: Any) -> dict[str, Any]:
    """Map tool arguments to query parameters, dropping the ones not given."""
    return {PARAMETER_NAMES[k]: v for k, v in arguments.items() if v is not None}


@lru_cache(maxsize=1)
def _get_search_service():
    from ..wiring import build_search_service
    return build_search_service()


def _error(tool: str, t0: float, e: SearchError) -> str:
    latency_ms = (time.monotonic() - t0) * 1000
    log_tool_invocation(tool, latency_ms, error_code=e.code)
    return json.dumps({"error": e.to_dict()})


def capabilities() -> dict[str, Any]:
    settings = get_settings()
    return {
        "sort_fields": list(SORTABLE_FIELDS),
        "sort_orders": [o.value for o in SortOrder],
        "advertisement_types": [t.value for t in AdvertisementType],
        "tri_state_values": [t.value for t in TriState],
        "tag_operators": [o.value for o in TagOperator],
        "parameters": sorted(PARAMETER_NAMES.values()),
        "default_page_limit": settings.default_page_limit,
        "max_page_limit": settings.max_page_limit,
        "default_max_distance_m": settings.default_max_distance_m,
    }


# ---------------------------------------------------------------------------
# Data Plane tools
# ---------------------------------------------------------------------------
DATA_PLANE_ALLOWED_TOOLS = frozenset({
    "ads_search",
    "ads_owner_listing",
    "ads_explain_plan",
    "ads_capabilities",
    "ads_health",
})


def register_data_plane_tools(mcp):
    """Register the read-only search tools."""

    @mcp.tool()
    def ads_search(
        search: str | None = None,
        type: str | None = None,
        category_id: list[str] | None = None,
        include_subcategories: bool | None = None,
        tag_id: list[str] | None = None,
        tag_operator: str | None = None,
        location: str | None = None,
        is_urgent: bool | None = None,
        is_active: str | None = None,
        is_archived: str | None = None,
        owner_id: str | None = None,
        profile_id: str | None = None,
        min_rating: float | None = None,
        max_rating: float | None = None,
        min_views: float | None = None,
        max_views: float | None = None,
        min_applications: float | None = None,
        max_applications: float | None = None,
        expires_before: str | None = None,
        expires_after: str | None = None,
        min_created_at: str | None = None,
        max_created_at: str | None = None,
        min_author_rating: float | None = None,
        max_author_rating: float | None = None,
        longitude: float | None = None,
        latitude: float | None = None,
        max_distance: float | None = None,
        has_portfolio: str | None = None,
        languages: list[str] | None = None,
        page: int | None = None,
        limit: int | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> str:
        """Search advertisements with filters, sorting and pagination (read-only).

        Args:
            search: Free text matched against title, description, exchange preferences, location (max 100 chars)
            type: One of service, goods, skill, experience
            category_id: Category ids; with include_subcategories, descendants match too
            tag_id: Tag ids
            tag_operator: 'or' (any tag, default) or 'and' (all tags)
            is_active: 'true' (default), 'false' or 'any'
            is_archived: 'true', 'false' or 'any' ('any' also lifts the default isActive=true)
            min_rating: Advertisement rating lower bound (0-5)
            min_author_rating: Author profile rating lower bound (0-5)
            longitude: Radius search center; needs latitude as well
            max_distance: Radius in meters (default 10000)
            has_portfolio: 'true', 'false' or 'any'
            languages: Author languages, any match, case-insensitive
            page: Page number (>= 1, default 1)
            limit: Page size (1-100, default 10)
            sort_by: createdAt, updatedAt, title, views, expiresAt, rating.average or applicationCount
            sort_order: 'asc' or 'desc' (default)

        Returns:
            JSON with data (advertisements with owner/category/tags/profile embedded), pagination, filters
        """
        arguments = dict(locals())
        t0 = time.monotonic()
        require_data_scope()
        params = to_query_params(**arguments)
        try:
            response = _get_search_service().search(params)
        except SearchError as e:
            return _error("ads_search", t0, e)
        latency_ms = (time.monotonic() - t0) * 1000
        log_tool_invocation(
            "ads_search", latency_ms, returned=len(response.data), total=response.pagination.total,
        )
        return json.dumps(response.to_json_dict(), indent=2)

    @mcp.tool()
    def ads_owner_listing(
        owner_id: str,
        is_active: str | None = None,
        is_archived: str | None = None,
        page: int | None = None,
        limit: int | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> str:
        """List one owner's advertisements, including inactive and archived ones unless filtered.

        Args:
            owner_id: The owning user's id
            is_active: 'true', 'false' or 'any' (default: no filter)
            is_archived: 'true', 'false' or 'any' (default: no filter)
            page: Page number (>= 1, default 1)
            limit: Page size (1-100, default 10)
            sort_by: Allow-listed sort field (default createdAt)
            sort_order: 'asc' or 'desc' (default)

        Returns:
            JSON with data, pagination, filters
        """
        t0 = time.monotonic()
        require_data_scope()
        params = to_query_params(
            is_active=is_active,
            is_archived=is_archived,
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        try:
            response = _get_search_service().list_owner_advertisements(owner_id, params)
        except SearchError as e:
            return _error("ads_owner_listing", t0, e)
        latency_ms = (time.monotonic() - t0) * 1000
        log_tool_invocation(
            "ads_owner_listing", latency_ms, returned=len(response.data), total=response.pagination.total,
        )
        return json.dumps(response.to_json_dict(), indent=2)

    @mcp.tool()
    def ads_explain_plan(query: dict[str, Any]) -> str:
        """Show how a search would run without running it.

        Args:
            query: Search parameters under their camelCase names, e.g. {"hasPortfolio": "true", "languages": ["English"]}

        Returns:
            JSON with normalized filters, plan kind ('simple' or 'joined'), the rules that chose it,
            resolved category ids and the typed plan
        """
        t0 = time.monotonic()
        require_data_scope()
        try:
            explanation = _get_search_service().explain(query)
        except SearchError as e:
            return _error("ads_explain_plan", t0, e)
        latency_ms = (time.monotonic() - t0) * 1000
        log_tool_invocation("ads_explain_plan", latency_ms, plan=explanation["plan"])
        return json.dumps(explanation, indent=2)

    @mcp.tool()
    def ads_capabilities() -> str:
        """Supported parameters, sort fields, advertisement types, tri-state values and limits."""
        return json.dumps(capabilities())

    @mcp.tool()
    def ads_health() -> str:
        """Liveness/readiness: document store reachable; includes tool call counters."""
        result = _get_search_service().health()
        result["metrics"] = metrics_snapshot()
        return json.dumps(result)
