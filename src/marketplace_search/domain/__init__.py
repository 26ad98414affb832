"""Domain types shared across the application."""

from .errors import InvalidParameter, SearchError, UpstreamFailure
from .filter_spec import FilterSpec, SortOrder, TagOperator, TriState
from .filters import DocumentFilter, FieldFilter, FilterOp
from .search_semantics import (
    RULE_COUNT_SAME_PREDICATE,
    RULE_GEO_SPHERICAL_CAP,
    RULE_JOIN_AUTHOR_RATING,
    RULE_JOIN_LANGUAGES,
    RULE_JOIN_PORTFOLIO,
    RULE_SIMPLE_DEFAULT,
)

__all__ = [
    "DocumentFilter",
    "FieldFilter",
    "FilterOp",
    "FilterSpec",
    "InvalidParameter",
    "SearchError",
    "SortOrder",
    "TagOperator",
    "TriState",
    "UpstreamFailure",
    "RULE_COUNT_SAME_PREDICATE",
    "RULE_GEO_SPHERICAL_CAP",
    "RULE_JOIN_AUTHOR_RATING",
    "RULE_JOIN_LANGUAGES",
    "RULE_JOIN_PORTFOLIO",
    "RULE_SIMPLE_DEFAULT",
]
