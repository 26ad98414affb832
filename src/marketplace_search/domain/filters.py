"""Typed document filter for advertisement queries."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class FilterOp(str, Enum):
    """Supported filter operators."""

    equals = "equals"              # field == value
    not_equals = "not_equals"      # field != value (missing field matches)
    any_of = "any_of"              # field (or any array element) in [values]
    all_of = "all_of"              # array field contains every one of [values]
    gte = "gte"                    # field >= value
    lte = "lte"                    # field <= value
    contains = "contains"          # case-insensitive substring
    iequals_any = "iequals_any"    # case-insensitive whole-value match against any of [values]
    non_empty = "non_empty"        # array field has at least one element
    empty = "empty"                # array field missing, null or []
    geo_within = "geo_within"      # point lies within a spherical cap (value is a GeoCircle)


class FieldFilter(BaseModel):
    """A single typed filter condition on a document field (dotted paths allowed)."""

    field: str = Field(..., description="Document field path")
    op: FilterOp = Field(..., description="Filter operator")
    value: Any = Field(default=None, description="Comparison value(s)")


class DocumentFilter(BaseModel):
    """Conjunction of ``must`` conditions plus an optional OR group.

    ``should`` is satisfied when at least one of its conditions matches;
    an empty ``should`` imposes nothing.
    """

    must: list[FieldFilter] = Field(default_factory=list)
    should: list[FieldFilter] = Field(default_factory=list)

    def extended(self, *conditions: FieldFilter) -> DocumentFilter:
        """Return a copy with extra ``must`` conditions appended."""
        return DocumentFilter(must=[*self.must, *conditions], should=list(self.should))
