"""QueryPlan values and the selector that picks one per request.

A ``SimplePlan`` is one filtered, sorted, paginated read plus a count with
the same predicate. A ``JoinedPlan`` is a stage pipeline that joins the
profile collection; its page pipeline and its count pipeline are both cut
from one stage list (``filter_stages``), so they always filter alike.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, Field

from .filter_spec import FilterSpec, SortOrder, TriState
from .filters import DocumentFilter, FieldFilter, FilterOp
from .pagination import PageRequest
from .predicates import AdvertisementFilterBuilder, range_filters
from .search_semantics import (
    RULE_JOIN_AUTHOR_RATING,
    RULE_JOIN_LANGUAGES,
    RULE_JOIN_PORTFOLIO,
    RULE_SIMPLE_DEFAULT,
)


class Collection(str, Enum):
    advertisements = "advertisements"
    profiles = "profiles"
    users = "users"
    categories = "categories"
    tags = "tags"


class SortKey(BaseModel):
    field: str
    descending: bool = False


# ---------------------------------------------------------------------------
# Pipeline stages
# ---------------------------------------------------------------------------


class MatchStage(BaseModel):
    kind: Literal["match"] = "match"
    filter: DocumentFilter


class LookupStage(BaseModel):
    """Left outer join: ``as_field`` receives the matching records of ``source``.

    With ``unwind`` the joined array collapses to a single sub-document;
    rows without a match keep going with ``as_field`` absent.
    """

    kind: Literal["lookup"] = "lookup"
    source: Collection
    local_field: str
    foreign_field: str = "_id"
    as_field: str
    unwind: bool = True


class SortStage(BaseModel):
    kind: Literal["sort"] = "sort"
    keys: list[SortKey]


class SkipStage(BaseModel):
    kind: Literal["skip"] = "skip"
    count: int = Field(..., ge=0)


class LimitStage(BaseModel):
    kind: Literal["limit"] = "limit"
    count: int = Field(..., ge=1)


Stage = Union[MatchStage, LookupStage, SortStage, SkipStage, LimitStage]


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------


class SimplePlan(BaseModel):
    kind: Literal["simple"] = "simple"
    predicate: DocumentFilter
    sort: list[SortKey]
    page: PageRequest
    reasons: list[str] = Field(default_factory=list)


class JoinedPlan(BaseModel):
    kind: Literal["joined"] = "joined"
    match_stages: list[Stage]
    post_join_stages: list[Stage]
    sort: list[SortKey]
    page: PageRequest
    reasons: list[str] = Field(default_factory=list)

    @property
    def joined_fields(self) -> set[str]:
        return {s.as_field for s in self.post_join_stages if isinstance(s, LookupStage)}

    def filter_stages(self) -> list[Stage]:
        """Every stage that decides row membership."""
        return [*self.match_stages, *self.post_join_stages]

    def page_stages(self, reference_lookups: Sequence[LookupStage] = ()) -> list[Stage]:
        return [
            *self.filter_stages(),
            SortStage(keys=list(self.sort)),
            SkipStage(count=self.page.skip),
            LimitStage(count=self.page.limit),
            *reference_lookups,
        ]

    def count_stages(self) -> list[Stage]:
        return self.filter_stages()


QueryPlan = Union[SimplePlan, JoinedPlan]

PROFILE_FIELD = "profile"
OWNER_PROFILE_FIELD = "ownerProfile"


class QueryPlanSelector:
    """Pure function of the FilterSpec (plus resolved category ids)."""

    def __init__(self, filter_builder: AdvertisementFilterBuilder | None = None) -> None:
        self._filters = filter_builder or AdvertisementFilterBuilder()

    @staticmethod
    def join_reasons(spec: FilterSpec) -> list[str]:
        reasons: list[str] = []
        if spec.has_portfolio is not None:
            reasons.append(RULE_JOIN_PORTFOLIO)
        if spec.languages:
            reasons.append(RULE_JOIN_LANGUAGES)
        if spec.author_rating.is_set:
            reasons.append(RULE_JOIN_AUTHOR_RATING)
        return reasons

    @staticmethod
    def sort_keys(spec: FilterSpec) -> list[SortKey]:
        return [
            SortKey(field=spec.sort_by, descending=spec.sort_order is SortOrder.desc),
            SortKey(field="_id", descending=False),
        ]

    def select(self, spec: FilterSpec, category_ids: Sequence[str]) -> QueryPlan:
        base = self._filters.base_filter(spec, category_ids)
        geo = self._filters.geo_filter(spec)
        page = PageRequest(page=spec.page, limit=spec.limit)
        sort = self.sort_keys(spec)
        reasons = self.join_reasons(spec)

        if not reasons:
            predicate = base.extended(geo) if geo is not None else base
            return SimplePlan(predicate=predicate, sort=sort, page=page, reasons=[RULE_SIMPLE_DEFAULT])

        return JoinedPlan(
            match_stages=[MatchStage(filter=base)],
            post_join_stages=self._post_join_stages(spec, geo),
            sort=sort,
            page=page,
            reasons=reasons,
        )

    def _post_join_stages(self, spec: FilterSpec, geo: FieldFilter | None) -> list[Stage]:
        stages: list[Stage] = []

        if spec.has_portfolio is not None or spec.languages:
            stages.append(
                LookupStage(
                    source=Collection.profiles,
                    local_field="profileId",
                    as_field=PROFILE_FIELD,
                )
            )
            if spec.has_portfolio is TriState.true:
                stages.append(_match(FieldFilter(field=f"{PROFILE_FIELD}.portfolio", op=FilterOp.non_empty)))
            elif spec.has_portfolio is TriState.false:
                stages.append(_match(FieldFilter(field=f"{PROFILE_FIELD}.portfolio", op=FilterOp.empty)))
            if spec.languages:
                stages.append(
                    _match(
                        FieldFilter(
                            field=f"{PROFILE_FIELD}.languages.language",
                            op=FilterOp.iequals_any,
                            value=list(spec.languages),
                        )
                    )
                )

        if spec.author_rating.is_set:
            stages.append(
                LookupStage(
                    source=Collection.profiles,
                    local_field="ownerId",
                    foreign_field="user",
                    as_field=OWNER_PROFILE_FIELD,
                )
            )
            stages.append(_match(*range_filters(f"{OWNER_PROFILE_FIELD}.rating.average", spec.author_rating)))

        if geo is not None:
            stages.append(_match(geo))
        return stages


def _match(*conditions: FieldFilter) -> MatchStage:
    return MatchStage(filter=DocumentFilter(must=list(conditions)))
