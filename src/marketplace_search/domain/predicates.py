"""AdvertisementFilterBuilder: FilterSpec -> typed single-document predicates.

Both plans take their base predicate from here, so predicate construction
exists exactly once.
"""

from __future__ import annotations

from collections.abc import Sequence

from .filter_spec import DateRange, FilterSpec, NumericRange, TriState
from .filters import DocumentFilter, FieldFilter, FilterOp
from .geo import GeoPredicateBuilder
from .tag_resolver import TagSetResolver

SEARCH_FIELDS = ("title", "description", "exchangePreferences", "location", "searchVector")


def range_filters(field: str, bounds: NumericRange | DateRange) -> list[FieldFilter]:
    """``gte``/``lte`` conditions for whichever bounds are set."""
    if isinstance(bounds, NumericRange):
        low, high = bounds.min, bounds.max
    else:
        low, high = bounds.after, bounds.before
    out: list[FieldFilter] = []
    if low is not None:
        out.append(FieldFilter(field=field, op=FilterOp.gte, value=low))
    if high is not None:
        out.append(FieldFilter(field=field, op=FilterOp.lte, value=high))
    return out


class AdvertisementFilterBuilder:
    def __init__(
        self,
        tag_resolver: TagSetResolver | None = None,
        geo_builder: GeoPredicateBuilder | None = None,
    ) -> None:
        self._tags = tag_resolver or TagSetResolver()
        self._geo = geo_builder or GeoPredicateBuilder()

    def base_filter(self, spec: FilterSpec, category_ids: Sequence[str]) -> DocumentFilter:
        """Every predicate that needs neither a join nor geometry."""
        must: list[FieldFilter] = []

        for field, state in (("isActive", spec.is_active), ("isArchived", spec.is_archived)):
            if state is not TriState.any:
                must.append(FieldFilter(field=field, op=FilterOp.equals, value=state.as_bool()))
        # Missing isHidden counts as visible
        must.append(FieldFilter(field="isHidden", op=FilterOp.not_equals, value=True))

        if spec.type is not None:
            must.append(FieldFilter(field="type", op=FilterOp.equals, value=spec.type.value))
        if spec.location:
            must.append(FieldFilter(field="location", op=FilterOp.contains, value=spec.location))
        if spec.is_urgent is not None:
            must.append(FieldFilter(field="isUrgent", op=FilterOp.equals, value=spec.is_urgent))
        if spec.owner_id:
            must.append(FieldFilter(field="ownerId", op=FilterOp.equals, value=spec.owner_id))
        if spec.profile_id:
            must.append(FieldFilter(field="profileId", op=FilterOp.equals, value=spec.profile_id))

        must.extend(range_filters("rating.average", spec.rating))
        must.extend(range_filters("views", spec.views))
        must.extend(range_filters("applicationCount", spec.applications))
        must.extend(range_filters("expiresAt", spec.expires))
        must.extend(range_filters("createdAt", spec.created))

        if category_ids:
            must.append(FieldFilter(field="categoryId", op=FilterOp.any_of, value=list(category_ids)))

        tag_filter = self._tags.build(spec.tag_ids, spec.tag_operator)
        if tag_filter is not None:
            must.append(tag_filter)

        should: list[FieldFilter] = []
        if spec.search:
            should = [FieldFilter(field=f, op=FilterOp.contains, value=spec.search) for f in SEARCH_FIELDS]

        return DocumentFilter(must=must, should=should)

    def geo_filter(self, spec: FilterSpec) -> FieldFilter | None:
        return self._geo.build(spec)
