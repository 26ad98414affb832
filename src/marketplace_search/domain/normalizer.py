"""FilterSpecNormalizer: raw query parameters -> validated FilterSpec.

Input values are strings, lists of strings or absent. Malformed semantic
filters raise ``InvalidParameter``, and so does a blank value for a number,
date, flag or enum; blank free text and ids count as absent. Paging values
degrade gracefully: bad values fall back to defaults and out-of-range values
are clamped, the page so that its skip still fits a BSON int64. Parameters
this engine does not know are ignored.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from .errors import InvalidParameter
from .filter_spec import (
    SORTABLE_FIELDS,
    DateRange,
    FilterSpec,
    NumericRange,
    SortOrder,
    TagOperator,
    TriState,
)
from ..models.documents import AdvertisementType

MAX_SEARCH_LENGTH = 100
MAX_LOCATION_LENGTH = 100
MAX_LANGUAGE_LENGTH = 50
RATING_BOUNDS = (0.0, 5.0)
# Largest skip a BSON int64 can carry.
MAX_SKIP = 2**63 - 1

_TRUE_FALSE = {"true": True, "false": False}


class FilterSpecNormalizer:
    """Single validating parse step shared by every search entry point."""

    def __init__(
        self,
        default_limit: int = 10,
        max_limit: int = 100,
        default_max_distance_m: float = 10_000.0,
    ) -> None:
        self._default_limit = default_limit
        self._max_limit = max_limit
        self._default_max_distance = default_max_distance_m

    def normalize(
        self,
        params: Mapping[str, Any],
        *,
        implicit_active_default: bool = True,
    ) -> FilterSpec:
        p = _Params(params)

        is_active = p.tristate("isActive")
        is_archived = p.tristate("isArchived")
        if is_active is None:
            if implicit_active_default and is_archived is not TriState.any:
                is_active = TriState.true
            else:
                is_active = TriState.any

        longitude = p.number("longitude", low=-180.0, high=180.0)
        latitude = p.number("latitude", low=-90.0, high=90.0)
        max_distance = p.number("maxDistance", low=0.0)
        limit = p.clamped_int("limit", default=self._default_limit, low=1, high=self._max_limit)

        return FilterSpec(
            search=p.text("search", MAX_SEARCH_LENGTH),
            type=p.enum("type", AdvertisementType),
            category_ids=p.ids("categoryId"),
            include_subcategories=bool(p.boolean("includeSubcategories")),
            tag_ids=p.ids("tagId"),
            tag_operator=p.enum("tagOperator", TagOperator) or TagOperator.any,
            location=p.text("location", MAX_LOCATION_LENGTH),
            is_urgent=p.boolean("isUrgent"),
            is_active=is_active,
            is_archived=is_archived or TriState.any,
            owner_id=p.scalar("ownerId"),
            profile_id=p.scalar("profileId"),
            rating=p.numeric_range("minRating", "maxRating", *RATING_BOUNDS),
            views=p.numeric_range("minViews", "maxViews", 0.0),
            applications=p.numeric_range("minApplications", "maxApplications", 0.0),
            author_rating=p.numeric_range("minAuthorRating", "maxAuthorRating", *RATING_BOUNDS),
            expires=p.date_range("expiresAfter", "expiresBefore"),
            created=p.date_range("minCreatedAt", "maxCreatedAt"),
            longitude=longitude,
            latitude=latitude,
            max_distance=self._default_max_distance if max_distance is None else max_distance,
            has_portfolio=p.tristate("hasPortfolio"),
            languages=p.languages("languages"),
            page=p.clamped_int("page", default=1, low=1, high=MAX_SKIP // limit + 1),
            limit=limit,
            sort_by=p.sort_field("sortBy"),
            sort_order=p.enum("sortOrder", SortOrder) or SortOrder.desc,
        )


class _Params:
    """Accessors over the raw mapping; each one raises InvalidParameter on bad input."""

    def __init__(self, raw: Mapping[str, Any]) -> None:
        self._raw = raw

    def values(self, name: str) -> list[str]:
        """All non-empty values for ``name`` as stripped strings."""
        raw = self._raw.get(name)
        if raw is None:
            return []
        items = raw if isinstance(raw, (list, tuple)) else [raw]
        out: list[str] = []
        for item in items:
            if item is None:
                continue
            if isinstance(item, bool):
                item = "true" if item else "false"
            text = str(item).strip()
            if text:
                out.append(text)
        return out

    def scalar(self, name: str) -> str | None:
        values = self.values(name)
        if not values:
            return None
        if len(values) > 1:
            raise InvalidParameter(name, values, "expected a single value")
        return values[0]

    def given(self, name: str) -> str | None:
        """Like ``scalar``, but a key that is present with only blank values is rejected."""
        value = self.scalar(name)
        if value is None and self._raw.get(name) not in (None, [], ()):
            raise InvalidParameter(name, self._raw[name], "must not be empty")
        return value

    def text(self, name: str, max_length: int) -> str | None:
        value = self.scalar(name)
        if value is not None and len(value) > max_length:
            raise InvalidParameter(name, value, f"must be at most {max_length} characters")
        return value

    def ids(self, name: str) -> tuple[str, ...]:
        return tuple(dict.fromkeys(self.values(name)))

    def languages(self, name: str) -> tuple[str, ...]:
        values = self.values(name)
        for value in values:
            if len(value) > MAX_LANGUAGE_LENGTH:
                raise InvalidParameter(name, value, f"each language must be at most {MAX_LANGUAGE_LENGTH} characters")
        return tuple(dict.fromkeys(values))

    def boolean(self, name: str) -> bool | None:
        value = self.given(name)
        if value is None:
            return None
        lowered = value.lower()
        if lowered not in _TRUE_FALSE:
            raise InvalidParameter(name, value, "must be 'true' or 'false'")
        return _TRUE_FALSE[lowered]

    def tristate(self, name: str) -> TriState | None:
        value = self.given(name)
        if value is None:
            return None
        try:
            return TriState(value.lower())
        except ValueError:
            raise InvalidParameter(name, value, "must be 'true', 'false' or 'any'") from None

    def enum(self, name: str, enum_cls: type) -> Any:
        value = self.given(name)
        if value is None:
            return None
        try:
            return enum_cls(value)
        except ValueError:
            allowed = ", ".join(m.value for m in enum_cls)
            raise InvalidParameter(name, value, f"must be one of: {allowed}") from None

    def number(self, name: str, low: float | None = None, high: float | None = None) -> float | None:
        value = self.given(name)
        if value is None:
            return None
        try:
            number = float(value)
        except ValueError:
            raise InvalidParameter(name, value, "must be a number") from None
        if math.isnan(number) or math.isinf(number):
            raise InvalidParameter(name, value, "must be a finite number")
        if low is not None and number < low:
            raise InvalidParameter(name, value, f"must be >= {low:g}")
        if high is not None and number > high:
            raise InvalidParameter(name, value, f"must be <= {high:g}")
        return number

    def numeric_range(
        self,
        min_name: str,
        max_name: str,
        low: float | None = None,
        high: float | None = None,
    ) -> NumericRange:
        lo = self.number(min_name, low, high)
        hi = self.number(max_name, low, high)
        if lo is not None and hi is not None and lo > hi:
            raise InvalidParameter(min_name, lo, f"must not exceed {max_name} ({hi:g})")
        return NumericRange(min=lo, max=hi)

    def date(self, name: str) -> datetime | None:
        value = self.given(name)
        if value is None:
            return None
        return parse_instant(name, value)

    def date_range(self, after_name: str, before_name: str) -> DateRange:
        after = self.date(after_name)
        before = self.date(before_name)
        if after is not None and before is not None and after > before:
            raise InvalidParameter(after_name, after.isoformat(), f"must not be later than {before_name}")
        return DateRange(after=after, before=before)

    def clamped_int(self, name: str, default: int, low: int, high: int | None = None) -> int:
        values = self.values(name)
        try:
            number = int(float(values[0])) if values else default
        except (ValueError, OverflowError):
            number = default
        number = max(low, number)
        if high is not None:
            number = min(high, number)
        return number

    def sort_field(self, name: str) -> str:
        value = self.given(name)
        if value is None:
            return "createdAt"
        if value not in SORTABLE_FIELDS:
            raise InvalidParameter(name, value, f"must be one of: {', '.join(SORTABLE_FIELDS)}")
        return value


def parse_instant(name: str, value: str) -> datetime:
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC."""
    text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidParameter(name, value, "must be an ISO-8601 date or datetime") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
