"""Adapter: in-process document store over fixture data.

Evaluates the same typed filters and pipeline stages the Mongo adapter
translates, with Mongo's reading of dotted paths (arrays are traversed and
an array field matches when any element does). Used for local development
(``STORE_BACKEND=memory``) and in tests.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from ..domain.filters import DocumentFilter, FieldFilter, FilterOp
from ..domain.geo import point_of
from ..domain.query_plan import (
    Collection,
    LimitStage,
    LookupStage,
    MatchStage,
    SkipStage,
    SortKey,
    SortStage,
    Stage,
)
from .fixtures import load_fixtures, parse_dates


def resolve_path(doc: Any, path: str) -> list[Any]:
    """All values reachable at ``path``; empty when the path is missing."""
    values = [doc]
    for part in path.split("."):
        found: list[Any] = []
        for value in values:
            if isinstance(value, dict):
                if part in value:
                    found.append(value[part])
            elif isinstance(value, list):
                if part.isdigit():
                    index = int(part)
                    if index < len(value):
                        found.append(value[index])
                else:
                    found.extend(item[part] for item in value if isinstance(item, dict) and part in item)
        values = found
    return values


def _flatten(values: list[Any]) -> list[Any]:
    """Values plus the elements of array values (Mongo equality semantics)."""
    out: list[Any] = []
    for value in values:
        out.append(value)
        if isinstance(value, list):
            out.extend(value)
    return out


def _comparable(a: Any, b: Any) -> bool:
    if isinstance(a, bool) or isinstance(b, bool):
        return False
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return True
    return type(a) is type(b) or (isinstance(a, datetime) and isinstance(b, datetime))


def matches_condition(doc: Mapping[str, Any], f: FieldFilter) -> bool:
    values = resolve_path(doc, f.field)
    candidates = _flatten(values)
    if f.op == FilterOp.equals:
        return f.value in candidates
    elif f.op == FilterOp.not_equals:
        return f.value not in candidates
    elif f.op == FilterOp.any_of:
        wanted = f.value if isinstance(f.value, list) else [f.value]
        return any(c in wanted for c in candidates)
    elif f.op == FilterOp.all_of:
        wanted = f.value if isinstance(f.value, list) else [f.value]
        return bool(wanted) and all(w in candidates for w in wanted)
    elif f.op == FilterOp.gte:
        return any(_comparable(c, f.value) and c >= f.value for c in candidates)
    elif f.op == FilterOp.lte:
        return any(_comparable(c, f.value) and c <= f.value for c in candidates)
    elif f.op == FilterOp.contains:
        needle = str(f.value).lower()
        return any(isinstance(c, str) and needle in c.lower() for c in candidates)
    elif f.op == FilterOp.iequals_any:
        wanted = {v.lower() for v in (f.value if isinstance(f.value, list) else [f.value])}
        return any(isinstance(c, str) and c.lower() in wanted for c in candidates)
    elif f.op == FilterOp.non_empty:
        return any(isinstance(v, list) and len(v) > 0 for v in values)
    elif f.op == FilterOp.empty:
        return all(v is None or v == [] for v in values)
    elif f.op == FilterOp.geo_within:
        for value in values:
            point = point_of(value)
            if point is not None and f.value.contains(*point):
                return True
        return False
    else:
        raise ValueError(f"Unsupported filter op: {f.op}")


def matches(doc: Mapping[str, Any], df: DocumentFilter) -> bool:
    if not all(matches_condition(doc, c) for c in df.must):
        return False
    return not df.should or any(matches_condition(doc, c) for c in df.should)


def _sort_value(value: Any) -> tuple:
    # BSON comparison order: null < numbers < strings < objects/arrays < booleans < dates
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (5, value)
    if isinstance(value, (int, float)):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    if isinstance(value, datetime):
        return (6, value.timestamp())
    return (3, str(value))


def sort_documents(docs: list[dict], keys: Sequence[SortKey]) -> list[dict]:
    out = list(docs)
    for key in reversed(keys):
        out.sort(
            key=lambda d, k=key: _sort_value(next(iter(resolve_path(d, k.field)), None)),
            reverse=key.descending,
        )
    return out


class InMemoryDocumentStore:
    """AdvertisementStorePort and ReferenceStorePort over in-process documents."""

    def __init__(self, collections: Mapping[Collection | str, Iterable[dict]] | None = None) -> None:
        self._data: dict[Collection, list[dict]] = {c: [] for c in Collection}
        for name, docs in (collections or {}).items():
            self._data[Collection(name)] = [parse_dates(d) for d in docs]

    @classmethod
    def from_file(cls, path: Path) -> InMemoryDocumentStore:
        return cls(load_fixtures(path))

    def insert(self, collection: Collection | str, *docs: dict) -> None:
        self._data[Collection(collection)].extend(parse_dates(d) for d in docs)

    # ------------------------------------------------------------------
    # Advertisement reads
    # ------------------------------------------------------------------

    def _filtered(self, query: DocumentFilter) -> list[dict]:
        return [d for d in self._data[Collection.advertisements] if matches(d, query)]

    def find(
        self,
        query: DocumentFilter,
        sort: Sequence[SortKey],
        skip: int,
        limit: int,
    ) -> list[dict]:
        rows = sort_documents(self._filtered(query), sort)
        return copy.deepcopy(rows[skip:skip + limit])

    def count(self, query: DocumentFilter) -> int:
        return len(self._filtered(query))

    def aggregate(self, stages: Sequence[Stage]) -> list[dict]:
        rows = list(self._data[Collection.advertisements])
        for stage in stages:
            rows = self._apply_stage(rows, stage)
        return copy.deepcopy(rows)

    def count_aggregate(self, stages: Sequence[Stage]) -> int:
        return len(self.aggregate(stages))

    def ping(self) -> bool:
        return True

    def _apply_stage(self, rows: list[dict], stage: Stage) -> list[dict]:
        if isinstance(stage, MatchStage):
            return [r for r in rows if matches(r, stage.filter)]
        if isinstance(stage, LookupStage):
            return self._lookup(rows, stage)
        if isinstance(stage, SortStage):
            return sort_documents(rows, stage.keys)
        if isinstance(stage, SkipStage):
            return rows[stage.count:]
        if isinstance(stage, LimitStage):
            return rows[:stage.count]
        raise ValueError(f"Unsupported stage: {stage!r}")

    def _lookup(self, rows: list[dict], stage: LookupStage) -> list[dict]:
        foreign = self._data[stage.source]
        out: list[dict] = []
        for row in rows:
            local = _flatten(resolve_path(row, stage.local_field))
            joined = [
                f for f in foreign
                if any(v in local for v in _flatten(resolve_path(f, stage.foreign_field)))
            ]
            if not stage.unwind:
                out.append({**row, stage.as_field: joined})
            elif not joined:
                # unwind keeps the row, without the field
                out.append({k: v for k, v in row.items() if k != stage.as_field})
            else:
                out.extend({**row, stage.as_field: j} for j in joined)
        return out

    # ------------------------------------------------------------------
    # Reference reads
    # ------------------------------------------------------------------

    def _by_field(self, collection: Collection, field: str, ids: Iterable[str]) -> list[dict]:
        wanted = set(ids)
        if not wanted:
            return []
        return copy.deepcopy([d for d in self._data[collection] if d.get(field) in wanted])

    def categories_by_parent(self, parent_ids: Iterable[str]) -> list[dict]:
        return self._by_field(Collection.categories, "parentId", parent_ids)

    def categories_by_ids(self, ids: Iterable[str]) -> list[dict]:
        return self._by_field(Collection.categories, "_id", ids)

    def users_by_ids(self, ids: Iterable[str]) -> list[dict]:
        return self._by_field(Collection.users, "_id", ids)

    def tags_by_ids(self, ids: Iterable[str]) -> list[dict]:
        return self._by_field(Collection.tags, "_id", ids)

    def profiles_by_ids(self, ids: Iterable[str]) -> list[dict]:
        return self._by_field(Collection.profiles, "_id", ids)
