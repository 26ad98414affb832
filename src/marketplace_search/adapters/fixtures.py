"""JSON fixture loading shared by the memory store and the ``seed`` command.

A fixture file is one JSON object keyed by collection name, each holding a
list of documents. Date fields are ISO-8601 strings and are parsed to
timezone-aware datetimes; every record is validated against its schema.
Advertisements without a ``searchVector`` get one built on load.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from ..domain.query_plan import Collection
from ..models.documents import Advertisement, Category, Profile, Tag, UserSummary

DATE_FIELDS = frozenset({"createdAt", "updatedAt", "expiresAt", "archivedAt"})

_SCHEMAS: dict[Collection, type[BaseModel]] = {
    Collection.advertisements: Advertisement,
    Collection.categories: Category,
    Collection.tags: Tag,
    Collection.profiles: Profile,
    Collection.users: UserSummary,
}


class FixtureError(ValueError):
    """The fixture file is missing, malformed or holds an invalid record."""


def parse_dates(doc: dict[str, Any]) -> dict[str, Any]:
    out = dict(doc)
    for key in DATE_FIELDS & out.keys():
        value = out[key]
        if isinstance(value, str):
            text = value[:-1] + "+00:00" if value.endswith("Z") else value
            parsed = datetime.fromisoformat(text)
            out[key] = parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return out


def load_fixtures(path: Path) -> dict[Collection, list[dict[str, Any]]]:
    """Read, validate and date-parse a fixture file. Unknown top-level keys are rejected."""
    if not path.exists():
        raise FixtureError(f"fixture file not found: {path}")
    with open(path, encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise FixtureError(f"invalid JSON in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise FixtureError("fixture file must contain a JSON object keyed by collection name")

    out: dict[Collection, list[dict[str, Any]]] = {c: [] for c in Collection}
    for name, records in raw.items():
        try:
            collection = Collection(name)
        except ValueError:
            raise FixtureError(f"unknown collection {name!r} in {path}") from None
        if not isinstance(records, list):
            raise FixtureError(f"{name} must be a list of documents")
        schema = _SCHEMAS[collection]
        for i, record in enumerate(records):
            try:
                schema.model_validate(record)
            except ValidationError as e:
                raise FixtureError(f"invalid {name} record at index {i}: {e}") from e
            out[collection].append(parse_dates(record))
    return with_search_vectors(out)


def with_search_vectors(fixtures: dict[Collection, list[dict[str, Any]]]) -> dict[Collection, list[dict[str, Any]]]:
    """Fill ``searchVector`` for advertisements that lack one (text fields plus tag names)."""
    tag_names = {str(t["_id"]): t.get("name", "") for t in fixtures.get(Collection.tags, [])}
    ads: list[dict[str, Any]] = []
    for doc in fixtures.get(Collection.advertisements, []):
        if not doc.get("searchVector"):
            names = [tag_names[t] for t in map(str, doc.get("tags") or []) if t in tag_names]
            doc = {**doc, "searchVector": Advertisement.model_validate(doc).build_search_vector(names)}
        ads.append(doc)
    return {**fixtures, Collection.advertisements: ads}
