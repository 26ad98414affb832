"""Adapter: MongoDB-backed store implementing both store ports."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, GEOSPHERE, MongoClient, ReplaceOne
from pymongo.collection import Collection as MongoCollection
from pymongo.errors import PyMongoError

from ..config.runtime import RuntimeSettings
from ..domain.errors import UpstreamFailure
from ..domain.filters import DocumentFilter, FieldFilter, FilterOp
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

_LOGGER = logging.getLogger(__name__)

# Fields holding references; 24-hex strings in them are stored as ObjectIds
ID_FIELDS = frozenset({"_id", "ownerId", "profileId", "categoryId", "tags", "parentId", "user"})
_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def to_object_id(value: Any) -> Any:
    if isinstance(value, str) and _OBJECT_ID_RE.match(value):
        return ObjectId(value)
    return value


def coerce_ids(field: str, value: Any) -> Any:
    """Convert id-looking strings for reference fields; leave everything else alone."""
    if field.rsplit(".", 1)[-1] not in ID_FIELDS:
        return value
    if isinstance(value, (list, tuple)):
        return [to_object_id(v) for v in value]
    return to_object_id(value)


def stringify_ids(value: Any) -> Any:
    """Recursively turn ObjectIds back into strings for the service layer."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: stringify_ids(v) for k, v in value.items()}
    if isinstance(value, list):
        return [stringify_ids(v) for v in value]
    return value


def to_bson_document(doc: dict[str, Any]) -> dict[str, Any]:
    """Fixture document -> stored form (ObjectIds for reference fields)."""
    return {k: coerce_ids(k, v) for k, v in doc.items()}


class MongoDocumentStore:
    """Concrete AdvertisementStorePort and ReferenceStorePort backed by MongoDB."""

    def __init__(self, settings: RuntimeSettings, client: MongoClient | None = None) -> None:
        self._settings = settings
        self._client = client

    def _get_client(self) -> MongoClient:
        if self._client is None:
            timeout_ms = self._settings.request_timeout_ms
            self._client = MongoClient(
                self._settings.mongo_uri,
                tz_aware=True,
                serverSelectionTimeoutMS=timeout_ms,
                socketTimeoutMS=timeout_ms,
            )
        return self._client

    def collection_name(self, collection: Collection) -> str:
        s = self._settings
        return {
            Collection.advertisements: s.advertisements_collection,
            Collection.profiles: s.profiles_collection,
            Collection.users: s.users_collection,
            Collection.categories: s.categories_collection,
            Collection.tags: s.tags_collection,
        }[collection]

    def _collection(self, collection: Collection) -> MongoCollection:
        return self._get_client()[self._settings.mongo_database][self.collection_name(collection)]

    @contextmanager
    def _upstream(self, operation: str) -> Iterator[None]:
        try:
            yield
        except PyMongoError as e:
            _LOGGER.error("store_operation_failed", extra={"operation": operation, "error": str(e)})
            raise UpstreamFailure(operation, str(e)) from e

    # ------------------------------------------------------------------
    # Advertisement reads
    # ------------------------------------------------------------------

    def find(
        self,
        query: DocumentFilter,
        sort: Sequence[SortKey],
        skip: int,
        limit: int,
    ) -> list[dict]:
        with self._upstream("find"):
            cursor = self._collection(Collection.advertisements).find(
                self.translate_filter(query),
                sort=self.translate_sort(sort),
                skip=skip,
                limit=limit,
            )
            return [stringify_ids(doc) for doc in cursor]

    def count(self, query: DocumentFilter) -> int:
        with self._upstream("count"):
            return self._collection(Collection.advertisements).count_documents(self.translate_filter(query))

    def aggregate(self, stages: Sequence[Stage]) -> list[dict]:
        with self._upstream("aggregate"):
            cursor = self._collection(Collection.advertisements).aggregate(self.translate_pipeline(stages))
            return [stringify_ids(doc) for doc in cursor]

    def count_aggregate(self, stages: Sequence[Stage]) -> int:
        pipeline = self.translate_pipeline(stages) + [{"$count": "total"}]
        with self._upstream("count_aggregate"):
            result = list(self._collection(Collection.advertisements).aggregate(pipeline))
        return int(result[0]["total"]) if result else 0

    def ping(self) -> bool:
        try:
            self._get_client().admin.command("ping")
            return True
        except PyMongoError as e:
            _LOGGER.warning("store_ping_failed", extra={"error": str(e)})
            return False

    # ------------------------------------------------------------------
    # Reference reads
    # ------------------------------------------------------------------

    def _by_field(self, collection: Collection, field: str, ids: Iterable[str]) -> list[dict]:
        values = coerce_ids(field, list(dict.fromkeys(ids)))
        if not values:
            return []
        with self._upstream(f"{collection.value}_lookup"):
            cursor = self._collection(collection).find({field: {"$in": values}})
            return [stringify_ids(doc) for doc in cursor]

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

    # ------------------------------------------------------------------
    # Maintenance (CLI)
    # ------------------------------------------------------------------

    def ensure_indexes(self) -> list[str]:
        """Create the indexes the search paths rely on. Idempotent."""
        ads = self._collection(Collection.advertisements)
        created: list[str] = []
        with self._upstream("ensure_indexes"):
            created.append(ads.create_index([("coordinates", GEOSPHERE)]))
            for field in ("categoryId", "tags", "ownerId", "profileId", "type"):
                created.append(ads.create_index([(field, ASCENDING)]))
            created.append(ads.create_index([("isActive", ASCENDING), ("isArchived", ASCENDING)]))
            created.append(ads.create_index([("createdAt", DESCENDING)]))
            created.append(self._collection(Collection.categories).create_index([("parentId", ASCENDING)]))
            created.append(self._collection(Collection.profiles).create_index([("user", ASCENDING)], unique=True))
        return created

    def seed(self, fixtures: dict[Collection, list[dict[str, Any]]]) -> dict[str, int]:
        """Upsert fixture documents by ``_id``. Returns written counts per collection."""
        counts: dict[str, int] = {}
        for collection, docs in fixtures.items():
            if not docs:
                continue
            ops = [ReplaceOne({"_id": to_object_id(d["_id"])}, to_bson_document(d), upsert=True) for d in docs]
            with self._upstream(f"seed_{collection.value}"):
                result = self._collection(collection).bulk_write(ops, ordered=False)
            counts[collection.value] = result.upserted_count + result.matched_count
        return counts

    # ------------------------------------------------------------------
    # Translation: typed filters and stages -> MQL
    # ------------------------------------------------------------------

    @staticmethod
    def translate_filter(df: DocumentFilter) -> dict:
        clauses = [MongoDocumentStore.translate_condition(c) for c in df.must]
        if df.should:
            clauses.append({"$or": [MongoDocumentStore.translate_condition(c) for c in df.should]})
        return MongoDocumentStore._merge_clauses(clauses)

    @staticmethod
    def _merge_clauses(clauses: list[dict]) -> dict:
        """Fold clauses into one query document; colliding keys go under ``$and``."""
        merged: dict[str, Any] = {}
        overflow: list[dict] = []
        for clause in clauses:
            for key, value in clause.items():
                if key not in merged:
                    merged[key] = value
                    continue
                existing = merged[key]
                if (
                    isinstance(existing, dict)
                    and isinstance(value, dict)
                    and all(k.startswith("$") for k in [*existing, *value])
                    and not existing.keys() & value.keys()
                ):
                    merged[key] = {**existing, **value}
                else:
                    overflow.append({key: value})
        if overflow:
            merged.setdefault("$and", [])
            merged["$and"] = [*merged["$and"], *overflow]
        return merged

    @staticmethod
    def translate_condition(f: FieldFilter) -> dict:
        field = f.field
        value = coerce_ids(field, f.value)
        if f.op == FilterOp.equals:
            return {field: value}
        elif f.op == FilterOp.not_equals:
            return {field: {"$ne": value}}
        elif f.op == FilterOp.any_of:
            return {field: {"$in": value if isinstance(value, list) else [value]}}
        elif f.op == FilterOp.all_of:
            return {field: {"$all": value if isinstance(value, list) else [value]}}
        elif f.op == FilterOp.gte:
            return {field: {"$gte": value}}
        elif f.op == FilterOp.lte:
            return {field: {"$lte": value}}
        elif f.op == FilterOp.contains:
            return {field: {"$regex": re.escape(value), "$options": "i"}}
        elif f.op == FilterOp.iequals_any:
            values = value if isinstance(value, list) else [value]
            return {field: {"$in": [re.compile(f"^{re.escape(v)}$", re.IGNORECASE) for v in values]}}
        elif f.op == FilterOp.non_empty:
            return {f"{field}.0": {"$exists": True}}
        elif f.op == FilterOp.empty:
            # {field: None} also matches a missing field
            return {"$or": [{field: None}, {field: {"$size": 0}}]}
        elif f.op == FilterOp.geo_within:
            circle = value
            return {
                field: {
                    "$geoWithin": {
                        "$centerSphere": [[circle.longitude, circle.latitude], circle.radius_radians]
                    }
                }
            }
        else:
            raise ValueError(f"Unsupported filter op: {f.op}")

    @staticmethod
    def translate_sort(keys: Sequence[SortKey]) -> list[tuple[str, int]]:
        return [(k.field, DESCENDING if k.descending else ASCENDING) for k in keys]

    def translate_stage(self, stage: Stage) -> list[dict]:
        if isinstance(stage, MatchStage):
            return [{"$match": self.translate_filter(stage.filter)}]
        if isinstance(stage, LookupStage):
            out: list[dict] = [
                {
                    "$lookup": {
                        "from": self.collection_name(stage.source),
                        "localField": stage.local_field,
                        "foreignField": stage.foreign_field,
                        "as": stage.as_field,
                    }
                }
            ]
            if stage.unwind:
                out.append({"$unwind": {"path": f"${stage.as_field}", "preserveNullAndEmptyArrays": True}})
            return out
        if isinstance(stage, SortStage):
            return [{"$sort": dict(self.translate_sort(stage.keys))}]
        if isinstance(stage, SkipStage):
            return [{"$skip": stage.count}]
        if isinstance(stage, LimitStage):
            return [{"$limit": stage.count}]
        raise ValueError(f"Unsupported stage: {stage!r}")

    def translate_pipeline(self, stages: Sequence[Stage]) -> list[dict]:
        pipeline: list[dict] = []
        for stage in stages:
            pipeline.extend(self.translate_stage(stage))
        return pipeline
