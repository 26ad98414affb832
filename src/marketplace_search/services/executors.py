"""Plan executors.

Both return raw advertisement documents carrying the same embedded
reference keys (``owner``, ``category``, ``tagDocs``, ``profile``,
``profileUser``), so the projector cannot tell which plan ran.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from ..domain.query_plan import Collection, JoinedPlan, LookupStage, SimplePlan
from ..ports.advertisement_store import AdvertisementStorePort
from ..ports.reference_store import ReferenceStorePort

OWNER_KEY = "owner"
CATEGORY_KEY = "category"
TAGS_KEY = "tagDocs"
PROFILE_KEY = "profile"
PROFILE_USER_KEY = "profileUser"

# Page-only reference resolution for the joined plan; order matters
# (the profile user is read through the joined profile).
REFERENCE_LOOKUPS: tuple[LookupStage, ...] = (
    LookupStage(source=Collection.users, local_field="ownerId", as_field=OWNER_KEY),
    LookupStage(source=Collection.categories, local_field="categoryId", as_field=CATEGORY_KEY),
    LookupStage(source=Collection.tags, local_field="tags", as_field=TAGS_KEY, unwind=False),
    LookupStage(source=Collection.profiles, local_field="profileId", as_field=PROFILE_KEY),
    LookupStage(source=Collection.users, local_field=f"{PROFILE_KEY}.user", as_field=PROFILE_USER_KEY),
)


class PlanResult(BaseModel):
    documents: list[dict[str, Any]] = Field(default_factory=list)
    total: int = Field(..., ge=0)


class SimplePlanExecutor:
    """One filtered read for the page, one count with the identical predicate."""

    def __init__(self, store: AdvertisementStorePort, references: ReferenceStorePort) -> None:
        self._store = store
        self._refs = references

    def execute(self, plan: SimplePlan) -> PlanResult:
        docs = self._store.find(plan.predicate, plan.sort, plan.page.skip, plan.page.limit)
        total = self._store.count(plan.predicate)
        return PlanResult(documents=self.embed_references(docs), total=total)

    def embed_references(self, docs: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Batch-read every reference of the page and embed it under the shared keys."""
        if not docs:
            return []
        profiles = _index(self._refs.profiles_by_ids(_ids(docs, "profileId")))
        user_ids = _ids(docs, "ownerId") + [str(p["user"]) for p in profiles.values() if p.get("user")]
        users = _index(self._refs.users_by_ids(user_ids))
        categories = _index(self._refs.categories_by_ids(_ids(docs, "categoryId")))
        tags = _index(self._refs.tags_by_ids(_ids(docs, "tags")))

        out: list[dict[str, Any]] = []
        for doc in docs:
            row = dict(doc)
            _put(row, OWNER_KEY, users.get(str(doc.get("ownerId"))))
            _put(row, CATEGORY_KEY, categories.get(str(doc.get("categoryId"))))
            row[TAGS_KEY] = [tags[t] for t in map(str, doc.get("tags") or []) if t in tags]
            profile = profiles.get(str(doc.get("profileId")))
            _put(row, PROFILE_KEY, profile)
            if profile is not None:
                _put(row, PROFILE_USER_KEY, users.get(str(profile.get("user"))))
            out.append(row)
        return out


class JoinedPlanExecutor:
    """Page pipeline and its mirror count pipeline, both cut from the plan's filter stages."""

    def __init__(self, store: AdvertisementStorePort) -> None:
        self._store = store

    def execute(self, plan: JoinedPlan) -> PlanResult:
        already_joined = plan.joined_fields
        lookups = [s for s in REFERENCE_LOOKUPS if s.as_field not in already_joined]
        docs = self._store.aggregate(plan.page_stages(lookups))
        total = self._store.count_aggregate(plan.count_stages())
        return PlanResult(documents=docs, total=total)


def _ids(docs: list[dict[str, Any]], field: str) -> list[str]:
    out: dict[str, None] = {}
    for doc in docs:
        value = doc.get(field)
        for item in value if isinstance(value, list) else [value]:
            if item is not None:
                out.setdefault(str(item), None)
    return list(out)


def _index(records: list[dict[str, Any]]) -> dict[str, dict[str, Any]]:
    return {str(r["_id"]): r for r in records}


def _put(row: dict[str, Any], key: str, value: dict[str, Any] | None) -> None:
    if value is None:
        row.pop(key, None)
    else:
        row[key] = value
