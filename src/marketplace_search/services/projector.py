"""ResultProjector: raw advertisement document -> AdvertisementView."""

from __future__ import annotations

from typing import Any

from ..domain.geo import point_of
from ..models.documents import Rating, UserSummary
from ..models.responses import (
    AdvertisementView,
    CategorySummary,
    OwnerSummary,
    ProfileSummary,
    TagSummary,
)
from .executors import CATEGORY_KEY, OWNER_KEY, PROFILE_KEY, PROFILE_USER_KEY, TAGS_KEY


def _full_name(user: dict[str, Any] | None) -> str:
    if not user:
        return ""
    return UserSummary.model_validate(user).full_name


class ResultProjector:
    """Shape documents from either plan into the same external representation."""

    def project(self, doc: dict[str, Any]) -> AdvertisementView:
        owner = doc.get(OWNER_KEY)
        category = doc.get(CATEGORY_KEY)
        profile = doc.get(PROFILE_KEY)

        tag_docs = {str(t["_id"]): t for t in doc.get(TAGS_KEY) or []}
        tags = [
            TagSummary(id=tid, name=tag_docs[tid].get("name", ""))
            for tid in dict.fromkeys(map(str, doc.get("tags") or []))
            if tid in tag_docs
        ]
        point = point_of(doc.get("coordinates"))

        return AdvertisementView(
            id=str(doc["_id"]),
            title=doc.get("title", ""),
            description=doc.get("description", ""),
            type=doc.get("type", ""),
            owner=OwnerSummary(id=str(owner["_id"]), name=_full_name(owner), email=owner.get("email"))
            if owner else None,
            category=CategorySummary(
                id=str(category["_id"]),
                name=category.get("name", ""),
                description=category.get("description"),
            )
            if category else None,
            tags=tags,
            profile=ProfileSummary(id=str(profile["_id"]), name=_full_name(doc.get(PROFILE_USER_KEY)))
            if profile else None,
            exchange_preferences=doc.get("exchangePreferences"),
            location=doc.get("location"),
            coordinates=list(point) if point else None,
            is_active=doc.get("isActive", True),
            is_archived=doc.get("isArchived", False),
            is_urgent=doc.get("isUrgent", False),
            views=doc.get("views", 0),
            application_count=doc.get("applicationCount", 0),
            rating=Rating.model_validate(doc.get("rating") or {}),
            expires_at=doc.get("expiresAt"),
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
        )
