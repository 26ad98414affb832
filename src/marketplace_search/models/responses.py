"""Response DTOs for advertisement search.

Serialized by alias, so the external shape uses camelCase keys.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .documents import Rating


class _Response(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class OwnerSummary(_Response):
    id: str = Field(..., description="User identifier")
    name: str = Field(default="", description="First and last name")
    email: str | None = None


class CategorySummary(_Response):
    id: str
    name: str
    description: str | None = None


class TagSummary(_Response):
    id: str
    name: str


class ProfileSummary(_Response):
    id: str
    name: str = Field(default="", description="Name of the user owning the profile")


class PaginationInfo(_Response):
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    pages: int = Field(..., ge=0)
    has_next: bool = Field(..., alias="hasNext")
    has_prev: bool = Field(..., alias="hasPrev")


class AdvertisementView(_Response):
    """One advertisement with its references embedded."""

    id: str
    title: str
    description: str
    type: str
    owner: OwnerSummary | None = None
    category: CategorySummary | None = None
    tags: list[TagSummary] = Field(default_factory=list)
    profile: ProfileSummary | None = None
    exchange_preferences: str | None = Field(default=None, alias="exchangePreferences")
    location: str | None = None
    coordinates: list[float] | None = Field(default=None, description="[longitude, latitude]")
    is_active: bool = Field(default=True, alias="isActive")
    is_archived: bool = Field(default=False, alias="isArchived")
    is_urgent: bool = Field(default=False, alias="isUrgent")
    views: int = 0
    application_count: int = Field(default=0, alias="applicationCount")
    rating: Rating = Field(default_factory=Rating)
    expires_at: datetime | None = Field(default=None, alias="expiresAt")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


class SearchResponse(_Response):
    data: list[AdvertisementView] = Field(default_factory=list)
    pagination: PaginationInfo
    filters: dict[str, Any] = Field(default_factory=dict, description="Echo of the normalized parameters")

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
