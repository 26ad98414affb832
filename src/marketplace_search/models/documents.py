"""Stored document schemas (advertisements and the records they reference).

Field aliases follow the stored camelCase keys; ids are strings on the Python
side (24-hex ObjectIds are converted by the Mongo adapter).
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AdvertisementType(str, Enum):
    service = "service"
    goods = "goods"
    skill = "skill"
    experience = "experience"


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(..., alias="_id", description="Document identifier")


class Rating(BaseModel):
    average: float = Field(default=0.0, ge=0, le=5)
    count: int = Field(default=0, ge=0)


class GeoPoint(BaseModel):
    """GeoJSON point; ``coordinates`` is ``[longitude, latitude]``."""

    type: str = Field(default="Point")
    coordinates: list[float] = Field(..., min_length=2, max_length=2)


class Advertisement(_Document):
    """An advertisement as stored in the advertisements collection."""

    title: str = Field(..., max_length=100)
    description: str = Field(..., max_length=2000)
    owner_id: str = Field(..., alias="ownerId")
    profile_id: str | None = Field(default=None, alias="profileId")
    category_id: str = Field(..., alias="categoryId")
    tags: list[str] = Field(default_factory=list)
    type: AdvertisementType
    exchange_preferences: str | None = Field(default=None, alias="exchangePreferences", max_length=500)
    location: str | None = Field(default=None, max_length=100)
    coordinates: GeoPoint | None = None
    is_active: bool = Field(default=True, alias="isActive")
    is_archived: bool = Field(default=False, alias="isArchived")
    is_hidden: bool = Field(default=False, alias="isHidden")
    views: int = Field(default=0, ge=0)
    application_count: int = Field(default=0, ge=0, alias="applicationCount")
    rating: Rating = Field(default_factory=Rating)
    is_urgent: bool = Field(default=False, alias="isUrgent")
    expires_at: datetime | None = Field(default=None, alias="expiresAt")
    search_vector: str | None = Field(default=None, alias="searchVector")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    def build_search_vector(self, tag_names: list[str] | None = None) -> str:
        """Concatenate the searchable text fields plus tag names."""
        parts = [self.title, self.description, self.exchange_preferences or "", self.location or ""]
        text = " ".join(p for p in parts if p)
        if tag_names:
            text = f"{text} {' '.join(tag_names)}"
        return text


class Category(_Document):
    name: str
    description: str | None = None
    parent_id: str | None = Field(default=None, alias="parentId")
    level: int = Field(default=0, ge=0)


class Tag(_Document):
    name: str
    is_active: bool = Field(default=True, alias="isActive")


class LanguageEntry(BaseModel):
    language: str
    level: str = "intermediate"


class PortfolioEntry(BaseModel):
    title: str
    description: str | None = None
    url: str | None = None


class Profile(_Document):
    """A user's public profile; ``user`` references the owning user."""

    user_id: str = Field(..., alias="user")
    bio: str | None = None
    location: str | None = None
    languages: list[LanguageEntry] = Field(default_factory=list)
    portfolio: list[PortfolioEntry] = Field(default_factory=list)
    rating: Rating = Field(default_factory=Rating)


class UserSummary(_Document):
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    email: str | None = None

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)
