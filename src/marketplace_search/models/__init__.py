"""Stored document schemas and search response DTOs."""

from .documents import (
    Advertisement,
    AdvertisementType,
    Category,
    GeoPoint,
    LanguageEntry,
    PortfolioEntry,
    Profile,
    Rating,
    Tag,
    UserSummary,
)
from .responses import (
    AdvertisementView,
    CategorySummary,
    OwnerSummary,
    PaginationInfo,
    ProfileSummary,
    SearchResponse,
    TagSummary,
)

__all__ = [
    # Documents
    "Advertisement",
    "AdvertisementType",
    "Category",
    "GeoPoint",
    "LanguageEntry",
    "PortfolioEntry",
    "Profile",
    "Rating",
    "Tag",
    "UserSummary",
    # Responses
    "AdvertisementView",
    "CategorySummary",
    "OwnerSummary",
    "PaginationInfo",
    "ProfileSummary",
    "SearchResponse",
    "TagSummary",
]
