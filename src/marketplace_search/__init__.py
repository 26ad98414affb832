"""Marketplace advertisement search package."""

from .models import AdvertisementView, PaginationInfo, SearchResponse

__version__ = "0.1.0"
__all__ = [
    "AdvertisementView",
    "PaginationInfo",
    "SearchResponse",
]
