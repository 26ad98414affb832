"""Composition root: single place where all wiring happens.

Call ``build_search_service()`` to get a fully-constructed service with the
store selected by ``RuntimeSettings.store_backend``. No ad-hoc construction
elsewhere.
"""

from __future__ import annotations

import logging

from .adapters.memory_store import InMemoryDocumentStore
from .adapters.mongo_store import MongoDocumentStore
from .config.runtime import RuntimeSettings, StoreBackend, get_settings
from .domain.category_resolver import CategoryHierarchyResolver
from .domain.normalizer import FilterSpecNormalizer
from .services.search_service import SearchService

_LOGGER = logging.getLogger("marketplace_search.search")


def build_store(settings: RuntimeSettings | None = None) -> MongoDocumentStore | InMemoryDocumentStore:
    """Construct the configured document store (serves both store ports)."""
    settings = settings or get_settings()
    if settings.store_backend == StoreBackend.memory:
        return InMemoryDocumentStore.from_file(settings.fixtures_path)
    return MongoDocumentStore(settings)


def build_search_service(
    settings: RuntimeSettings | None = None,
    store: MongoDocumentStore | InMemoryDocumentStore | None = None,
) -> SearchService:
    """Construct a SearchService with real adapters and settings-driven limits."""
    settings = settings or get_settings()
    store = store or build_store(settings)
    return SearchService(
        store=store,
        references=store,
        normalizer=FilterSpecNormalizer(
            default_limit=settings.default_page_limit,
            max_limit=settings.max_page_limit,
            default_max_distance_m=settings.default_max_distance_m,
        ),
        category_resolver=CategoryHierarchyResolver(
            store,
            max_depth=settings.category_max_depth,
            logger=_LOGGER,
        ),
        logger=_LOGGER,
    )
