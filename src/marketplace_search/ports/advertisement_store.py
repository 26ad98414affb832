"""Port: document store for advertisement reads."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ..domain.filters import DocumentFilter
from ..domain.query_plan import SortKey, Stage


@runtime_checkable
class AdvertisementStorePort(Protocol):
    """Read-only interface over the advertisements collection.

    ``find``/``count`` serve the simple plan; ``aggregate``/``count_aggregate``
    serve the joined plan. Returned documents are plain dicts with string ids.
    """

    # --- simple plan ---

    def find(
        self,
        query: DocumentFilter,
        sort: Sequence[SortKey],
        skip: int,
        limit: int,
    ) -> list[dict]: ...

    def count(self, query: DocumentFilter) -> int: ...

    # --- joined plan ---

    def aggregate(self, stages: Sequence[Stage]) -> list[dict]: ...

    def count_aggregate(self, stages: Sequence[Stage]) -> int: ...

    # --- health ---

    def ping(self) -> bool: ...
