"""Port: read access to the records advertisements reference."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable


@runtime_checkable
class ReferenceStorePort(Protocol):
    """Batch reads over categories, users, tags and profiles.

    Every method returns plain dicts with a string ``_id``; unknown ids are
    silently absent from the result.
    """

    def categories_by_parent(self, parent_ids: Iterable[str]) -> list[dict]: ...

    def categories_by_ids(self, ids: Iterable[str]) -> list[dict]: ...

    def users_by_ids(self, ids: Iterable[str]) -> list[dict]: ...

    def tags_by_ids(self, ids: Iterable[str]) -> list[dict]: ...

    def profiles_by_ids(self, ids: Iterable[str]) -> list[dict]: ...
