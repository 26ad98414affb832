"""CategoryHierarchyResolver: category ids -> closed set of ids to match.

Expansion is an iterative breadth-first walk over ``parentId`` links: one
batch read per level, a visited set so cyclic parent graphs terminate, and a
hard depth cap to bound latency.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..ports.reference_store import ReferenceStorePort

_LOGGER = logging.getLogger(__name__)


class CategoryHierarchyResolver:
    def __init__(
        self,
        reference_store: ReferenceStorePort,
        max_depth: int = 32,
        logger: Any = None,
    ) -> None:
        self._store = reference_store
        self._max_depth = max_depth
        self._logger = logger or _LOGGER

    def resolve(self, category_ids: Sequence[str], include_subcategories: bool = False) -> list[str]:
        """Return the ids to match against ``categoryId``, input order first, deduplicated."""
        roots = list(dict.fromkeys(category_ids))
        if not include_subcategories:
            return roots
        result: dict[str, None] = {}
        for root in roots:
            for category_id in self.descendants(root):
                result.setdefault(category_id, None)
        return list(result)

    def descendants(self, root_id: str) -> list[str]:
        """``root_id`` followed by every transitive child, level by level."""
        visited: dict[str, None] = {root_id: None}
        frontier = [root_id]
        depth = 0
        while frontier:
            if depth >= self._max_depth:
                self._logger.warning(
                    "category_depth_cap_reached",
                    extra={"root_id": root_id, "max_depth": self._max_depth, "pending": len(frontier)},
                )
                break
            children = self._store.categories_by_parent(frontier)
            next_frontier: list[str] = []
            for child in children:
                child_id = str(child["_id"])
                if child_id not in visited:
                    visited[child_id] = None
                    next_frontier.append(child_id)
            frontier = next_frontier
            depth += 1
        return list(visited)
