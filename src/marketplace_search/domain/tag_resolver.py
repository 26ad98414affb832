"""TagSetResolver: tag ids + operator -> set-membership predicate."""

from __future__ import annotations

from collections.abc import Sequence

from .filter_spec import TagOperator
from .filters import FieldFilter, FilterOp

TAG_FIELD = "tags"


class TagSetResolver:
    def build(self, tag_ids: Sequence[str], operator: TagOperator = TagOperator.any) -> FieldFilter | None:
        """Return the tags predicate, or None when no tags were requested.

        A single id always means "contains this tag", whatever the operator.
        """
        ids = list(dict.fromkeys(tag_ids))
        if not ids:
            return None
        if len(ids) == 1 or operator is TagOperator.any:
            return FieldFilter(field=TAG_FIELD, op=FilterOp.any_of, value=ids)
        return FieldFilter(field=TAG_FIELD, op=FilterOp.all_of, value=ids)
