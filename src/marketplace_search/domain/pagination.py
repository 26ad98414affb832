"""Page arithmetic shared by both plan executors."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict

from ..models.responses import PaginationInfo


class PageRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def paginate(request: PageRequest, total: int) -> PaginationInfo:
    """Compute the pagination block from a single ``total``."""
    return PaginationInfo(
        page=request.page,
        limit=request.limit,
        total=total,
        pages=math.ceil(total / request.limit),
        has_next=request.page * request.limit < total,
        has_prev=request.page > 1,
    )
