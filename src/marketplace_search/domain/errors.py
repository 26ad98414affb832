"""Error taxonomy for the search core.

``InvalidParameter`` is raised before any query executes; ``UpstreamFailure``
wraps store errors and is never retried here.
"""

from __future__ import annotations

from typing import Any


class SearchError(Exception):
    """Base class for search-core errors."""

    code = "search_error"
    status = 500

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": str(self)}


class InvalidParameter(SearchError, ValueError):
    """A query parameter is malformed, out of range or not allow-listed."""

    code = "invalid_parameter"
    status = 400

    def __init__(self, parameter: str, value: Any, reason: str) -> None:
        self.parameter = parameter
        self.value = value
        self.reason = reason
        super().__init__(f"{parameter}: {reason} (got {value!r})")

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "parameter": self.parameter, "message": self.reason}


class UpstreamFailure(SearchError):
    """The document store is unreachable or an operation timed out."""

    code = "upstream_failure"
    status = 503

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: {detail}")
