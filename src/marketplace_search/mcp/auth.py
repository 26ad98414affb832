"""MCP auth: read-only data scope. Gate and reject unauthorized."""

from __future__ import annotations

import os


def require_data_scope() -> None:
    """Require data (read-only) scope. Raises PermissionError if not allowed."""
    from ..config.runtime import get_settings

    settings = get_settings()
    if not settings.require_data_key:
        return
    if not os.environ.get("MCP_DATA_KEY"):
        raise PermissionError("Data Plane requires MCP_DATA_KEY to be set")
