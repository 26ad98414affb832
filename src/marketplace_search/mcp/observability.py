"""Observability for the MCP data plane: one structured log line per tool call
plus in-process counters reported by ``ads_health``.

Counters:
    tool_calls[tool]      calls per tool, failed ones included
    errors[code]          failed calls per error code (invalid_parameter, upstream_failure)
    empty_results[tool]   successful calls that returned no advertisements
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any

_LOGGER = logging.getLogger("marketplace_search.mcp")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_COUNTERS: dict[str, Counter[str]] = {
    "tool_calls": Counter(),
    "errors": Counter(),
    "empty_results": Counter(),
}


def get_logger() -> logging.Logger:
    return _LOGGER


def configure_logging(level: str = "INFO") -> None:
    """Set the root level and format once, for entry points only."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def log_tool_invocation(
    tool: str,
    latency_ms: float,
    *,
    error_code: str | None = None,
    returned: int | None = None,
    **fields: Any,
) -> None:
    """Log ``tool_invocation`` and bump the counters.

    ``returned`` is the number of advertisements on the page, when the tool
    produces a page at all.
    """
    payload: dict[str, Any] = {"tool": tool, "latency_ms": round(latency_ms, 2), **fields}
    _COUNTERS["tool_calls"][tool] += 1
    if error_code:
        payload["error"] = error_code
        _COUNTERS["errors"][error_code] += 1
        _LOGGER.warning("tool_invocation", extra=payload)
        return
    if returned is not None:
        payload["returned"] = returned
        if returned == 0:
            _COUNTERS["empty_results"][tool] += 1
    _LOGGER.info("tool_invocation", extra=payload)


def metrics_snapshot() -> dict[str, dict[str, int]]:
    return {name: dict(counter) for name, counter in _COUNTERS.items()}


def reset_metrics() -> None:
    for counter in _COUNTERS.values():
        counter.clear()
