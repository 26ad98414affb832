"""Configuration package.

Single source of truth: ``RuntimeSettings`` via ``get_settings()``.
"""

from .runtime import RuntimeSettings, StoreBackend, get_settings

__all__ = [
    "RuntimeSettings",
    "StoreBackend",
    "get_settings",
]
