"""Pydantic-based runtime settings for the search engine and its MCP server.

Loads from environment variables (with optional .env file).
Invalid values fail fast on first access.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

_DEFAULT_FIXTURES = Path(__file__).resolve().parent.parent.parent.parent / "data" / "sample_marketplace.json"


class StoreBackend(str, Enum):
    mongo = "mongo"
    memory = "memory"


class RuntimeSettings(BaseSettings):
    """All configuration for the search runtime, validated at startup."""

    model_config = {"env_prefix": "", "env_file": ".env", "env_file_encoding": "utf-8"}

    # --- Store ---
    store_backend: StoreBackend = Field(
        default=StoreBackend.mongo,
        description="Document store: 'mongo' (MongoDB) or 'memory' (JSON fixtures, local development)",
    )
    mongo_uri: str = Field(default="mongodb://localhost:27017", description="MongoDB connection URI")
    mongo_database: str = Field(default="marketplace", description="MongoDB database name")
    fixtures_path: Path = Field(default=_DEFAULT_FIXTURES, description="JSON fixtures for the memory store")

    # --- Collections ---
    advertisements_collection: str = Field(default="advertisements")
    profiles_collection: str = Field(default="profiles")
    users_collection: str = Field(default="users")
    categories_collection: str = Field(default="categories")
    tags_collection: str = Field(default="tags")

    # --- Search limits ---
    default_page_limit: int = Field(default=10, ge=1, description="Page size when 'limit' is absent")
    max_page_limit: int = Field(default=100, ge=1, description="Largest accepted page size; larger values are clamped")
    default_max_distance_m: float = Field(default=10_000.0, gt=0, description="Geo radius when 'maxDistance' is absent")
    category_max_depth: int = Field(default=32, ge=1, le=256, description="Hard cap on category expansion levels")

    # --- Runtime ---
    request_timeout_seconds: float = Field(default=30.0, gt=0, description="Per-operation store timeout")
    require_data_key: bool = Field(default=False, description="If True, the data plane requires MCP_DATA_KEY env")
    log_level: str = Field(default="INFO", description="Root log level for entry points")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"log_level must be a standard logging level, got {v!r}")
        return level

    @model_validator(mode="after")
    def _limits_consistent(self) -> RuntimeSettings:
        if self.max_page_limit < self.default_page_limit:
            raise ValueError(
                f"max_page_limit ({self.max_page_limit}) must be >= default_page_limit ({self.default_page_limit})"
            )
        return self

    @property
    def request_timeout_ms(self) -> int:
        return int(self.request_timeout_seconds * 1000)


@lru_cache(maxsize=1)
def get_settings() -> RuntimeSettings:
    """Return the singleton RuntimeSettings (cached after first call)."""
    return RuntimeSettings()
