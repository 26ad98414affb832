"""Concrete store adapters (pymongo and in-memory)."""

from .memory_store import InMemoryDocumentStore
from .mongo_store import MongoDocumentStore

__all__ = [
    "InMemoryDocumentStore",
    "MongoDocumentStore",
]
