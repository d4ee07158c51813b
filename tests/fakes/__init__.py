"""Shared test doubles: re-export memory backends plus stores that fail mid-build."""

from __future__ import annotations

from fieldmap.core.exceptions import PersistenceError
from fieldmap.persistence.memory_backend import (
    MemoryCacheBackend,
    MemoryCollectionStore,
    MemoryFileStore,
)


class FailingInsertStore(MemoryCollectionStore):
    """Accepts the collection, then rejects its records."""

    def insert_records(self, collection_id, records):
        list(records)
        raise PersistenceError("record rejected")


class FailingCleanupStore(FailingInsertStore):
    """Rejects records and then refuses to delete the collection."""

    def delete_collection(self, collection_id):
        raise PersistenceError("delete rejected", collection_id=collection_id)


__all__ = [
    "FailingCleanupStore",
    "FailingInsertStore",
    "MemoryCacheBackend",
    "MemoryCollectionStore",
    "MemoryFileStore",
]
