"""In-memory backends for unit tests and local runs, dict-backed."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from fieldmap.core.exceptions import CollectionNotFoundError, FileStoreError


class MemoryCollectionStore:
    """Dict-backed ICollectionStore."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Any]] = {}
        self._records: dict[str, list[dict[str, Any]]] = {}

    def create_collection(
        self, name: str, type: str, record_count: int, mappings: dict[str, str]
    ) -> dict[str, Any]:
        collection_id = uuid.uuid4().hex
        collection = {
            "id": collection_id,
            "name": name,
            "type": type,
            "record_count": record_count,
            "mappings": dict(mappings),
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        self._collections[collection_id] = collection
        self._records[collection_id] = []
        return dict(collection)

    def insert_records(self, collection_id: str, records: Iterable[dict[str, Any]]) -> int:
        if collection_id not in self._collections:
            raise CollectionNotFoundError(f"No collection {collection_id!r}")
        count = 0
        for record in records:
            self._records[collection_id].append(dict(record))
            count += 1
        return count

    def delete_collection(self, collection_id: str) -> None:
        self._collections.pop(collection_id, None)
        self._records.pop(collection_id, None)

    def get_collection(self, collection_id: str) -> dict[str, Any] | None:
        collection = self._collections.get(collection_id)
        return dict(collection) if collection is not None else None

    def list_records(self, collection_id: str) -> list[dict[str, Any]]:
        return [dict(r) for r in self._records.get(collection_id, [])]

    def ping(self) -> bool:
        return True


class MemoryCacheBackend:
    """Dict-backed ICacheBackend; TTLs are ignored."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def setex(self, key: str, ttl: int, value: str) -> None:
        self._store[key] = value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def ping(self) -> bool:
        return True


class MemoryFileStore:
    """Dict-backed IFileStore."""

    def __init__(self) -> None:
        self._files: dict[str, bytes] = {}

    def read(self, path: str) -> bytes:
        try:
            return self._files[path]
        except KeyError as exc:
            raise FileStoreError(f"No file at {path!r}") from exc

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        self._files[path] = data
        return path

    def delete(self, path: str) -> None:
        self._files.pop(path, None)

    def list_files(self, prefix: str) -> list[str]:
        return [k for k in self._files if k.startswith(prefix)]

    def ping(self) -> bool:
        return True
