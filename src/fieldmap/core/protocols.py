"""Protocol interfaces for the fieldmap storage collaborators.

The mapping engine only talks to storage through these Protocols.
Implementations need no inheritance; isinstance() checks work at runtime.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Persistence: Collection Store
# ---------------------------------------------------------------------------

@runtime_checkable
class ICollectionStore(Protocol):
    """Creates collections ("universes") and bulk-inserts their records."""

    def create_collection(
        self, name: str, type: str, record_count: int, mappings: dict[str, str]
    ) -> dict[str, Any]: ...

    def insert_records(self, collection_id: str, records: Iterable[dict[str, Any]]) -> int: ...

    def delete_collection(self, collection_id: str) -> None: ...

    def get_collection(self, collection_id: str) -> dict[str, Any] | None: ...

    def list_records(self, collection_id: str) -> list[dict[str, Any]]: ...

    def ping(self) -> bool: ...


# ---------------------------------------------------------------------------
# Persistence: Cache Backend
# ---------------------------------------------------------------------------

@runtime_checkable
class ICacheBackend(Protocol):
    """Redis-compatible cache interface."""

    def get(self, key: str) -> str | None: ...

    def setex(self, key: str, ttl: int, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def ping(self) -> bool: ...


# ---------------------------------------------------------------------------
# Persistence: File Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IFileStore(Protocol):
    """S3-compatible storage for uploaded source files."""

    def read(self, path: str) -> bytes: ...

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str: ...

    def delete(self, path: str) -> None: ...

    def list_files(self, prefix: str) -> list[str]: ...

    def ping(self) -> bool: ...
