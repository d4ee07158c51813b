"""fieldmap exception hierarchy."""

from __future__ import annotations


class FieldMapError(Exception):
    """Base exception for all fieldmap errors."""


class ValidationError(FieldMapError):
    """Request rejected before any parsing started."""


class UnknownTargetFieldError(ValidationError):
    """Target field value is not part of the taxonomy."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Unknown target field {value!r}")


class ParseError(FieldMapError):
    """Uploaded stream could not be parsed; no partial result is valid."""


class MappingConflictError(FieldMapError):
    """Two source headers claim the same target field."""

    def __init__(self, conflicts: dict[str, list[str]]) -> None:
        self.conflicts = conflicts
        detail = "; ".join(f"{target} <- {', '.join(headers)}" for target, headers in conflicts.items())
        super().__init__(f"Target fields mapped more than once: {detail}")


class PersistenceError(FieldMapError):
    """Collection store rejected the collection or one of its records."""

    def __init__(
        self, message: str, collection_id: str | None = None, compensated: bool = False
    ) -> None:
        self.collection_id = collection_id
        self.compensated = compensated
        super().__init__(message)


class CollectionNotFoundError(FieldMapError):
    """No collection with the given id."""


class UploadNotFoundError(FieldMapError):
    """Upload session is unknown or has expired."""


class CacheError(FieldMapError):
    """Redis cache operation failed."""


class FileStoreError(FieldMapError):
    """S3 file store operation failed."""
