"""CollectionBuilder: two-phase create-collection-then-insert-records.

Phase 1 creates the collection; phase 2 inserts its records. The two
phases are not one transaction: without compensation a failure in phase 2
leaves a collection with zero or partial records. With ``compensate=True``
the collection is deleted before the error is re-raised.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from fieldmap.core.exceptions import (
    CollectionNotFoundError,
    FieldMapError,
    MappingConflictError,
    PersistenceError,
    ValidationError,
)
from fieldmap.core.protocols import ICollectionStore
from fieldmap.core.types import FinalMapping, RawRow
from fieldmap.models.collection import Collection, CreateCollectionRequest
from fieldmap.transform.transformer import RecordTransformer

logger = logging.getLogger(__name__)


def find_conflicts(mappings: FinalMapping) -> dict[str, list[str]]:
    """Targets claimed by more than one header."""
    claimed: dict[str, list[str]] = {}
    for header, target in mappings.items():
        claimed.setdefault(target, []).append(header)
    return {target: headers for target, headers in claimed.items() if len(headers) > 1}


class CollectionBuilder:
    """Creates a collection and bulk-inserts its transformed records."""

    def __init__(
        self,
        store: ICollectionStore,
        *,
        compensate: bool = False,
        reject_conflicts: bool = False,
    ) -> None:
        self._store = store
        self._compensate = compensate
        self._reject_conflicts = reject_conflicts

    def validate(self, request: CreateCollectionRequest) -> None:
        if not request.name.strip():
            raise ValidationError("Collection name is required")
        if not request.type.strip():
            raise ValidationError("Collection type is required")
        if self._reject_conflicts:
            conflicts = find_conflicts(request.mappings)
            if conflicts:
                raise MappingConflictError(conflicts)

    def build(
        self,
        request: CreateCollectionRequest,
        rows: Iterable[RawRow],
        *,
        compensate: bool | None = None,
    ) -> Collection:
        self.validate(request)
        compensate = self._compensate if compensate is None else compensate

        created = self._store.create_collection(
            name=request.name,
            type=request.type,
            record_count=request.record_count,
            mappings=request.mappings,
        )

        collection = Collection(**created)
        logger.info(f"Created collection {collection.id} ('{collection.name}')")

        try:
            transformer = RecordTransformer(request.mappings)
            # Materialized so a re-read failure commits no records.
            records = [r.to_item() for r in transformer.transform(rows, collection.id)]
            inserted = self._store.insert_records(collection.id, records)
        except FieldMapError as exc:
            compensated = False
            if compensate:
                logger.warning(f"Deleting collection {collection.id} after failed insert: {exc}")
                try:
                    self._store.delete_collection(collection.id)
                    compensated = True
                except FieldMapError as cleanup_exc:
                    logger.error(
                        f"Compensating delete failed for collection {collection.id}: {cleanup_exc}"
                    )
            else:
                logger.error(
                    f"Collection {collection.id} left without a complete record set: {exc}"
                )
            if isinstance(exc, PersistenceError):
                exc.collection_id = exc.collection_id or collection.id
                exc.compensated = compensated
            raise

        collection.inserted_count = inserted
        logger.info(f"Inserted {inserted} records into collection {collection.id}")
        return collection


def load_collection(store: ICollectionStore, collection_id: str) -> Collection:
    created = store.get_collection(collection_id)
    if created is None:
        raise CollectionNotFoundError(f"No collection {collection_id!r}")
    collection = Collection(**created)
    collection.inserted_count = len(store.list_records(collection_id))
    return collection
