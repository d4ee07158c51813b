"""Record transformer: applies a finalized mapping to raw rows."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from fieldmap.core.types import RawRow
from fieldmap.models.collection import TargetRecord


class RecordTransformer:
    """Turns each RawRow into a TargetRecord for one collection.

    Values are looked up by header name, never by position. Headers without
    a mapping are dropped; targets without a mapping never appear.
    """

    def __init__(self, mapping: Mapping[str, str]) -> None:
        self._mapping = dict(mapping)

    def transform_row(self, row: RawRow, collection_id: str) -> TargetRecord:
        values: dict[str, str | None] = {}
        for header, target in self._mapping.items():
            # first header mapped to a target wins
            values.setdefault(target, row.get(header))
        return TargetRecord(collection_id=collection_id, values=values)

    def transform(self, rows: Iterable[RawRow], collection_id: str) -> Iterator[TargetRecord]:
        for row in rows:
            yield self.transform_row(row, collection_id)


def transform_rows(
    mapping: Mapping[str, str], rows: Iterable[RawRow], collection_id: str
) -> Iterator[TargetRecord]:
    """Convenience wrapper around RecordTransformer.transform."""
    return RecordTransformer(mapping).transform(rows, collection_id)
