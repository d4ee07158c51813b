"""Tests for CollectionBuilder two-phase persistence."""

from __future__ import annotations

import pytest

from fieldmap.core.exceptions import (
    CollectionNotFoundError,
    MappingConflictError,
    ParseError,
    PersistenceError,
    ValidationError,
)
from fieldmap.models.collection import CreateCollectionRequest
from fieldmap.services.builder import CollectionBuilder, find_conflicts, load_collection
from tests.fakes import FailingCleanupStore, FailingInsertStore, MemoryCollectionStore

ROWS = [
    {"First": "Ada", "Town": "London", "Extra": "x"},
    {"First": "Alan", "Town": None, "Extra": "y"},
]


def _request(**overrides) -> CreateCollectionRequest:
    fields = {
        "name": "Q3 prospects",
        "type": "leads",
        "record_count": 2,
        "mappings": {"First": "first_name", "Town": "city"},
    }
    fields.update(overrides)
    return CreateCollectionRequest(**fields)


class TestBuild:
    def test_creates_collection_and_inserts_records(self):
        store = MemoryCollectionStore()
        collection = CollectionBuilder(store).build(_request(), ROWS)

        assert collection.name == "Q3 prospects"
        assert collection.type == "leads"
        assert collection.record_count == 2
        assert collection.inserted_count == 2
        assert collection.created_at is not None
        assert store.list_records(collection.id) == [
            {"first_name": "Ada", "city": "London"},
            {"first_name": "Alan", "city": None},
        ]

    def test_mappings_saved_on_collection(self):
        store = MemoryCollectionStore()
        collection = CollectionBuilder(store).build(_request(), ROWS)
        assert store.get_collection(collection.id)["mappings"] == {
            "First": "first_name",
            "Town": "city",
        }

    def test_no_rows_creates_empty_collection(self):
        store = MemoryCollectionStore()
        collection = CollectionBuilder(store).build(_request(record_count=0), [])
        assert collection.inserted_count == 0
        assert store.get_collection(collection.id) is not None

    @pytest.mark.parametrize("field", ["name", "type"])
    def test_blank_name_or_type_rejected_before_create(self, field):
        store = MemoryCollectionStore()
        with pytest.raises(ValidationError):
            CollectionBuilder(store).build(_request(**{field: "  "}), ROWS)
        assert store._collections == {}


class TestInsertFailure:
    def test_legacy_mode_leaves_collection_behind(self):
        store = FailingInsertStore()
        with pytest.raises(PersistenceError) as exc_info:
            CollectionBuilder(store).build(_request(), ROWS)

        err = exc_info.value
        assert err.compensated is False
        assert store.get_collection(err.collection_id) is not None
        assert store.list_records(err.collection_id) == []

    def test_compensated_mode_deletes_collection(self):
        store = FailingInsertStore()
        with pytest.raises(PersistenceError) as exc_info:
            CollectionBuilder(store, compensate=True).build(_request(), ROWS)

        err = exc_info.value
        assert err.compensated is True
        assert err.collection_id is not None
        assert store.get_collection(err.collection_id) is None

    def test_per_call_override(self):
        store = FailingInsertStore()
        with pytest.raises(PersistenceError) as exc_info:
            CollectionBuilder(store, compensate=True).build(_request(), ROWS, compensate=False)
        assert store.get_collection(exc_info.value.collection_id) is not None

    def test_failed_compensation_keeps_original_error(self):
        store = FailingCleanupStore()
        with pytest.raises(PersistenceError, match="record rejected") as exc_info:
            CollectionBuilder(store, compensate=True).build(_request(), ROWS)

        err = exc_info.value
        assert err.compensated is False
        assert err.collection_id is not None
        assert store.get_collection(err.collection_id) is not None

    def test_row_failure_commits_no_records(self):
        def rows():
            yield ROWS[0]
            raise ParseError("bad row")

        store = MemoryCollectionStore()
        with pytest.raises(ParseError):
            CollectionBuilder(store).build(_request(), rows())

        [collection_id] = store._collections
        assert store.list_records(collection_id) == []

    def test_row_failure_with_compensation_leaves_nothing(self):
        def rows():
            raise ParseError("bad row")
            yield  # pragma: no cover

        store = MemoryCollectionStore()
        with pytest.raises(ParseError):
            CollectionBuilder(store, compensate=True).build(_request(), rows())
        assert store._collections == {}


class TestConflicts:
    MAPPINGS = {"Mobile": "phone_number", "Home": "phone_number", "Town": "city"}

    def test_find_conflicts(self):
        assert find_conflicts(self.MAPPINGS) == {"phone_number": ["Mobile", "Home"]}
        assert find_conflicts({"a": "x", "b": "y"}) == {}

    def test_conflicts_allowed_by_default(self):
        store = MemoryCollectionStore()
        rows = [{"Mobile": "1", "Home": "2", "Town": "Leeds"}]
        collection = CollectionBuilder(store).build(_request(mappings=self.MAPPINGS), rows)
        assert store.list_records(collection.id) == [{"phone_number": "1", "city": "Leeds"}]

    def test_strict_mode_rejects_before_create(self):
        store = MemoryCollectionStore()
        builder = CollectionBuilder(store, reject_conflicts=True)
        with pytest.raises(MappingConflictError) as exc_info:
            builder.build(_request(mappings=self.MAPPINGS), [])
        assert exc_info.value.conflicts == {"phone_number": ["Mobile", "Home"]}
        assert store._collections == {}


class TestLoadCollection:
    def test_loads_with_inserted_count(self):
        store = MemoryCollectionStore()
        created = CollectionBuilder(store).build(_request(), ROWS)
        loaded = load_collection(store, created.id)
        assert loaded.id == created.id
        assert loaded.inserted_count == 2

    def test_missing_collection_raises(self):
        with pytest.raises(CollectionNotFoundError):
            load_collection(MemoryCollectionStore(), "nope")
