"""Unit tests for DynamoDBCollectionStore using moto."""

from __future__ import annotations

import boto3
import pytest
from moto import mock_aws

from fieldmap.core.exceptions import CollectionNotFoundError, PersistenceError
from fieldmap.persistence.dynamodb_backend import (
    COLLECTIONS_TABLE,
    RECORDS_TABLE,
    DynamoDBCollectionStore,
)

TABLE_SUFFIX = "-test"
REGION = "us-east-1"

# ---------- helpers ----------

def _create_table(client, name: str):
    client.create_table(
        TableName=name,
        KeySchema=[
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "PK", "AttributeType": "S"},
            {"AttributeName": "SK", "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )


# ---------- fixtures ----------

@pytest.fixture
def aws():
    with mock_aws():
        client = boto3.client("dynamodb", region_name=REGION)
        for name in (COLLECTIONS_TABLE, RECORDS_TABLE):
            _create_table(client, f"{name}{TABLE_SUFFIX}")
        yield boto3.resource("dynamodb", region_name=REGION)


@pytest.fixture
def store(aws):
    return DynamoDBCollectionStore(table_suffix=TABLE_SUFFIX, region=REGION)


def _create(store, **overrides):
    fields = {"name": "Q3", "type": "leads", "record_count": 2, "mappings": {"First": "first_name"}}
    fields.update(overrides)
    return store.create_collection(**fields)


# ---------- tests ----------

class TestCreateCollection:
    def test_returns_collection_dict(self, store):
        created = _create(store)
        assert created["name"] == "Q3"
        assert created["type"] == "leads"
        assert created["record_count"] == 2
        assert created["mappings"] == {"First": "first_name"}
        assert created["created_at"]

    def test_writes_meta_item(self, store, aws):
        created = _create(store)
        item = aws.Table(f"{COLLECTIONS_TABLE}{TABLE_SUFFIX}").get_item(
            Key={"PK": f"COLLECTION#{created['id']}", "SK": "META"}
        )["Item"]
        assert item["recordCount"] == 2

    def test_missing_table_raises_persistence_error(self, aws):
        store = DynamoDBCollectionStore(table_suffix="-absent", region=REGION)
        with pytest.raises(PersistenceError):
            _create(store)


class TestInsertRecords:
    def test_inserts_and_lists_in_order(self, store):
        created = _create(store)
        records = [{"first_name": f"n{i}", "city": None} for i in range(30)]
        assert store.insert_records(created["id"], records) == 30
        listed = store.list_records(created["id"])
        assert [r["first_name"] for r in listed] == [f"n{i}" for i in range(30)]
        assert listed[0]["city"] is None

    def test_record_sort_keys_are_sequential(self, store, aws):
        created = _create(store)
        store.insert_records(created["id"], [{"a": "1"}, {"a": "2"}])
        items = aws.Table(f"{RECORDS_TABLE}{TABLE_SUFFIX}").scan()["Items"]
        assert sorted(i["SK"] for i in items) == ["RECORD#000000000", "RECORD#000000001"]

    def test_unknown_collection_raises(self, store):
        with pytest.raises(CollectionNotFoundError):
            store.insert_records("missing", [{"a": "1"}])

    def test_empty_iterable_inserts_nothing(self, store):
        created = _create(store)
        assert store.insert_records(created["id"], []) == 0
        assert store.list_records(created["id"]) == []


class TestGetAndDelete:
    def test_get_round_trips(self, store):
        created = _create(store)
        assert store.get_collection(created["id"]) == created

    def test_get_missing_returns_none(self, store):
        assert store.get_collection("missing") is None

    def test_delete_removes_meta_and_records(self, store):
        created = _create(store)
        store.insert_records(created["id"], [{"a": "1"}, {"a": "2"}])
        store.delete_collection(created["id"])
        assert store.get_collection(created["id"]) is None
        assert store.list_records(created["id"]) == []

    def test_delete_leaves_other_collections(self, store):
        keep = _create(store, name="keep")
        drop = _create(store, name="drop")
        store.insert_records(keep["id"], [{"a": "1"}])
        store.delete_collection(drop["id"])
        assert store.list_records(keep["id"]) == [{"a": "1"}]


class TestPing:
    def test_ping_true_when_tables_exist(self, store):
        assert store.ping() is True

    def test_ping_false_when_tables_missing(self, aws):
        assert DynamoDBCollectionStore(table_suffix="-absent", region=REGION).ping() is False
