"""DynamoDB backend implementing ICollectionStore."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Iterator
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from fieldmap.core.exceptions import CollectionNotFoundError, PersistenceError

COLLECTIONS_TABLE = "fieldmap-collections"
RECORDS_TABLE = "fieldmap-records"


def _decode_decimals(item: dict[str, Any]) -> dict[str, Any]:
    """Convert Decimal values in a DynamoDB item to int/float."""
    out: dict[str, Any] = {}
    for k, v in item.items():
        if isinstance(v, Decimal):
            out[k] = int(v) if v == int(v) else float(v)
        elif isinstance(v, dict):
            out[k] = _decode_decimals(v)
        else:
            out[k] = v
    return out


def _pk(collection_id: str) -> str:
    return f"COLLECTION#{collection_id}"


def _to_collection(item: dict[str, Any]) -> dict[str, Any]:
    item = _decode_decimals(item)
    return {
        "id": item["id"],
        "name": item["name"],
        "type": item["type"],
        "record_count": item.get("recordCount", 0),
        "mappings": item.get("mappings", {}),
        "created_at": item.get("createdAt"),
    }


class DynamoDBCollectionStore:
    """Production ICollectionStore: one META item per collection, one item per record."""

    def __init__(self, table_suffix: str = "", region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._table_suffix = table_suffix
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)

    def _table(self, base: str):
        return self._ddb.Table(f"{base}{self._table_suffix}")

    def _query_pk(self, table_base: str, pk: str) -> Iterator[dict[str, Any]]:
        """Yield every item under a partition key, following pagination."""
        tbl = self._table(table_base)
        kwargs: dict[str, Any] = {
            "KeyConditionExpression": "PK = :pk",
            "ExpressionAttributeValues": {":pk": pk},
        }
        while True:
            resp = tbl.query(**kwargs)
            yield from resp.get("Items", [])
            if "LastEvaluatedKey" not in resp:
                return
            kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]

    # ---- ICollectionStore methods ----

    def create_collection(
        self, name: str, type: str, record_count: int, mappings: dict[str, str]
    ) -> dict[str, Any]:
        collection_id = uuid.uuid4().hex
        item = {
            "PK": _pk(collection_id),
            "SK": "META",
            "id": collection_id,
            "name": name,
            "type": type,
            "recordCount": record_count,
            "mappings": dict(mappings),
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self._table(COLLECTIONS_TABLE).put_item(
                Item=item, ConditionExpression="attribute_not_exists(PK)"
            )
        except (ClientError, BotoCoreError) as exc:
            raise PersistenceError(f"DynamoDB rejected collection {name!r}: {exc}") from exc
        return _to_collection(item)

    def insert_records(self, collection_id: str, records: Iterable[dict[str, Any]]) -> int:
        if self.get_collection(collection_id) is None:
            raise CollectionNotFoundError(f"No collection {collection_id!r}")
        count = 0
        try:
            with self._table(RECORDS_TABLE).batch_writer() as batch:
                for record in records:
                    batch.put_item(Item={
                        "PK": _pk(collection_id),
                        "SK": f"RECORD#{count:09d}",
                        "values": dict(record),
                    })
                    count += 1
        except (ClientError, BotoCoreError) as exc:
            raise PersistenceError(
                f"DynamoDB record insert failed after {count} records: {exc}",
                collection_id=collection_id,
            ) from exc
        return count

    def delete_collection(self, collection_id: str) -> None:
        try:
            records = self._table(RECORDS_TABLE)
            with records.batch_writer() as batch:
                for item in self._query_pk(RECORDS_TABLE, _pk(collection_id)):
                    batch.delete_item(Key={"PK": item["PK"], "SK": item["SK"]})
            self._table(COLLECTIONS_TABLE).delete_item(
                Key={"PK": _pk(collection_id), "SK": "META"}
            )
        except (ClientError, BotoCoreError) as exc:
            raise PersistenceError(
                f"DynamoDB delete failed for collection {collection_id!r}: {exc}",
                collection_id=collection_id,
            ) from exc

    def get_collection(self, collection_id: str) -> dict[str, Any] | None:
        try:
            resp = self._table(COLLECTIONS_TABLE).get_item(
                Key={"PK": _pk(collection_id), "SK": "META"}
            )
        except (ClientError, BotoCoreError) as exc:
            raise PersistenceError(f"DynamoDB read failed for {collection_id!r}: {exc}") from exc
        item = resp.get("Item")
        return _to_collection(item) if item else None

    def list_records(self, collection_id: str) -> list[dict[str, Any]]:
        try:
            return [
                _decode_decimals(item).get("values", {})
                for item in self._query_pk(RECORDS_TABLE, _pk(collection_id))
            ]
        except (ClientError, BotoCoreError) as exc:
            raise PersistenceError(f"DynamoDB read failed for {collection_id!r}: {exc}") from exc

    def ping(self) -> bool:
        client = self._ddb.meta.client
        try:
            for base in (COLLECTIONS_TABLE, RECORDS_TABLE):
                client.describe_table(TableName=f"{base}{self._table_suffix}")
            return True
        except (ClientError, BotoCoreError):
            return False
