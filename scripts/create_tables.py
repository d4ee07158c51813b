"""Create the fieldmap DynamoDB tables and, optionally, the upload bucket.

Usage:
    python scripts/create_tables.py --endpoint-url http://localhost:4566 --table-suffix -dev
"""

from __future__ import annotations

import argparse
from typing import Any

import boto3

from fieldmap.persistence.dynamodb_backend import COLLECTIONS_TABLE, RECORDS_TABLE

TABLE_NAMES: tuple[str, ...] = (COLLECTIONS_TABLE, RECORDS_TABLE)


def create_tables(ddb: Any, suffix: str = "") -> list[str]:
    """Create the collection and record tables. Existing tables are left alone.

    Returns the names of the tables actually created.
    """
    client = ddb.meta.client
    existing = set(client.list_tables().get("TableNames", []))

    created: list[str] = []
    for base in TABLE_NAMES:
        table_name = f"{base}{suffix}"
        if table_name in existing:
            print(f"  Table {table_name} already exists, skipping")
            continue
        client.create_table(
            TableName=table_name,
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
        created.append(table_name)
        print(f"  Created table {table_name}")
    return created


def create_bucket(s3: Any, bucket: str) -> bool:
    """Create the upload bucket unless it exists. Returns True when created."""
    existing = {b["Name"] for b in s3.list_buckets().get("Buckets", [])}
    if bucket in existing:
        print(f"  Bucket {bucket} already exists, skipping")
        return False
    s3.create_bucket(Bucket=bucket)
    print(f"  Created bucket {bucket}")
    return True


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create DynamoDB tables for fieldmap")
    parser.add_argument("--endpoint-url", default=None, help="AWS endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    parser.add_argument("--bucket", default=None, help="Also create this S3 upload bucket")
    args = parser.parse_args(argv)

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    print("Creating tables...")
    create_tables(boto3.resource("dynamodb", **kwargs), suffix=args.table_suffix)

    if args.bucket:
        print("Creating bucket...")
        create_bucket(boto3.client("s3", **kwargs), args.bucket)

    print("Done!")


if __name__ == "__main__":
    main()
