"""S3 upload storage backend implementing IFileStore."""

from __future__ import annotations

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from fieldmap.core.exceptions import FileStoreError


class S3FileStore:
    """Production IFileStore backed by S3.

    Uploaded source files are kept here between the upload step and the
    create step, which re-streams them through the record transformer.
    """

    def __init__(self, bucket: str, region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._bucket = bucket
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("s3", **kwargs)

    def read(self, path: str) -> bytes:
        try:
            resp = self._client.get_object(Bucket=self._bucket, Key=path)
            return resp["Body"].read()
        except (ClientError, BotoCoreError) as exc:
            raise FileStoreError(f"S3 read failed for {path!r}: {exc}") from exc

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        try:
            self._client.put_object(
                Bucket=self._bucket, Key=path, Body=data, ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as exc:
            raise FileStoreError(f"S3 write failed for {path!r}: {exc}") from exc
        return path

    def delete(self, path: str) -> None:
        try:
            self._client.delete_object(Bucket=self._bucket, Key=path)
        except (ClientError, BotoCoreError) as exc:
            raise FileStoreError(f"S3 delete failed for {path!r}: {exc}") from exc

    def list_files(self, prefix: str) -> list[str]:
        keys: list[str] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
        except (ClientError, BotoCoreError) as exc:
            raise FileStoreError(f"S3 list failed for prefix={prefix!r}: {exc}") from exc
        return keys

    def ping(self) -> bool:
        try:
            self._client.head_bucket(Bucket=self._bucket)
            return True
        except (ClientError, BotoCoreError):
            return False
