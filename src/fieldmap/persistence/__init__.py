"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from fieldmap.core.config import AppSettings
from fieldmap.persistence.dynamodb_backend import DynamoDBCollectionStore
from fieldmap.persistence.memory_backend import (
    MemoryCacheBackend,
    MemoryCollectionStore,
    MemoryFileStore,
)
from fieldmap.persistence.redis_backend import RedisCacheBackend
from fieldmap.persistence.s3_backend import S3FileStore


def create_persistence(settings: AppSettings | None = None):
    """Create wired-up persistence backends from application settings.

    Returns:
        Tuple of (collection_store, cache, file_store).
    """
    if settings is None:
        settings = AppSettings()

    if settings.persistence.backend == "memory":
        return MemoryCollectionStore(), MemoryCacheBackend(), MemoryFileStore()

    cache = RedisCacheBackend(
        host=settings.redis.host,
        port=settings.redis.port,
        db=settings.redis.db,
        namespace=f"fieldmap-{settings.environment}",
    )

    collection_store = DynamoDBCollectionStore(
        table_suffix=settings.dynamodb.table_suffix,
        region=settings.dynamodb.region,
        endpoint_url=settings.dynamodb.endpoint_url,
    )

    file_store = S3FileStore(
        bucket=settings.s3.bucket,
        region=settings.s3.region,
        endpoint_url=settings.s3.endpoint_url,
    )

    return collection_store, cache, file_store
