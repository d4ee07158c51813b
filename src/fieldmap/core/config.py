"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class MappingConfig(BaseSettings):
    """Auto-mapping thresholds and taxonomy source."""

    model_config = {"env_prefix": "FIELDMAP_MAPPING_"}

    auto_map_threshold: float = 0.6
    high_band: float = 0.8
    medium_band: float = 0.6
    taxonomy_path: str | None = None  # JSON taxonomy override
    reject_conflicts: bool = False


class IngestConfig(BaseSettings):
    """Upload limits and CSV reader options."""

    model_config = {"env_prefix": "FIELDMAP_INGEST_"}

    max_upload_bytes: int = 50 * 1024 * 1024
    chunk_size: int = 10_000
    collect_values: bool = True
    encoding: str = "utf-8"
    delimiter: str = ","


class PersistenceConfig(BaseSettings):
    """Backend selection and failure compensation for collection creation."""

    model_config = {"env_prefix": "FIELDMAP_PERSISTENCE_"}

    backend: Literal["memory", "aws"] = "memory"
    compensate_on_failure: bool = False


class DynamoDBConfig(BaseSettings):
    """DynamoDB configuration."""

    model_config = {"env_prefix": "FIELDMAP_DYNAMO_"}

    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class RedisConfig(BaseSettings):
    """Redis cache configuration."""

    model_config = {"env_prefix": "FIELDMAP_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0


class S3Config(BaseSettings):
    """S3 upload storage configuration."""

    model_config = {"env_prefix": "FIELDMAP_S3_"}

    bucket: str = "fieldmap-uploads"
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class SessionConfig(BaseSettings):
    """In-progress upload sessions."""

    model_config = {"env_prefix": "FIELDMAP_SESSION_"}

    ttl_seconds: int = 4 * 3600
    key_prefix: str = "upload"


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "FIELDMAP_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    mapping: MappingConfig = MappingConfig()
    ingest: IngestConfig = IngestConfig()
    persistence: PersistenceConfig = PersistenceConfig()
    dynamodb: DynamoDBConfig = DynamoDBConfig()
    redis: RedisConfig = RedisConfig()
    s3: S3Config = S3Config()
    session: SessionConfig = SessionConfig()
