"""Ingestion results and in-progress upload session models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from fieldmap.models.mapping import MappingEntry


class IngestResult(BaseModel):
    """What the ingestion pipeline learned about a file."""

    headers: list[str] = Field(default_factory=list)
    record_count: int = 0
    column_values: dict[str, list[str]] = Field(default_factory=dict)


class UploadSession(BaseModel):
    """State of one upload between the upload, mapping and review steps."""

    upload_id: str
    name: str
    type: str
    filename: str
    file_key: str
    size: int = 0
    headers: list[str] = Field(default_factory=list)
    record_count: int = 0
    column_values: dict[str, list[str]] = Field(default_factory=dict)
    mapping: dict[str, str] = Field(default_factory=dict)
    scores: dict[str, float] = Field(default_factory=dict)


class UploadView(BaseModel):
    """Session as shown to the caller, with per-entry scores and bands."""

    upload_id: str
    name: str
    type: str
    filename: str
    headers: list[str]
    record_count: int
    column_values: dict[str, list[str]]
    entries: list[MappingEntry]
    unmapped_headers: list[str]
    unmapped_fields: list[str]
    conflicts: dict[str, list[str]]
