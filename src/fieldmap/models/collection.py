"""Collection ("universe") and target record models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CreateCollectionRequest(BaseModel):
    """Everything needed to persist one uploaded file as a collection."""

    name: str
    type: str
    record_count: int = 0
    mappings: dict[str, str] = Field(default_factory=dict)


class Collection(BaseModel):
    """A persisted collection; owns every record produced from one file."""

    id: str
    name: str
    type: str
    record_count: int = 0
    mappings: dict[str, str] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    inserted_count: int = 0


class TargetRecord(BaseModel):
    """One source row expressed in the target schema."""

    collection_id: str
    values: dict[str, Optional[str]] = Field(default_factory=dict)

    def to_item(self) -> dict[str, Optional[str]]:
        """Flat form handed to the collection store."""
        return dict(self.values)
