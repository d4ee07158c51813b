"""Mapping entries, proposals and score bands."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class ScoreBand(StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class MappingEntry(BaseModel):
    """One source header associated with one target field, plus its cached score."""

    header: str
    target: str
    score: float = Field(ge=0.0, le=1.0)
    band: ScoreBand = ScoreBand.LOW


class MappingProposal(BaseModel):
    """Output of auto-mapping: accepted entries keyed by header, in file order."""

    entries: dict[str, MappingEntry] = Field(default_factory=dict)
    unmapped: list[str] = Field(default_factory=list)

    def as_mapping(self) -> dict[str, str]:
        return {header: entry.target for header, entry in self.entries.items()}
