"""Target field taxonomy: the catalog of fields a source column may map to.

The catalog is configuration, not code: ordered categories holding ordered
fields, loaded from a plain data structure or a JSON file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator


class TargetField(BaseModel):
    """A single field of the target schema."""

    model_config = {"frozen": True}

    value: str
    label: str
    category: str


class TargetCategory(BaseModel):
    """A titled group of target fields."""

    key: str
    title: str
    fields: list[TargetField] = Field(default_factory=list)


class Taxonomy(BaseModel):
    """Ordered categories of target fields; field values are unique."""

    categories: list[TargetCategory] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_values(self) -> "Taxonomy":
        seen: set[str] = set()
        for field in self.fields():
            if field.value in seen:
                raise ValueError(f"Duplicate target field value {field.value!r}")
            seen.add(field.value)
        return self

    @classmethod
    def from_config(cls, data: dict[str, Any]) -> "Taxonomy":
        """Build from ``{category_key: {"title": ..., "fields": [{value, label}, ...]}}``."""
        categories = [
            TargetCategory(
                key=key,
                title=entry.get("title", key),
                fields=[
                    TargetField(value=f["value"], label=f["label"], category=key)
                    for f in entry.get("fields", [])
                ],
            )
            for key, entry in data.items()
        ]
        return cls(categories=categories)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "Taxonomy":
        return cls.from_config(json.loads(Path(path).read_text(encoding="utf-8")))

    def fields(self) -> list[TargetField]:
        """All fields flattened, in catalog order."""
        return [field for category in self.categories for field in category.fields]

    def values(self) -> list[str]:
        return [field.value for field in self.fields()]

    def get(self, value: str) -> TargetField | None:
        for field in self.fields():
            if field.value == value:
                return field
        return None

    def label_for(self, value: str) -> str:
        """Human-readable label, falling back to the raw value."""
        field = self.get(value)
        return field.label if field is not None else value


DEFAULT_TAXONOMY_CONFIG: dict[str, Any] = {
    "Identity": {
        "title": "Identity Information",
        "fields": [{"value": "identity_type", "label": "Identity Type"}],
    },
    "Soul": {
        "title": "Personal Information",
        "fields": [
            {"value": "first_name", "label": "First Name"},
            {"value": "last_name", "label": "Last Name"},
            {"value": "dob_year", "label": "Birth Year"},
            {"value": "dob_full", "label": "Full Date of Birth"},
            {"value": "gender", "label": "Gender"},
        ],
    },
    "Contact": {
        "title": "Contact Information",
        "fields": [
            {"value": "address_line1", "label": "Address Line 1"},
            {"value": "address_line2", "label": "Address Line 2"},
            {"value": "city", "label": "City"},
            {"value": "state", "label": "State"},
            {"value": "zip", "label": "ZIP Code"},
            {"value": "zip4", "label": "ZIP+4"},
            {"value": "phone_number", "label": "Phone Number"},
            {"value": "email_address", "label": "Email Address"},
        ],
    },
    "Business": {
        "title": "Business Information",
        "fields": [
            {"value": "job_title", "label": "Job Title"},
            {"value": "department", "label": "Department"},
            {"value": "seniority_level", "label": "Seniority Level"},
            {"value": "business_email", "label": "Business Email"},
            {"value": "direct_number", "label": "Direct Phone"},
            {"value": "linkedin_url", "label": "LinkedIn URL"},
        ],
    },
}


def load_taxonomy(path: str | Path | None = None) -> Taxonomy:
    """Load the taxonomy from *path*, or the built-in catalog when not given."""
    if path is None:
        return Taxonomy.from_config(DEFAULT_TAXONOMY_CONFIG)
    return Taxonomy.from_json_file(path)
