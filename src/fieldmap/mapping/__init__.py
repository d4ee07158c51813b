"""Schema-mapping engine: normalization, scoring, auto-mapping and editing."""

from __future__ import annotations

from fieldmap.mapping.auto_mapper import AUTO_MAP_THRESHOLD, AutoMapper, auto_map
from fieldmap.mapping.editor import MappingEditor
from fieldmap.mapping.normalize import normalize
from fieldmap.mapping.scorer import band, score

__all__ = [
    "AUTO_MAP_THRESHOLD",
    "AutoMapper",
    "MappingEditor",
    "auto_map",
    "band",
    "normalize",
    "score",
]
