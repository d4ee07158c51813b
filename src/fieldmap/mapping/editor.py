"""Mapping editor: the user-editable mapping and its score bookkeeping."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Optional

from fieldmap.core.exceptions import UnknownTargetFieldError, ValidationError
from fieldmap.core.types import FinalMapping
from fieldmap.mapping.scorer import HIGH_BAND, MEDIUM_BAND, band, score
from fieldmap.models.mapping import MappingEntry, MappingProposal, ScoreBand
from fieldmap.models.taxonomy import Taxonomy

logger = logging.getLogger(__name__)


class MappingEditor:
    """Holds the current header -> target mapping and a cached score per entry.

    Scores are recomputed on every manual change. Conflicts (one target
    claimed by several headers) are allowed; ``conflicts()`` only reports them.
    """

    def __init__(
        self,
        taxonomy: Taxonomy,
        headers: Optional[Sequence[str]] = None,
        high_band: float = HIGH_BAND,
        medium_band: float = MEDIUM_BAND,
    ) -> None:
        self._taxonomy = taxonomy
        self._headers: Optional[list[str]] = list(headers) if headers is not None else None
        self._high_band = high_band
        self._medium_band = medium_band
        self._mapping: dict[str, str] = {}
        self._scores: dict[str, float] = {}

    @property
    def headers(self) -> list[str]:
        if self._headers is not None:
            return list(self._headers)
        return list(self._mapping)

    def load_proposal(self, proposal: MappingProposal) -> None:
        """Replace the current state with an auto-mapping proposal."""
        self.reset()
        for header, entry in proposal.entries.items():
            self._mapping[header] = entry.target
            self._scores[header] = entry.score

    def restore(self, mapping: dict[str, str], scores: dict[str, float]) -> None:
        """Rehydrate saved state without rescoring."""
        self._mapping = dict(mapping)
        self._scores = {header: scores[header] for header in mapping if header in scores}

    def set_mapping(self, header: str, target: Optional[str]) -> Optional[MappingEntry]:
        """Map *header* to *target*, or clear it when *target* is None."""
        if self._headers is not None and header not in self._headers:
            raise ValidationError(f"Header {header!r} is not part of this upload")

        if target is None:
            self._mapping.pop(header, None)
            self._scores.pop(header, None)
            logger.debug(f"Cleared mapping for header '{header}'")
            return None

        field = self._taxonomy.get(target)
        if field is None:
            raise UnknownTargetFieldError(target)

        value = score(header, field.label)
        self._mapping[header] = target
        self._scores[header] = value
        logger.debug(f"Mapped header '{header}' -> '{target}' (score {value:.3f})")
        return self._entry(header)

    def get_mapping(self) -> dict[str, MappingEntry]:
        return {header: self._entry(header) for header in self._ordered_keys()}

    def reset(self) -> None:
        self._mapping = {}
        self._scores = {}

    def finalize(self) -> FinalMapping:
        """Read-only snapshot handed to the record transformer."""
        return {header: self._mapping[header] for header in self._ordered_keys()}

    def scores(self) -> dict[str, float]:
        return dict(self._scores)

    def score_for(self, header: str) -> Optional[float]:
        return self._scores.get(header)

    def band_for(self, header: str) -> Optional[ScoreBand]:
        """Band for a mapped header; None when the header is unmapped."""
        if header not in self._mapping:
            return None
        return band(self._scores[header], self._high_band, self._medium_band)

    def unmapped_headers(self) -> list[str]:
        return [header for header in self.headers if header not in self._mapping]

    def unmapped_fields(self) -> list[str]:
        used = set(self._mapping.values())
        return [value for value in self._taxonomy.values() if value not in used]

    def conflicts(self) -> dict[str, list[str]]:
        """Targets claimed by more than one header."""
        claimed: dict[str, list[str]] = {}
        for header in self._ordered_keys():
            claimed.setdefault(self._mapping[header], []).append(header)
        return {target: headers for target, headers in claimed.items() if len(headers) > 1}

    def _ordered_keys(self) -> list[str]:
        if self._headers is None:
            return list(self._mapping)
        ordered = [header for header in dict.fromkeys(self._headers) if header in self._mapping]
        return ordered + [header for header in self._mapping if header not in ordered]

    def _entry(self, header: str) -> MappingEntry:
        value = self._scores[header]
        return MappingEntry(
            header=header,
            target=self._mapping[header],
            score=value,
            band=band(value, self._high_band, self._medium_band),
        )
