"""Greedy per-header auto-mapping against the taxonomy."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from fieldmap.mapping.scorer import HIGH_BAND, MEDIUM_BAND, band, score
from fieldmap.models.mapping import MappingEntry, MappingProposal
from fieldmap.models.taxonomy import Taxonomy

logger = logging.getLogger(__name__)

AUTO_MAP_THRESHOLD = 0.6


class AutoMapper:
    """Proposes a mapping by picking each header's best-scoring field label.

    Every header is matched independently. Two headers whose best match is
    the same field both keep it; one-to-one is left to the caller.
    """

    def __init__(
        self,
        taxonomy: Taxonomy,
        threshold: float = AUTO_MAP_THRESHOLD,
        high_band: float = HIGH_BAND,
        medium_band: float = MEDIUM_BAND,
    ) -> None:
        self._taxonomy = taxonomy
        self._threshold = threshold
        self._high_band = high_band
        self._medium_band = medium_band

    def best_match(self, header: str) -> tuple[str | None, float]:
        """Best field value for *header* and its score; ties keep the earlier field."""
        best_value: str | None = None
        best_score = 0.0
        for field in self._taxonomy.fields():
            current = score(header, field.label)
            if current > best_score:
                best_value, best_score = field.value, current
        return best_value, best_score

    def map_headers(self, headers: Sequence[str]) -> MappingProposal:
        proposal = MappingProposal()
        for header in headers:
            value, best = self.best_match(header)
            if value is None or not best > self._threshold:
                proposal.unmapped.append(header)
                continue
            proposal.entries[header] = MappingEntry(
                header=header,
                target=value,
                score=best,
                band=band(best, self._high_band, self._medium_band),
            )

        logger.info(
            f"Auto-mapped {len(proposal.entries)} of {len(headers)} headers "
            f"(threshold {self._threshold})"
        )
        return proposal


def auto_map(
    headers: Sequence[str], taxonomy: Taxonomy, threshold: float = AUTO_MAP_THRESHOLD
) -> MappingProposal:
    """Convenience wrapper around AutoMapper.map_headers."""
    return AutoMapper(taxonomy, threshold=threshold).map_headers(headers)
