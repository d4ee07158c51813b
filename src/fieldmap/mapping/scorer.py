"""Header/field similarity scoring and display bands."""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein

from fieldmap.mapping.normalize import normalize
from fieldmap.models.mapping import ScoreBand

EXACT_SCORE = 1.0
CONTAINMENT_SCORE = 0.8

HIGH_BAND = 0.8
MEDIUM_BAND = 0.6


def score(source: str, target: str) -> float:
    """Confidence in [0, 1] that *source* names the same thing as *target*.

    Ordered cascade: exact match after normalization, then containment in
    either direction (flat 0.8), then ``1 - distance / longer_length``.
    """
    src = normalize(source)
    tgt = normalize(target)

    if src == tgt:
        return EXACT_SCORE

    if src in tgt or tgt in src:
        return CONTAINMENT_SCORE

    longest = max(len(src), len(tgt))
    if longest == 0:
        return EXACT_SCORE
    distance = Levenshtein.distance(src, tgt)
    return 1 - distance / longest


def band(value: float, high: float = HIGH_BAND, medium: float = MEDIUM_BAND) -> ScoreBand:
    if value > high:
        return ScoreBand.HIGH
    if value > medium:
        return ScoreBand.MEDIUM
    return ScoreBand.LOW
