"""
Safety scoring: weighted overall score, safety tier, and display color.

Formula: weighted mean of the sub-report scores over the dimensions that carry
one, re-normalised by the weight actually used, so partial data stays on the
0-100 scale. No scored dimension -> 0.0 (DANGEROUS).

Tiers: score >= 80 -> SAFE; 60-80 -> MODERATE; 40-60 -> RISKY; else DANGEROUS.
Lower bounds are inclusive. NaN, negatives and non-numbers are DANGEROUS.

All functions are pure and total.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

from tokensafety.analysis.reports import (
    DIM_COMMUNITY,
    DIM_CONTRACT,
    DIM_DEVELOPER,
    DIM_HONEYPOT,
    DIM_LIQUIDITY,
    DIM_SOCIAL,
    DIM_VOLUME,
    AggregateResult,
    ComprehensiveSafetyRecord,
    SafetyLevel,
    SubReport,
    numeric_score,
)

SAFETY_WEIGHTS: Mapping[str, float] = MappingProxyType({
    DIM_HONEYPOT: 0.25,
    DIM_LIQUIDITY: 0.20,
    DIM_CONTRACT: 0.15,
    DIM_SOCIAL: 0.10,
    DIM_VOLUME: 0.10,
    DIM_DEVELOPER: 0.10,
    DIM_COMMUNITY: 0.10,
})

# Same weights in integer percent; keeps the all-dimensions-present mean exact.
_WEIGHT_UNITS: Mapping[str, int] = MappingProxyType(
    {k: round(w * 100) for k, w in SAFETY_WEIGHTS.items()}
)

SAFE_THRESHOLD = 80
MODERATE_THRESHOLD = 60
RISKY_THRESHOLD = 40

COLOR_SAFE = "#00FF00"
COLOR_MODERATE = "#FFA500"
COLOR_RISKY = "#FF6600"
COLOR_DANGEROUS = "#FF0000"
COLOR_UNKNOWN = "#808080"

SAFETY_COLORS: Mapping[SafetyLevel, str] = MappingProxyType({
    SafetyLevel.SAFE: COLOR_SAFE,
    SafetyLevel.MODERATE: COLOR_MODERATE,
    SafetyLevel.RISKY: COLOR_RISKY,
    SafetyLevel.DANGEROUS: COLOR_DANGEROUS,
})


def _dimension_score(record: Any, dimension: str) -> float | None:
    """Score of one dimension in record, or None if absent or not a finite number."""
    if isinstance(record, ComprehensiveSafetyRecord):
        value = record.reports.get(dimension)
    elif isinstance(record, Mapping):
        value = record.get(dimension)
    else:
        return None
    if isinstance(value, SubReport):
        return value.score
    if isinstance(value, Mapping):
        return numeric_score(value.get("score"))
    return None


def contributing_dimensions(record: Any) -> tuple[str, ...]:
    """Weighted dimensions in record that carry a numeric score, in weight-table order."""
    return tuple(k for k in SAFETY_WEIGHTS if _dimension_score(record, k) is not None)


def compute_overall_score(record: Any) -> float:
    """
    Weighted mean of dimension scores, re-normalised over present dimensions.

    record may be a ComprehensiveSafetyRecord or any mapping of dimension ->
    SubReport / payload mapping. Missing, malformed or non-numeric dimensions are
    skipped. Returns exactly 0.0 when nothing contributes; the result is clamped
    to [0, 100] when the remote reports an out-of-range sub-score.
    """
    total = 0.0
    units_used = 0
    for dimension, units in _WEIGHT_UNITS.items():
        score = _dimension_score(record, dimension)
        if score is None:
            continue
        total += score * units
        units_used += units
    if units_used == 0:
        return 0.0
    return max(0.0, min(100.0, total / units_used))


def classify(score: Any) -> SafetyLevel:
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return SafetyLevel.DANGEROUS
    if score >= SAFE_THRESHOLD:
        return SafetyLevel.SAFE
    if score >= MODERATE_THRESHOLD:
        return SafetyLevel.MODERATE
    if score >= RISKY_THRESHOLD:
        return SafetyLevel.RISKY
    return SafetyLevel.DANGEROUS


def color_for(level: Any) -> str:
    """Display color for a safety level; anything unrecognised is gray."""
    try:
        key = SafetyLevel(level)
    except (ValueError, TypeError):
        return COLOR_UNKNOWN
    return SAFETY_COLORS.get(key, COLOR_UNKNOWN)


def aggregate(record: Any) -> AggregateResult:
    """Overall score, tier, color and contributing dimensions for record."""
    score = compute_overall_score(record)
    level = classify(score)
    return AggregateResult(
        overall_score=score,
        safety_level=level,
        safety_color=color_for(level),
        contributing_dimensions=contributing_dimensions(record),
    )
