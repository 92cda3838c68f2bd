"""
Report types: per-dimension sub-reports, the aggregate result, and the merged
record returned by a full token analysis.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

# Dimensions fetched by a full token analysis, in fetch order.
DIM_SAFETY = "safety"
DIM_RUG_SCORE = "rug_score"
DIM_SAFETY_SCORE = "safety_score"
DIM_HONEYPOT = "honeypot"
DIM_LIQUIDITY = "liquidity"
DIM_CONTRACT = "contract"
DIM_RISK = "risk"
DIM_METADATA = "metadata"
DIM_SOCIAL = "social"
DIM_DEVELOPER = "developer"
DIM_VOLUME = "volume"
DIM_PRICE_MANIPULATION = "price_manipulation"
DIM_COMMUNITY = "community"
DIM_AUDIT = "audit"
DIM_TEAM = "team"
DIM_FUNDING = "funding"
DIM_COMPLIANCE = "compliance"
DIM_SENTIMENT = "sentiment"

TOKEN_DIMENSIONS: tuple[str, ...] = (
    DIM_SAFETY,
    DIM_RUG_SCORE,
    DIM_SAFETY_SCORE,
    DIM_HONEYPOT,
    DIM_LIQUIDITY,
    DIM_CONTRACT,
    DIM_RISK,
    DIM_METADATA,
    DIM_SOCIAL,
    DIM_DEVELOPER,
    DIM_VOLUME,
    DIM_PRICE_MANIPULATION,
    DIM_COMMUNITY,
    DIM_AUDIT,
    DIM_TEAM,
    DIM_FUNDING,
    DIM_COMPLIANCE,
    DIM_SENTIMENT,
)


class SafetyLevel(str, Enum):
    SAFE = "SAFE"
    MODERATE = "MODERATE"
    RISKY = "RISKY"
    DANGEROUS = "DANGEROUS"


def numeric_score(value: Any) -> float | None:
    """Return value as float if it is a finite real number (bools excluded), else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        f = float(value)
    except OverflowError:
        return None
    return f if math.isfinite(f) else None


@dataclass(frozen=True)
class SubReport:
    """Opaque payload for one dimension, plus its optional numeric score."""

    dimension: str
    payload: Any

    @property
    def score(self) -> float | None:
        if not isinstance(self.payload, Mapping):
            return None
        return numeric_score(self.payload.get("score"))


@dataclass(frozen=True)
class AggregateResult:
    overall_score: float
    safety_level: SafetyLevel
    safety_color: str
    # Weighted dimensions that carried a numeric score; empty means the degenerate result.
    contributing_dimensions: tuple[str, ...] = ()

    @property
    def is_degenerate(self) -> bool:
        return not self.contributing_dimensions


@dataclass
class ComprehensiveSafetyRecord:
    """All sub-reports for one token, identifying fields, and the aggregate result."""

    token_address: str
    timestamp: str
    reports: dict[str, SubReport]
    result: AggregateResult
    failed_dimensions: tuple[str, ...] = field(default_factory=tuple)

    def __getitem__(self, dimension: str) -> SubReport:
        return self.reports[dimension]

    def __contains__(self, dimension: object) -> bool:
        return dimension in self.reports

    def get(self, dimension: str, default: Any = None) -> Any:
        return self.reports.get(dimension, default)

    @property
    def overall_score(self) -> float:
        return self.result.overall_score

    @property
    def safety_level(self) -> SafetyLevel:
        return self.result.safety_level

    @property
    def safety_color(self) -> str:
        return self.result.safety_color

    def to_dict(self) -> dict[str, Any]:
        """Flat JSON-serialisable view: identifying fields, one key per dimension, aggregate."""
        out: dict[str, Any] = {
            "token_address": self.token_address,
            "timestamp": self.timestamp,
        }
        for dimension, report in self.reports.items():
            out[dimension] = report.payload
        out["overall_score"] = self.result.overall_score
        out["safety_level"] = self.result.safety_level.value
        out["safety_color"] = self.result.safety_color
        out["contributing_dimensions"] = list(self.result.contributing_dimensions)
        out["failed_dimensions"] = list(self.failed_dimensions)
        return out
