"""
Analysis — report types, safety scoring, and the concurrent token analyzer.
"""

from tokensafety.analysis.analyzer import TokenSafetyAnalyzer  # noqa: F401
from tokensafety.analysis.reports import (  # noqa: F401
    AggregateResult,
    ComprehensiveSafetyRecord,
    SafetyLevel,
    SubReport,
)
from tokensafety.analysis.scoring import (  # noqa: F401
    SAFETY_WEIGHTS,
    aggregate,
    classify,
    color_for,
    compute_overall_score,
)

__all__ = [
    "SAFETY_WEIGHTS",
    "AggregateResult",
    "ComprehensiveSafetyRecord",
    "SafetyLevel",
    "SubReport",
    "TokenSafetyAnalyzer",
    "aggregate",
    "classify",
    "color_for",
    "compute_overall_score",
]
