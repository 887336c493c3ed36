"""Ownership drift: per-file ownership timelines and stability."""

from .drift import (
    analyze_ownership_drift,
    calculate_stability_scores,
    detect_ownership_changes,
    find_rapid_change_windows,
    generate_ownership_insights,
)
from .models import (
    FileAuthorship,
    FileOwnershipInsight,
    OwnershipChangeSummary,
    OwnershipDriftResult,
    OwnershipInsights,
    OwnershipPeriod,
    RapidChangeWindow,
    StabilityClass,
    StabilityScore,
)
from .timeline import extract_file_authorships

__all__ = [
    "FileAuthorship",
    "FileOwnershipInsight",
    "OwnershipChangeSummary",
    "OwnershipDriftResult",
    "OwnershipInsights",
    "OwnershipPeriod",
    "RapidChangeWindow",
    "StabilityClass",
    "StabilityScore",
    "analyze_ownership_drift",
    "calculate_stability_scores",
    "detect_ownership_changes",
    "extract_file_authorships",
    "find_rapid_change_windows",
    "generate_ownership_insights",
]
