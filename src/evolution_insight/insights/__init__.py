"""Feature-death heuristic and combined cross-analysis insights."""

from .combined import generate_combined_insights, identify_issues
from .feature_death import analyze_feature_death
from .models import (
    CombinedInsights,
    FeatureDeathAnalysis,
    FeatureDeathFile,
    Issue,
    Priority,
    TodoItem,
)

__all__ = [
    "CombinedInsights",
    "FeatureDeathAnalysis",
    "FeatureDeathFile",
    "Issue",
    "Priority",
    "TodoItem",
    "analyze_feature_death",
    "generate_combined_insights",
    "identify_issues",
]
