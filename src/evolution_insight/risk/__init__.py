"""Risk scoring: file/function composite risk and contributor burnout."""

from .burnout import analyze_burnout_risk, burnout_score, classify_burnout
from .models import (
    AuthorBurnoutInsight,
    BurnoutAnalysis,
    BurnoutPattern,
    RiskAnalysis,
    RiskLevel,
    RiskScore,
    RiskSummary,
    SubjectKind,
    TeamBurnoutInsights,
)
from .scoring import (
    analyze_complexity_and_churn,
    classify_risk,
    compute_risk,
    score_file_risks,
    score_function_risks,
)

__all__ = [
    "AuthorBurnoutInsight",
    "BurnoutAnalysis",
    "BurnoutPattern",
    "RiskAnalysis",
    "RiskLevel",
    "RiskScore",
    "RiskSummary",
    "SubjectKind",
    "TeamBurnoutInsights",
    "analyze_burnout_risk",
    "analyze_complexity_and_churn",
    "burnout_score",
    "classify_burnout",
    "classify_risk",
    "compute_risk",
    "score_file_risks",
    "score_function_risks",
]
