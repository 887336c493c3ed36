"""
Evolution Insight - Code Evolution Analytics

Derives engineering-health signals from a repository's commit history:
churn, function complexity trends, ownership stability, composite risk and
contributor burnout risk.
"""

__version__ = "0.1.0"

from .api import analyze_repository
from .engine import EvolutionEngine, EvolutionReport
from .graph import build_commit_graph
from .complexity import track_complexity_trends
from .ownership import analyze_ownership_drift
from .risk import analyze_burnout_risk

__all__ = [
    "analyze_repository",  # Main entry point
    "EvolutionEngine",  # Bring-your-own collaborators
    "EvolutionReport",
    "analyze_burnout_risk",
    "analyze_ownership_drift",
    "build_commit_graph",
    "track_complexity_trends",
]
