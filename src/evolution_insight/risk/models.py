"""Data models for risk and burnout scoring."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..temporal.models import FileChurn


class RiskLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SubjectKind(str, Enum):
    FILE = "file"
    FUNCTION = "function"
    AUTHOR = "author"


@dataclass(frozen=True)
class RiskScore:
    """Composite 0-10 risk for one file, function or author.

    ``subject`` is the file path, ``"path::function"`` or the author.
    """

    subject: str
    subject_kind: SubjectKind
    churn_component: float
    complexity_component: float
    ownership_component: float
    trend_component: float
    composite_score: float
    classification: RiskLevel
    is_refactoring_candidate: bool = False
    change_count: int = 0
    latest_complexity: int = 0
    authors: tuple[str, ...] = ()
    increasing_complexity: bool = False


@dataclass(frozen=True)
class RiskSummary:
    total_analyzed: int = 0
    high_risk: int = 0
    medium_risk: int = 0
    low_risk: int = 0
    refactoring_candidates: int = 0


@dataclass(frozen=True)
class RiskAnalysis:
    summary: RiskSummary
    high: tuple[RiskScore, ...] = ()
    medium: tuple[RiskScore, ...] = ()
    low: tuple[RiskScore, ...] = ()
    detailed: tuple[RiskScore, ...] = ()  # highest score first
    file_churn: tuple[FileChurn, ...] = ()  # most changed first
    file_risks: tuple[RiskScore, ...] = ()


class BurnoutPattern(str, Enum):
    HIGH_OFF_HOURS = "high-off-hours"
    WEEKEND_WORK = "weekend-work"
    LATE_NIGHT_STREAK = "late-night-streak"


@dataclass(frozen=True)
class ConcerningPattern:
    type: BurnoutPattern
    description: str
    value: float


@dataclass(frozen=True)
class AuthorBurnoutInsight:
    author: str
    total_commits: int
    off_hours_commits: int
    weekend_commits: int
    off_hours_ratio: float
    weekend_ratio: float
    burnout_risk_score: float
    classification: RiskLevel
    longest_late_night_streak: int = 0
    concerning_patterns: tuple[ConcerningPattern, ...] = ()
    risk: Optional[RiskScore] = None


@dataclass(frozen=True)
class PatternFrequency:
    type: BurnoutPattern
    count: int
    percentage: float


@dataclass(frozen=True)
class TeamBurnoutInsights:
    total_authors: int = 0
    analyzed_authors: int = 0
    high_risk_authors: int = 0
    medium_risk_authors: int = 0
    low_risk_authors: int = 0
    off_hours_percentage: float = 0.0  # of analysed authors' commits, 0-100
    weekend_percentage: float = 0.0
    top_patterns: tuple[PatternFrequency, ...] = ()


@dataclass(frozen=True)
class BurnoutRecommendation:
    description: str
    actions: tuple[str, ...]


@dataclass(frozen=True)
class BurnoutInsights:
    team: TeamBurnoutInsights
    authors: dict[str, AuthorBurnoutInsight] = field(default_factory=dict)
    recommendations: tuple[BurnoutRecommendation, ...] = ()


@dataclass(frozen=True)
class BurnoutAnalysis:
    insights: BurnoutInsights
    high_risk_authors: tuple[str, ...] = ()
    medium_risk_authors: tuple[str, ...] = ()
    low_risk_authors: tuple[str, ...] = ()
    excluded_authors: tuple[str, ...] = ()  # below the minimum commit count
