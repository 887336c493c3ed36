"""Data models for feature-death and combined insights."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from ..risk.models import RiskLevel


@dataclass(frozen=True)
class TodoItem:
    text: str
    date: Optional[int] = None  # unix seconds the line was last written, when known
    line: Optional[int] = None


@dataclass(frozen=True)
class FeatureDeathFile:
    file: str
    todo_count: int
    dated_todo_count: int
    average_age_days: Optional[int]
    max_age_days: Optional[int]
    is_stale: bool
    risk_score: float
    risk_level: RiskLevel
    todos: tuple[TodoItem, ...] = ()


@dataclass(frozen=True)
class FeatureDeathAnalysis:
    files: dict[str, FeatureDeathFile] = field(default_factory=dict)
    high_risk_files: tuple[str, ...] = ()
    stale_files: tuple[str, ...] = ()
    as_of: Optional[int] = None

    @property
    def total_todos(self) -> int:
        return sum(f.todo_count for f in self.files.values())


class Priority(IntEnum):
    LOW = 0
    MEDIUM = 1
    HIGH = 2
    CRITICAL = 3


@dataclass(frozen=True)
class Issue:
    id: str
    description: str
    priority: Priority
    subjects: tuple[str, ...] = ()


@dataclass(frozen=True)
class Recommendation:
    issue_id: str
    recommendation: str


@dataclass(frozen=True)
class ActionItem:
    action: str
    order: int
    source: str
    priority: Priority


@dataclass(frozen=True)
class InsightSummary:
    total_issues: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0


@dataclass(frozen=True)
class CombinedInsights:
    issues: tuple[Issue, ...] = ()  # most urgent first
    recommendations: tuple[Recommendation, ...] = ()
    action_items: tuple[ActionItem, ...] = ()
    summary: InsightSummary = field(default_factory=InsightSummary)
