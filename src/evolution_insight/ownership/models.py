"""Data models for ownership drift analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class StabilityClass(str, Enum):
    HIGH = "high-stability"
    MEDIUM = "medium-stability"
    LOW = "low-stability"
    INSUFFICIENT_DATA = "insufficient-data"


@dataclass(frozen=True)
class OwnershipPeriod:
    """A contiguous run of commits on one file by the same author.

    ``end_timestamp`` is None for the file's current (open) period; its
    ``duration_days`` is then measured to the analysis reference time.
    """

    file: str
    author: str
    start_timestamp: int
    end_timestamp: Optional[int]
    duration_days: int
    commit_count: int

    @property
    def is_open(self) -> bool:
        return self.end_timestamp is None


@dataclass(frozen=True)
class FileCommitRef:
    hash: str
    author: str
    timestamp: int


@dataclass(frozen=True)
class FileAuthorship:
    file: str
    current_owner: str
    periods: tuple[OwnershipPeriod, ...]
    commit_history: tuple[FileCommitRef, ...]  # oldest first
    authors: frozenset[str]

    @property
    def commit_count(self) -> int:
        return len(self.commit_history)


@dataclass(frozen=True)
class OwnershipChange:
    from_author: str
    to_author: str
    timestamp: int


@dataclass(frozen=True)
class RapidChangeWindow:
    file: str
    start_timestamp: int
    end_timestamp: int
    duration_days: int
    change_count: int
    unique_authors: frozenset[str]


@dataclass(frozen=True)
class OwnershipChangeSummary:
    file: str
    total_owners: int
    total_changes: int
    rapid_changes: tuple[RapidChangeWindow, ...] = ()
    average_ownership_duration: float = 0.0

    @property
    def has_rapid_changes(self) -> bool:
        return bool(self.rapid_changes)


@dataclass(frozen=True)
class StabilityScore:
    file: str
    score: Optional[float]  # None when there is too little history
    classification: StabilityClass
    commit_count: int
    has_rapid_changes: bool = False


@dataclass(frozen=True)
class FileOwnershipInsight:
    file: str
    score: float
    classification: StabilityClass
    current_owner: str
    commit_count: int
    suggestions: tuple[str, ...] = ()
    rapid_changes: tuple[RapidChangeWindow, ...] = ()


@dataclass(frozen=True)
class OwnershipRecommendation:
    file: str
    score: float
    summary: str
    suggestions: tuple[str, ...]


@dataclass(frozen=True)
class OverallOwnershipInsights:
    total_files_analyzed: int = 0
    ownership_issues_detected: int = 0
    rapid_changes_detected: int = 0
    stable_files: int = 0
    unstable_files: int = 0
    insufficient_data_files: int = 0


@dataclass(frozen=True)
class OwnershipInsights:
    overall: OverallOwnershipInsights
    file_insights: dict[str, FileOwnershipInsight] = field(default_factory=dict)
    recommendations: tuple[OwnershipRecommendation, ...] = ()


@dataclass(frozen=True)
class OwnershipDriftResult:
    file_authors: dict[str, FileAuthorship]
    ownership_changes: dict[str, OwnershipChangeSummary]
    stability_scores: dict[str, StabilityScore]
    insights: OwnershipInsights
    sorted_files: tuple[str, ...] = ()  # scored files, least stable first
    unstable_files: tuple[str, ...] = ()
    medium_stability_files: tuple[str, ...] = ()
    high_stability_files: tuple[str, ...] = ()
