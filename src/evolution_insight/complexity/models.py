"""Data models for function-level complexity analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class ExtractedFunction:
    """Before/after text of one function touched by a diff."""

    file: str
    name: str
    before: str
    after: str


@dataclass(frozen=True)
class FunctionComplexityChange:
    file: str
    function: str
    before_complexity: int
    after_complexity: int
    complexity_increase: int
    nesting_level_change: int
    line_count_change: int
    before_line_count: int
    after_line_count: int
    before_nesting_depth: int = 0
    after_nesting_depth: int = 0
    is_complexity_increasing: bool = False
    is_significant_increase: bool = False
    refactoring_candidate: bool = False
    is_new: bool = False  # absent before the commit
    is_deleted: bool = False  # absent after the commit

    @property
    def key(self) -> tuple[str, str]:
        return (self.file, self.function)


@dataclass(frozen=True)
class ComplexityChangeEvent:
    """A complexity increase attributed to the commit that introduced it."""

    change: FunctionComplexityChange
    commit_hash: str
    timestamp: int
    author: str


@dataclass(frozen=True)
class FunctionComplexitySample:
    file: str
    function: str
    commit_hash: str
    timestamp: int
    complexity: int
    nesting_depth: int
    line_count: int
    complexity_increase: int = 0
    is_significant_increase: bool = False


@dataclass(frozen=True)
class FunctionComplexityTrend:
    file: str
    function: str
    history: tuple[FunctionComplexitySample, ...]
    growth_rate: float = 0.0  # (last - first) / len(history)
    slope: float = 0.0  # least-squares slope over sample index
    increasing_trend: bool = False
    needs_refactoring: bool = False
    refactoring_candidate: bool = False  # any commit flagged it
    insufficient_data: bool = True

    @property
    def key(self) -> tuple[str, str]:
        return (self.file, self.function)

    @property
    def latest_complexity(self) -> Optional[int]:
        return self.history[-1].complexity if self.history else None


@dataclass(frozen=True)
class ComplexityTrendResult:
    complexity_changes: tuple[ComplexityChangeEvent, ...] = ()
    complexity_trends: tuple[FunctionComplexityTrend, ...] = ()  # increasing or flagged
    all_trends: tuple[FunctionComplexityTrend, ...] = ()
    function_change_counts: dict[tuple[str, str], int] = field(default_factory=dict)
    function_authors: dict[tuple[str, str], frozenset[str]] = field(default_factory=dict)

    def trend_for(self, file: str, function: str) -> Optional[FunctionComplexityTrend]:
        for trend in self.all_trends:
            if trend.file == file and trend.function == function:
                return trend
        return None
