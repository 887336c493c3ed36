"""Per-function complexity histories across a commit sequence."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from typing import Optional

import numpy as np

from ..config import AnalysisConfig, TrendConfig
from ..logging_config import get_logger
from ..temporal.models import Commit
from ..temporal.normalizer import chronological
from .differ import analyze_complexity
from .models import (
    ComplexityChangeEvent,
    ComplexityTrendResult,
    FunctionComplexityChange,
    FunctionComplexitySample,
    FunctionComplexityTrend,
)

logger = get_logger(__name__)

FunctionKey = tuple[str, str]


def _linear_slope(values: Sequence[float]) -> float:
    """Least-squares slope of values over their index."""
    if len(values) < 2:
        return 0.0
    x = np.arange(len(values), dtype=float)
    slope, _intercept = np.polyfit(x, np.asarray(values, dtype=float), 1)
    return round(float(slope), 4)


def _count_increases(values: Sequence[int]) -> int:
    return sum(1 for prev, cur in zip(values, values[1:]) if cur > prev)


class ComplexityTrendTracker:
    """Owns the append-only sample history keyed by ``(file, function)``.

    Feed commits in chronological order via ``record``; ``trends`` can be
    called at any point and reflects everything recorded so far.
    """

    def __init__(self, config: Optional[TrendConfig] = None):
        self.config = config or TrendConfig()
        self._history: dict[FunctionKey, list[FunctionComplexitySample]] = defaultdict(list)
        self._flagged: set[FunctionKey] = set()
        self._change_counts: dict[FunctionKey, int] = defaultdict(int)
        self._authors: dict[FunctionKey, set[str]] = defaultdict(set)

    def record(self, commit: Commit, changes: Iterable[FunctionComplexityChange]) -> None:
        if commit.timestamp is None:
            raise ValueError(f"commit {commit.hash[:12]} has no timestamp")

        for change in changes:
            key = change.key
            self._change_counts[key] += 1
            if commit.author:
                self._authors[key].add(commit.author)
            if change.refactoring_candidate:
                self._flagged.add(key)
            if change.is_deleted:
                continue
            self._history[key].append(
                FunctionComplexitySample(
                    file=change.file,
                    function=change.function,
                    commit_hash=commit.hash,
                    timestamp=commit.timestamp,
                    complexity=change.after_complexity,
                    nesting_depth=change.after_nesting_depth,
                    line_count=change.after_line_count,
                    complexity_increase=change.complexity_increase,
                    is_significant_increase=change.is_significant_increase,
                )
            )

    def trend(self, key: FunctionKey) -> FunctionComplexityTrend:
        history = tuple(self._history.get(key, ()))
        flagged = key in self._flagged
        file, function = key

        if len(history) < self.config.min_history:
            return FunctionComplexityTrend(
                file=file,
                function=function,
                history=history,
                refactoring_candidate=flagged,
                insufficient_data=True,
            )

        complexities = [s.complexity for s in history]
        growth_rate = (complexities[-1] - complexities[0]) / len(complexities)
        transitions = len(complexities) - 1
        increasing = _count_increases(complexities) > transitions / 2

        return FunctionComplexityTrend(
            file=file,
            function=function,
            history=history,
            growth_rate=round(growth_rate, 4),
            slope=_linear_slope(complexities),
            increasing_trend=increasing,
            needs_refactoring=increasing and growth_rate > self.config.growth_rate_threshold,
            refactoring_candidate=flagged,
            insufficient_data=False,
        )

    def trends(self) -> list[FunctionComplexityTrend]:
        keys = sorted(set(self._history) | self._flagged)
        return [self.trend(key) for key in keys]

    @property
    def change_counts(self) -> dict[FunctionKey, int]:
        return dict(sorted(self._change_counts.items()))

    @property
    def authors(self) -> dict[FunctionKey, frozenset[str]]:
        return {key: frozenset(names) for key, names in sorted(self._authors.items())}


def track_complexity_trends(
    commits: Iterable[Commit], config: Optional[AnalysisConfig] = None
) -> ComplexityTrendResult:
    """Run the complexity differ over every commit diff and collect trends.

    Commits without a diff or without a valid timestamp are skipped.
    """
    config = config or AnalysisConfig()
    commits = list(commits)

    skipped_no_timestamp = sum(1 for c in commits if c.timestamp is None)
    if skipped_no_timestamp:
        logger.warning("Skipping %d commits without a valid timestamp", skipped_no_timestamp)

    tracker = ComplexityTrendTracker(config.trends)
    events: list[ComplexityChangeEvent] = []
    skipped_no_diff = 0

    for commit in chronological(commits):
        if not commit.diff:
            skipped_no_diff += 1
            continue
        changes = analyze_complexity(commit.diff, config.complexity)
        tracker.record(commit, changes)
        events.extend(
            ComplexityChangeEvent(
                change=change,
                commit_hash=commit.hash,
                timestamp=commit.timestamp,
                author=commit.author,
            )
            for change in changes
            if change.is_complexity_increasing
        )

    if skipped_no_diff:
        logger.debug("%d commits carried no diff", skipped_no_diff)

    all_trends = tracker.trends()
    relevant = [t for t in all_trends if t.increasing_trend or t.refactoring_candidate]
    logger.info(
        "Tracked %d functions, %d with increasing or flagged complexity",
        len(all_trends),
        len(relevant),
    )

    return ComplexityTrendResult(
        complexity_changes=tuple(events),
        complexity_trends=tuple(relevant),
        all_trends=tuple(all_trends),
        function_change_counts=tracker.change_counts,
        function_authors=tracker.authors,
    )
