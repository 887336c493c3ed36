"""Contributor burnout risk from commit-time patterns.

For each author with at least ``min_commits`` timestamped commits:

    off_ratio     = off-hours commits / commits
    weekend_ratio = weekend commits / commits
    score         = w_off * off_ratio + w_weekend * weekend_ratio

With ``include_weekends`` disabled the weekend term is dropped and the score
is the off-hours ratio alone. Hours and weekdays are taken in the author's
own UTC offset when the commit records one, otherwise in UTC.

Authors under the threshold are reported as excluded rather than low risk.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from ..config import BurnoutConfig
from ..logging_config import get_logger
from ..temporal.models import Commit
from .models import (
    AuthorBurnoutInsight,
    BurnoutAnalysis,
    BurnoutInsights,
    BurnoutPattern,
    BurnoutRecommendation,
    ConcerningPattern,
    PatternFrequency,
    RiskLevel,
    RiskScore,
    SubjectKind,
    TeamBurnoutInsights,
)

logger = get_logger(__name__)


def local_time(commit: Commit) -> datetime:
    """Commit time in the author's offset, or UTC when unknown."""
    assert commit.timestamp is not None
    offset = timedelta(minutes=commit.tz_offset_minutes or 0)
    return datetime.fromtimestamp(commit.timestamp, timezone(offset))


def longest_day_streak(days: Iterable[date]) -> int:
    ordered = sorted(set(days))
    if not ordered:
        return 0
    longest = current = 1
    for prev, cur in zip(ordered, ordered[1:]):
        current = current + 1 if (cur - prev).days == 1 else 1
        longest = max(longest, current)
    return longest


@dataclass
class _AuthorActivity:
    commits: int = 0
    off_hours: int = 0
    weekend: int = 0
    off_hours_days: set[date] = field(default_factory=set)


def _collect_activity(
    commits: Iterable[Commit], config: BurnoutConfig
) -> dict[str, _AuthorActivity]:
    activity: dict[str, _AuthorActivity] = defaultdict(_AuthorActivity)
    skipped = 0
    for commit in commits:
        if not commit.author or commit.timestamp is None:
            skipped += 1
            continue
        when = local_time(commit)
        entry = activity[commit.author]
        entry.commits += 1
        if config.is_off_hours(when.hour):
            entry.off_hours += 1
            entry.off_hours_days.add(when.date())
        if when.weekday() >= 5:
            entry.weekend += 1
    if skipped:
        logger.warning("Burnout analysis skipped %d commits without author or timestamp", skipped)
    return activity


def burnout_score(off_ratio: float, weekend_ratio: float, config: BurnoutConfig) -> float:
    if not config.include_weekends:
        return off_ratio
    return config.off_hours_weight * off_ratio + config.weekend_weight * weekend_ratio


def classify_burnout(score: float, config: BurnoutConfig) -> RiskLevel:
    if score >= config.high_risk_threshold:
        return RiskLevel.HIGH
    if score >= config.medium_risk_threshold:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _patterns(
    off_ratio: float, weekend_ratio: float, streak: int, config: BurnoutConfig
) -> tuple[ConcerningPattern, ...]:
    patterns: list[ConcerningPattern] = []
    if off_ratio >= config.off_hours_pattern_threshold:
        patterns.append(
            ConcerningPattern(
                type=BurnoutPattern.HIGH_OFF_HOURS,
                description=f"{off_ratio:.0%} of commits outside working hours",
                value=round(off_ratio, 4),
            )
        )
    if config.include_weekends and weekend_ratio >= config.weekend_pattern_threshold:
        patterns.append(
            ConcerningPattern(
                type=BurnoutPattern.WEEKEND_WORK,
                description=f"{weekend_ratio:.0%} of commits on weekends",
                value=round(weekend_ratio, 4),
            )
        )
    if streak >= config.late_night_streak_days:
        patterns.append(
            ConcerningPattern(
                type=BurnoutPattern.LATE_NIGHT_STREAK,
                description=f"Off-hours commits on {streak} consecutive days",
                value=float(streak),
            )
        )
    return tuple(patterns)


def _author_insight(
    author: str, entry: _AuthorActivity, config: BurnoutConfig
) -> AuthorBurnoutInsight:
    off_ratio = entry.off_hours / entry.commits
    weekend_ratio = entry.weekend / entry.commits
    score = round(burnout_score(off_ratio, weekend_ratio, config), 4)
    level = classify_burnout(score, config)
    streak = longest_day_streak(entry.off_hours_days)
    composite = round(score * 10, 2)

    return AuthorBurnoutInsight(
        author=author,
        total_commits=entry.commits,
        off_hours_commits=entry.off_hours,
        weekend_commits=entry.weekend,
        off_hours_ratio=round(off_ratio, 4),
        weekend_ratio=round(weekend_ratio, 4),
        burnout_risk_score=score,
        classification=level,
        longest_late_night_streak=streak,
        concerning_patterns=_patterns(off_ratio, weekend_ratio, streak, config),
        risk=RiskScore(
            subject=author,
            subject_kind=SubjectKind.AUTHOR,
            churn_component=0.0,
            complexity_component=0.0,
            ownership_component=0.0,
            trend_component=0.0,
            composite_score=composite,
            classification=level,
        ),
    )


def _recommendations(
    insights: dict[str, AuthorBurnoutInsight], pattern_counts: Counter[BurnoutPattern]
) -> tuple[BurnoutRecommendation, ...]:
    recommendations: list[BurnoutRecommendation] = []
    high = sorted(a for a, i in insights.items() if i.classification is RiskLevel.HIGH)
    if high:
        recommendations.append(
            BurnoutRecommendation(
                description=f"Review workload for {len(high)} high-risk contributor(s)",
                actions=(
                    "Hold one-on-one check-ins",
                    "Redistribute on-call and review load",
                ),
            )
        )
    if pattern_counts[BurnoutPattern.HIGH_OFF_HOURS]:
        recommendations.append(
            BurnoutRecommendation(
                description="Set healthier commit hour expectations",
                actions=("Use time-aware PR guidelines", "Schedule merges within working hours"),
            )
        )
    if pattern_counts[BurnoutPattern.WEEKEND_WORK]:
        recommendations.append(
            BurnoutRecommendation(
                description="Reduce weekend work",
                actions=("Avoid weekend deadlines", "Plan releases for weekdays"),
            )
        )
    if pattern_counts[BurnoutPattern.LATE_NIGHT_STREAK]:
        recommendations.append(
            BurnoutRecommendation(
                description="Watch for sustained late-night work",
                actions=("Check sprint scope", "Encourage time off after crunch periods"),
            )
        )
    return tuple(recommendations)


def analyze_burnout_risk(
    commits: Iterable[Commit], options: Optional[BurnoutConfig] = None
) -> BurnoutAnalysis:
    """Classify every sufficiently active author by commit-time patterns."""
    config = options or BurnoutConfig()
    activity = _collect_activity(commits, config)

    excluded = sorted(a for a, e in activity.items() if e.commits < config.min_commits)
    analysed = {
        author: _author_insight(author, entry, config)
        for author, entry in sorted(activity.items())
        if entry.commits >= config.min_commits
    }

    def ranked(level: RiskLevel) -> tuple[str, ...]:
        members = [i for i in analysed.values() if i.classification is level]
        members.sort(key=lambda i: (-i.burnout_risk_score, i.author))
        return tuple(i.author for i in members)

    high, medium, low = ranked(RiskLevel.HIGH), ranked(RiskLevel.MEDIUM), ranked(RiskLevel.LOW)

    pattern_counts: Counter[BurnoutPattern] = Counter(
        p.type for i in analysed.values() for p in i.concerning_patterns
    )
    total_commits = sum(i.total_commits for i in analysed.values())
    off_hours = sum(i.off_hours_commits for i in analysed.values())
    weekend = sum(i.weekend_commits for i in analysed.values())

    team = TeamBurnoutInsights(
        total_authors=len(activity),
        analyzed_authors=len(analysed),
        high_risk_authors=len(high),
        medium_risk_authors=len(medium),
        low_risk_authors=len(low),
        off_hours_percentage=round(off_hours / total_commits * 100, 1) if total_commits else 0.0,
        weekend_percentage=round(weekend / total_commits * 100, 1) if total_commits else 0.0,
        top_patterns=tuple(
            PatternFrequency(
                type=pattern,
                count=count,
                percentage=round(count / len(analysed) * 100, 1),
            )
            for pattern, count in sorted(
                pattern_counts.items(), key=lambda item: (-item[1], item[0].value)
            )
        ),
    )

    if excluded:
        logger.info(
            "%d authors below %d commits excluded from burnout scoring",
            len(excluded),
            config.min_commits,
        )

    return BurnoutAnalysis(
        insights=BurnoutInsights(
            team=team,
            authors=analysed,
            recommendations=_recommendations(analysed, pattern_counts),
        ),
        high_risk_authors=high,
        medium_risk_authors=medium,
        low_risk_authors=low,
        excluded_authors=tuple(excluded),
    )
