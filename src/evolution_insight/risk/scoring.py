"""Composite file and function risk.

Each subject gets components on a 0-10 scale:

    churn      = min(10, change_count / churn_divisor)
    complexity = min(10, latest_complexity / complexity_divisor)
    ownership  = (1 - stability) * 10          (files with a stability score only)
    trend      = growth_rate * trend_multiplier (additive, unweighted)

    composite  = churn * w_churn + complexity * w_complexity
               + ownership * w_ownership + trend

The composite is clamped to [0, 10] and rounded to two decimals. A subject is
a refactoring candidate only when the composite, the complexity component and
the churn component are all above their thresholds.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Optional

from ..complexity.models import ComplexityTrendResult, FunctionComplexityTrend
from ..config import RiskConfig
from ..logging_config import get_logger
from ..ownership.models import OwnershipDriftResult
from ..temporal.churn import build_file_churn
from ..temporal.models import Commit, FileChurn
from .models import RiskAnalysis, RiskLevel, RiskScore, RiskSummary, SubjectKind

logger = get_logger(__name__)


def classify_risk(score: float, config: RiskConfig) -> RiskLevel:
    if score >= config.high_risk_threshold:
        return RiskLevel.HIGH
    if score >= config.medium_risk_threshold:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def churn_component(change_count: int, config: RiskConfig) -> float:
    return min(config.max_score, change_count / config.churn_divisor)


def complexity_component(latest_complexity: float, config: RiskConfig) -> float:
    return min(config.max_score, latest_complexity / config.complexity_divisor)


def ownership_component(stability: Optional[float], config: RiskConfig) -> float:
    if stability is None:
        return 0.0
    return (1.0 - stability) * config.max_score


def compute_risk(
    subject: str,
    subject_kind: SubjectKind,
    change_count: int,
    latest_complexity: int,
    growth_rate: float,
    stability: Optional[float] = None,
    authors: tuple[str, ...] = (),
    increasing_complexity: bool = False,
    config: Optional[RiskConfig] = None,
) -> RiskScore:
    config = config or RiskConfig()
    churn = churn_component(change_count, config)
    complexity = complexity_component(latest_complexity, config)
    ownership = ownership_component(stability, config)
    trend = growth_rate * config.trend_multiplier

    raw = (
        churn * config.churn_weight
        + complexity * config.complexity_weight
        + ownership * config.ownership_weight
        + trend
    )
    composite = round(max(0.0, min(config.max_score, raw)), 2)

    return RiskScore(
        subject=subject,
        subject_kind=subject_kind,
        churn_component=round(churn, 4),
        complexity_component=round(complexity, 4),
        ownership_component=round(ownership, 4),
        trend_component=round(trend, 4),
        composite_score=composite,
        classification=classify_risk(composite, config),
        is_refactoring_candidate=(
            composite >= config.refactor_score_threshold
            and complexity > config.refactor_complexity_threshold
            and churn > config.refactor_churn_threshold
        ),
        change_count=change_count,
        latest_complexity=latest_complexity,
        authors=authors,
        increasing_complexity=increasing_complexity,
    )


def _rank(scores: Iterable[RiskScore]) -> list[RiskScore]:
    return sorted(scores, key=lambda s: (-s.composite_score, s.subject))


def score_function_risks(
    complexity_result: ComplexityTrendResult, config: Optional[RiskConfig] = None
) -> list[RiskScore]:
    """Risk for every function the trend tracker saw, highest first."""
    config = config or RiskConfig()
    trends = {t.key: t for t in complexity_result.all_trends}
    keys = sorted(set(trends) | set(complexity_result.function_change_counts))

    scores: list[RiskScore] = []
    for key in keys:
        trend = trends.get(key)
        file, function = key
        scores.append(
            compute_risk(
                subject=f"{file}::{function}",
                subject_kind=SubjectKind.FUNCTION,
                change_count=complexity_result.function_change_counts.get(key, 0),
                latest_complexity=(trend.latest_complexity or 0) if trend else 0,
                growth_rate=trend.growth_rate if trend else 0.0,
                authors=tuple(sorted(complexity_result.function_authors.get(key, ()))),
                increasing_complexity=trend.increasing_trend if trend else False,
                config=config,
            )
        )
    return _rank(scores)


def _trends_by_file(
    complexity_result: Optional[ComplexityTrendResult],
) -> dict[str, list[FunctionComplexityTrend]]:
    grouped: dict[str, list[FunctionComplexityTrend]] = {}
    if complexity_result is None:
        return grouped
    for trend in complexity_result.all_trends:
        grouped.setdefault(trend.file, []).append(trend)
    return grouped


def score_file_risks(
    commits: Iterable[Commit],
    complexity_result: Optional[ComplexityTrendResult] = None,
    ownership_result: Optional[OwnershipDriftResult] = None,
    config: Optional[RiskConfig] = None,
    file_churn: Optional[Mapping[str, FileChurn]] = None,
) -> list[RiskScore]:
    """Risk for every touched file, highest first.

    A file's complexity and growth come from its most complex and fastest
    growing function; files without function data score zero there.
    """
    config = config or RiskConfig()
    churn_by_file = file_churn if file_churn is not None else build_file_churn(commits)
    trends_by_file = _trends_by_file(complexity_result)
    stability = ownership_result.stability_scores if ownership_result else {}

    scores: list[RiskScore] = []
    for path in sorted(churn_by_file):
        churn = churn_by_file[path]
        trends = trends_by_file.get(path, [])
        latest = max(((t.latest_complexity or 0) for t in trends), default=0)
        growth = max((t.growth_rate for t in trends), default=0.0)
        file_stability = stability.get(path)

        scores.append(
            compute_risk(
                subject=path,
                subject_kind=SubjectKind.FILE,
                change_count=churn.change_count,
                latest_complexity=latest,
                growth_rate=growth,
                stability=file_stability.score if file_stability else None,
                authors=churn.authors,
                increasing_complexity=any(t.increasing_trend for t in trends),
                config=config,
            )
        )
    return _rank(scores)


def analyze_complexity_and_churn(
    commits: Iterable[Commit],
    complexity_result: ComplexityTrendResult,
    ownership_result: Optional[OwnershipDriftResult] = None,
    config: Optional[RiskConfig] = None,
) -> RiskAnalysis:
    """Function-level risk grouped by level, plus file churn and file risk."""
    config = config or RiskConfig()
    commits = list(commits)
    churn_by_file = build_file_churn(commits)

    detailed = score_function_risks(complexity_result, config)
    file_risks = score_file_risks(
        commits, complexity_result, ownership_result, config, file_churn=churn_by_file
    )

    def level(risk_level: RiskLevel) -> tuple[RiskScore, ...]:
        return tuple(s for s in detailed if s.classification is risk_level)

    high, medium, low = level(RiskLevel.HIGH), level(RiskLevel.MEDIUM), level(RiskLevel.LOW)
    summary = RiskSummary(
        total_analyzed=len(detailed),
        high_risk=len(high),
        medium_risk=len(medium),
        low_risk=len(low),
        refactoring_candidates=sum(1 for s in detailed if s.is_refactoring_candidate),
    )
    logger.info(
        "Risk: %d functions (%d high), %d files", len(detailed), len(high), len(file_risks)
    )

    return RiskAnalysis(
        summary=summary,
        high=high,
        medium=medium,
        low=low,
        detailed=tuple(detailed),
        file_churn=tuple(
            sorted(churn_by_file.values(), key=lambda c: (-c.change_count, c.path))
        ),
        file_risks=tuple(file_risks),
    )
