"""Feature-death heuristic: how long TODOs have been left alone.

Per file with TODOs, ages are measured from each TODO's date to ``as_of``:

    risk = min(1, average_age_days / stale_threshold_days)

A file is stale once its oldest TODO reaches the threshold. TODOs without a
date are counted but carry no age.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Optional

from ..config import FeatureDeathConfig
from ..logging_config import get_logger
from ..risk.models import RiskLevel
from .models import FeatureDeathAnalysis, FeatureDeathFile, TodoItem

logger = get_logger(__name__)


def classify_feature_risk(score: float, config: FeatureDeathConfig) -> RiskLevel:
    if score >= config.high_risk_threshold:
        return RiskLevel.HIGH
    if score >= config.medium_risk_threshold:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _file_feature_death(
    file: str, todos: Sequence[TodoItem], as_of: int, config: FeatureDeathConfig
) -> FeatureDeathFile:
    ages = [max(0, as_of - t.date) / 86400 for t in todos if t.date is not None]
    if not ages:
        return FeatureDeathFile(
            file=file,
            todo_count=len(todos),
            dated_todo_count=0,
            average_age_days=None,
            max_age_days=None,
            is_stale=False,
            risk_score=0.0,
            risk_level=RiskLevel.LOW,
            todos=tuple(todos),
        )

    average = sum(ages) / len(ages)
    oldest = max(ages)
    score = round(min(1.0, average / config.stale_threshold_days), 4)
    return FeatureDeathFile(
        file=file,
        todo_count=len(todos),
        dated_todo_count=len(ages),
        average_age_days=round(average),
        max_age_days=round(oldest),
        is_stale=oldest >= config.stale_threshold_days,
        risk_score=score,
        risk_level=classify_feature_risk(score, config),
        todos=tuple(todos),
    )


def analyze_feature_death(
    inventory: Mapping[str, Sequence[TodoItem]],
    as_of: Optional[int] = None,
    config: Optional[FeatureDeathConfig] = None,
) -> FeatureDeathAnalysis:
    """Score every file in a TODO inventory.

    Args:
        inventory: TODOs per file, as produced by a TodoInventorySource
        as_of: Reference time; defaults to the newest TODO date
        config: Thresholds
    """
    config = config or FeatureDeathConfig()
    if as_of is None:
        dates = [t.date for todos in inventory.values() for t in todos if t.date is not None]
        as_of = max(dates) if dates else None
    if as_of is None:
        logger.info("No dated TODOs; feature-death ages unavailable")
        as_of = 0

    files = {
        file: _file_feature_death(file, todos, as_of, config)
        for file, todos in sorted(inventory.items())
        if todos
    }
    ranked = sorted(files.values(), key=lambda f: (-f.risk_score, f.file))
    return FeatureDeathAnalysis(
        files=files,
        high_risk_files=tuple(f.file for f in ranked if f.risk_level is RiskLevel.HIGH),
        stale_files=tuple(f.file for f in ranked if f.is_stale),
        as_of=as_of,
    )
