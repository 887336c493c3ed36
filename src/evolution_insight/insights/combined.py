"""Cross-analysis insights: prioritised issues, recommendations, action items."""

from __future__ import annotations

from typing import Optional

from ..ownership.models import OwnershipDriftResult
from ..risk.models import BurnoutAnalysis, RiskAnalysis
from .models import (
    ActionItem,
    CombinedInsights,
    FeatureDeathAnalysis,
    InsightSummary,
    Issue,
    Priority,
    Recommendation,
)

_URGENCY = {
    Priority.CRITICAL: "(critical priority, act immediately)",
    Priority.HIGH: "(high priority, address soon)",
}


def identify_issues(
    ownership: Optional[OwnershipDriftResult] = None,
    burnout: Optional[BurnoutAnalysis] = None,
    feature_death: Optional[FeatureDeathAnalysis] = None,
    risk: Optional[RiskAnalysis] = None,
) -> list[Issue]:
    issues: list[Issue] = []

    if burnout is not None and burnout.high_risk_authors:
        issues.append(
            Issue(
                id="burnout-risk",
                description=f"High burnout risk for {len(burnout.high_risk_authors)} contributor(s)",
                priority=Priority.CRITICAL,
                subjects=burnout.high_risk_authors,
            )
        )

    if feature_death is not None and feature_death.high_risk_files:
        issues.append(
            Issue(
                id="abandoned-features",
                description=f"Abandoned features in {len(feature_death.high_risk_files)} file(s)",
                priority=Priority.HIGH,
                subjects=feature_death.high_risk_files,
            )
        )

    if risk is not None:
        candidates = tuple(s.subject for s in risk.detailed if s.is_refactoring_candidate)
        if candidates:
            issues.append(
                Issue(
                    id="refactoring-candidates",
                    description=f"{len(candidates)} complex, frequently changed function(s)",
                    priority=Priority.HIGH,
                    subjects=candidates,
                )
            )

    if ownership is not None and ownership.unstable_files:
        issues.append(
            Issue(
                id="ownership-instability",
                description=f"Low ownership stability in {len(ownership.unstable_files)} file(s)",
                priority=Priority.MEDIUM,
                subjects=ownership.unstable_files,
            )
        )

    issues.sort(key=lambda i: (-i.priority, i.id))
    return issues


def recommend(issues: list[Issue]) -> list[Recommendation]:
    recommendations = []
    for issue in issues:
        urgency = _URGENCY.get(issue.priority, "")
        text = f"Address the issue: {issue.description} {urgency}".strip()
        recommendations.append(Recommendation(issue_id=issue.id, recommendation=text))
    return recommendations


def generate_combined_insights(
    ownership: Optional[OwnershipDriftResult] = None,
    burnout: Optional[BurnoutAnalysis] = None,
    feature_death: Optional[FeatureDeathAnalysis] = None,
    risk: Optional[RiskAnalysis] = None,
) -> CombinedInsights:
    """Merge whichever analyses ran into one prioritised list."""
    issues = identify_issues(ownership, burnout, feature_death, risk)
    recommendations = recommend(issues)
    priorities = {i.id: i.priority for i in issues}
    actions = tuple(
        ActionItem(
            action=rec.recommendation,
            order=index,
            source=rec.issue_id,
            priority=priorities[rec.issue_id],
        )
        for index, rec in enumerate(recommendations)
    )

    return CombinedInsights(
        issues=tuple(issues),
        recommendations=tuple(recommendations),
        action_items=actions,
        summary=InsightSummary(
            total_issues=len(issues),
            critical=sum(1 for i in issues if i.priority is Priority.CRITICAL),
            high=sum(1 for i in issues if i.priority is Priority.HIGH),
            medium=sum(1 for i in issues if i.priority is Priority.MEDIUM),
            low=sum(1 for i in issues if i.priority is Priority.LOW),
        ),
    )
