"""Ownership drift: change detection, rapid-change windows and stability scoring.

Stability score for a file with enough commits:

    score = w_author * (1 - (owners - 1) / (max_owners - 1 or 1))
          + w_freq   * (1 - min(1, 2 * changes / commits))
          + w_dur    * min(1, avg_duration_days / duration_cap)
          - penalty  * [file has a rapid-change window]

clamped to [0, 1]. ``max_owners`` is taken across all files in the run.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Optional

from ..config import OwnershipConfig
from ..exceptions import MalformedInputError
from ..logging_config import get_logger
from ..temporal.models import Commit
from .models import (
    FileAuthorship,
    FileOwnershipInsight,
    OverallOwnershipInsights,
    OwnershipChange,
    OwnershipChangeSummary,
    OwnershipDriftResult,
    OwnershipInsights,
    OwnershipRecommendation,
    RapidChangeWindow,
    StabilityClass,
    StabilityScore,
)
from .timeline import extract_file_authorships, whole_days

logger = get_logger(__name__)

LOW_STABILITY_SUGGESTIONS: tuple[str, ...] = (
    "Reduce ownership changes",
    "Assign long-term owners",
    "Document ownership clearly",
)


def ownership_changes(authorship: FileAuthorship) -> list[OwnershipChange]:
    periods = authorship.periods
    return [
        OwnershipChange(
            from_author=prev.author,
            to_author=cur.author,
            timestamp=cur.start_timestamp,
        )
        for prev, cur in zip(periods, periods[1:])
    ]


def find_rapid_change_windows(
    file: str, changes: list[OwnershipChange], config: OwnershipConfig
) -> list[RapidChangeWindow]:
    """Slide a ``window_days`` window over the change events.

    Each time the window holds ``rapid_change_threshold`` or more changes a
    RapidChangeWindow is emitted, so one burst of N changes can yield
    several overlapping windows.
    """
    window_seconds = config.window_seconds
    windows: list[RapidChangeWindow] = []
    window: list[OwnershipChange] = []

    for change in changes:
        window.append(change)
        window = [c for c in window if change.timestamp - c.timestamp <= window_seconds]

        if len(window) >= config.rapid_change_threshold:
            authors = {c.to_author for c in window}
            authors.add(window[0].from_author)
            windows.append(
                RapidChangeWindow(
                    file=file,
                    start_timestamp=window[0].timestamp,
                    end_timestamp=change.timestamp,
                    duration_days=whole_days(change.timestamp - window[0].timestamp),
                    change_count=len(window),
                    unique_authors=frozenset(authors),
                )
            )

    return windows


def summarize_file_changes(
    authorship: FileAuthorship, config: OwnershipConfig
) -> OwnershipChangeSummary:
    if not authorship.periods:
        raise MalformedInputError(authorship.file, "no ownership periods")

    changes = ownership_changes(authorship)
    rapid = find_rapid_change_windows(authorship.file, changes, config)
    total_duration = sum(p.duration_days for p in authorship.periods)

    return OwnershipChangeSummary(
        file=authorship.file,
        total_owners=len(authorship.authors),
        total_changes=len(changes),
        rapid_changes=tuple(rapid),
        average_ownership_duration=total_duration / len(authorship.periods),
    )


def detect_ownership_changes(
    authorships: Mapping[str, FileAuthorship], config: Optional[OwnershipConfig] = None
) -> dict[str, OwnershipChangeSummary]:
    """Change counts, rapid-change windows and average period length per file.

    A file whose timeline cannot be summarized is logged and left out; the
    stability scorer then reports it as insufficient data.
    """
    config = config or OwnershipConfig()
    summaries: dict[str, OwnershipChangeSummary] = {}
    for file in sorted(authorships):
        try:
            summaries[file] = summarize_file_changes(authorships[file], config)
        except MalformedInputError as e:
            logger.warning("Ownership analysis skipped %s: %s", file, e)
    return summaries


def classify_stability(score: float, config: OwnershipConfig) -> StabilityClass:
    if score >= config.high_stability_threshold:
        return StabilityClass.HIGH
    if score >= config.medium_stability_threshold:
        return StabilityClass.MEDIUM
    return StabilityClass.LOW


def stability_score(
    summary: OwnershipChangeSummary,
    commit_count: int,
    max_owners: int,
    config: OwnershipConfig,
) -> float:
    if commit_count <= 0:
        raise MalformedInputError(summary.file, "no commits")

    norm_author = 1 - (summary.total_owners - 1) / ((max_owners - 1) or 1)
    norm_freq = 1 - min(1.0, 2 * summary.total_changes / commit_count)
    norm_duration = min(1.0, summary.average_ownership_duration / config.duration_cap_days)
    penalty = config.rapid_change_penalty if summary.has_rapid_changes else 0.0

    score = (
        config.author_count_weight * norm_author
        + config.change_frequency_weight * norm_freq
        + config.ownership_duration_weight * norm_duration
        - penalty
    )
    return max(0.0, min(1.0, score))


def calculate_stability_scores(
    authorships: Mapping[str, FileAuthorship],
    changes: Mapping[str, OwnershipChangeSummary],
    config: Optional[OwnershipConfig] = None,
) -> dict[str, StabilityScore]:
    config = config or OwnershipConfig()
    max_owners = max((s.total_owners for s in changes.values()), default=1)
    max_owners = max(1, max_owners)

    scores: dict[str, StabilityScore] = {}
    for file in sorted(authorships):
        commit_count = authorships[file].commit_count
        summary = changes.get(file)

        if summary is None or commit_count < config.min_commits:
            scores[file] = StabilityScore(
                file=file,
                score=None,
                classification=StabilityClass.INSUFFICIENT_DATA,
                commit_count=commit_count,
            )
            continue

        try:
            score = stability_score(summary, commit_count, max_owners, config)
        except (MalformedInputError, ArithmeticError) as e:
            logger.warning("Stability scoring failed for %s: %s", file, e)
            scores[file] = StabilityScore(
                file=file,
                score=None,
                classification=StabilityClass.INSUFFICIENT_DATA,
                commit_count=commit_count,
            )
            continue

        scores[file] = StabilityScore(
            file=file,
            score=round(score, 4),
            classification=classify_stability(score, config),
            commit_count=commit_count,
            has_rapid_changes=summary.has_rapid_changes,
        )

    return scores


def generate_ownership_insights(
    authorships: Mapping[str, FileAuthorship],
    changes: Mapping[str, OwnershipChangeSummary],
    scores: Mapping[str, StabilityScore],
) -> OwnershipInsights:
    issues = rapid = stable = unstable = insufficient = 0
    file_insights: dict[str, FileOwnershipInsight] = {}
    recommendations: list[OwnershipRecommendation] = []

    for file in sorted(scores):
        stability = scores[file]
        if stability.score is None:
            insufficient += 1
            continue

        if stability.classification is StabilityClass.HIGH:
            stable += 1
        else:
            unstable += 1
            issues += 1
        if stability.has_rapid_changes:
            rapid += 1

        suggestions: tuple[str, ...] = ()
        if stability.classification is StabilityClass.LOW:
            suggestions = LOW_STABILITY_SUGGESTIONS
            recommendations.append(
                OwnershipRecommendation(
                    file=file,
                    score=stability.score,
                    summary="Low stability detected",
                    suggestions=suggestions,
                )
            )

        summary = changes.get(file)
        file_insights[file] = FileOwnershipInsight(
            file=file,
            score=stability.score,
            classification=stability.classification,
            current_owner=authorships[file].current_owner,
            commit_count=stability.commit_count,
            suggestions=suggestions,
            rapid_changes=summary.rapid_changes if summary is not None else (),
        )

    return OwnershipInsights(
        overall=OverallOwnershipInsights(
            total_files_analyzed=len(authorships),
            ownership_issues_detected=issues,
            rapid_changes_detected=rapid,
            stable_files=stable,
            unstable_files=unstable,
            insufficient_data_files=insufficient,
        ),
        file_insights=file_insights,
        recommendations=tuple(recommendations),
    )


def analyze_ownership_drift(
    commits: Iterable[Commit],
    options: Optional[OwnershipConfig] = None,
    as_of: Optional[int] = None,
) -> OwnershipDriftResult:
    """Full ownership pipeline over a commit stream.

    Args:
        commits: Normalized commits, any order
        options: Ownership thresholds and weights
        as_of: Reference time for open periods, defaults to the latest commit
    """
    config = options or OwnershipConfig()
    authorships = extract_file_authorships(commits, as_of=as_of)
    changes = detect_ownership_changes(authorships, config)
    scores = calculate_stability_scores(authorships, changes, config)
    insights = generate_ownership_insights(authorships, changes, scores)

    scored = [s for s in scores.values() if s.score is not None]
    scored.sort(key=lambda s: (s.score, s.file))
    ordered = tuple(s.file for s in scored)

    def with_class(classification: StabilityClass) -> tuple[str, ...]:
        return tuple(f for f in ordered if scores[f].classification is classification)

    unstable = with_class(StabilityClass.LOW)
    logger.info(
        "Ownership: %d files, %d scored, %d low-stability",
        len(authorships),
        len(ordered),
        len(unstable),
    )

    return OwnershipDriftResult(
        file_authors=authorships,
        ownership_changes=changes,
        stability_scores=scores,
        insights=insights,
        sorted_files=ordered,
        unstable_files=unstable,
        medium_stability_files=with_class(StabilityClass.MEDIUM),
        high_stability_files=with_class(StabilityClass.HIGH),
    )
