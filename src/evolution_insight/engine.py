"""Evolution engine: enrich a commit stream, then run every analysis over it.

Pipeline:
  Commits (normalized)
       → Enrichment (stats + diffs per commit, PRs; async, bounded)
       → Complexity trends ─┐
       → Ownership drift ───┼→ Risk scoring → Combined insights
       → Burnout / contributors / commit graph / feature death
       → EvolutionReport

The analyses are synchronous and deterministic: the same commits, PRs, TODO
inventory and configuration always produce the same report.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Optional

from .collaborators.protocols import CommitDataSource, PullRequestSource, TodoInventorySource
from .complexity import ComplexityTrendResult, track_complexity_trends
from .config import AnalysisConfig
from .exceptions import CollaboratorUnavailableError
from .graph import (
    EnrichedCommitNode,
    PullRequestRecord,
    StalePullRequest,
    build_commit_graph,
    detect_stale_pull_requests,
)
from .insights import (
    CombinedInsights,
    FeatureDeathAnalysis,
    TodoItem,
    analyze_feature_death,
    generate_combined_insights,
)
from .logging_config import get_logger
from .ownership import OwnershipDriftResult, analyze_ownership_drift
from .risk import BurnoutAnalysis, RiskAnalysis, analyze_burnout_risk, analyze_complexity_and_churn
from .temporal import Commit, ContributorSummary, summarize_contributors

logger = get_logger(__name__)


@dataclass(frozen=True)
class EnrichmentResult:
    commits: tuple[Commit, ...]
    pull_requests: tuple[PullRequestRecord, ...] = ()
    failed_stats: tuple[str, ...] = ()  # hashes whose stats fetch failed
    failed_diffs: tuple[str, ...] = ()  # hashes whose diff fetch failed


@dataclass(frozen=True)
class EvolutionReport:
    """Everything derived from one commit history."""

    total_commits: int
    as_of: Optional[int]
    contributors: ContributorSummary
    complexity: ComplexityTrendResult
    ownership: OwnershipDriftResult
    risk: RiskAnalysis
    burnout: BurnoutAnalysis
    commit_graph: dict[str, EnrichedCommitNode]
    stale_pull_requests: tuple[StalePullRequest, ...] = ()
    feature_death: Optional[FeatureDeathAnalysis] = None
    insights: CombinedInsights = field(default_factory=CombinedInsights)


def _latest_timestamp(commits: Sequence[Commit]) -> Optional[int]:
    return max((c.timestamp for c in commits if c.timestamp is not None), default=None)


class EvolutionEngine:
    """Runs the analyses over commits fetched by pluggable collaborators.

    Every collaborator is optional. Without a commit source the commits are
    analysed as given; without a PR source there is no PR matching; without
    a TODO source there is no feature-death analysis.
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        commit_source: Optional[CommitDataSource] = None,
        pr_source: Optional[PullRequestSource] = None,
        todo_source: Optional[TodoInventorySource] = None,
    ):
        self.config = config or AnalysisConfig()
        self.commit_source = commit_source
        self.pr_source = pr_source
        self.todo_source = todo_source

    # ── Enrichment ─────────────────────────────────────────────────

    async def _enrich_one(
        self, commit: Commit, semaphore: asyncio.Semaphore
    ) -> tuple[Commit, bool, bool]:
        """Returns the enriched commit and whether stats / diff fetches failed."""
        source = self.commit_source
        assert source is not None

        async def stats():
            return await source.get_commit_stats(commit.hash)

        async def diff():
            if not self.config.fetch_diffs:
                return None
            return await source.get_commit_diff(commit.hash)

        async with semaphore:
            stats_result, diff_result = await asyncio.gather(
                stats(), diff(), return_exceptions=True
            )

        updates: dict[str, object] = {}
        stats_failed = diff_failed = False

        if isinstance(stats_result, CollaboratorUnavailableError):
            logger.warning("No stats for %s: %s", commit.hash[:12], stats_result)
            stats_failed = True
        elif isinstance(stats_result, BaseException):
            raise stats_result
        else:
            updates["insertions"] = stats_result.insertions
            updates["deletions"] = stats_result.deletions

        if isinstance(diff_result, CollaboratorUnavailableError):
            logger.warning("No diff for %s: %s", commit.hash[:12], diff_result)
            diff_failed = True
        elif isinstance(diff_result, BaseException):
            raise diff_result
        elif diff_result is not None:
            updates["diff"] = diff_result

        enriched = replace(commit, **updates) if updates else commit
        return enriched, stats_failed, diff_failed

    async def _enrich_commits(self, commits: Sequence[Commit]) -> list[tuple[Commit, bool, bool]]:
        if self.commit_source is None:
            return [(c, False, False) for c in commits]
        semaphore = asyncio.Semaphore(self.config.max_concurrent_fetches)
        return list(await asyncio.gather(*(self._enrich_one(c, semaphore) for c in commits)))

    async def _fetch_pull_requests(self, commits: Sequence[Commit]) -> list[PullRequestRecord]:
        if self.pr_source is None:
            return []
        try:
            return list(await self.pr_source.fetch_pull_requests_for_commits(commits))
        except CollaboratorUnavailableError as e:
            logger.warning("Pull-request enrichment skipped: %s", e)
            return []

    async def enrich_commits(self, commits: Sequence[Commit]) -> EnrichmentResult:
        """Fetch stats and diffs per commit, and PRs for the whole batch.

        Per-commit fetches and the PR fetch run concurrently; at most
        ``max_concurrent_fetches`` commits are in flight. A collaborator
        failure leaves that commit's field as it was.
        """
        commits = list(commits)
        logger.info("Enriching %d commits", len(commits))
        per_commit, prs = await asyncio.gather(
            self._enrich_commits(commits), self._fetch_pull_requests(commits)
        )
        return EnrichmentResult(
            commits=tuple(c for c, _, _ in per_commit),
            pull_requests=tuple(prs),
            failed_stats=tuple(c.hash for c, failed, _ in per_commit if failed),
            failed_diffs=tuple(c.hash for c, _, failed in per_commit if failed),
        )

    def read_todos(self) -> Optional[dict[str, list[TodoItem]]]:
        if self.todo_source is None:
            return None
        try:
            return self.todo_source.read_todo_inventory()
        except CollaboratorUnavailableError as e:
            logger.warning("TODO inventory skipped: %s", e)
            return None

    # ── Analysis ───────────────────────────────────────────────────

    def analyze(
        self,
        commits: Sequence[Commit],
        pull_requests: Sequence[PullRequestRecord] = (),
        todos: Optional[Mapping[str, Sequence[TodoItem]]] = None,
        as_of: Optional[int] = None,
    ) -> EvolutionReport:
        """Run every analysis over already-enriched commits.

        Args:
            commits: Normalized commits, any order
            pull_requests: PRs to match against the commits
            todos: TODO inventory; feature death is skipped when None
            as_of: Reference time; defaults to the latest commit timestamp
        """
        config = self.config
        commits = list(commits)
        reference = as_of if as_of is not None else _latest_timestamp(commits)

        complexity = track_complexity_trends(commits, config)
        ownership = analyze_ownership_drift(commits, config.ownership, as_of=reference)
        risk = analyze_complexity_and_churn(commits, complexity, ownership, config.risk)
        burnout = analyze_burnout_risk(commits, config.burnout)
        graph = build_commit_graph(commits, pull_requests, as_of=as_of)
        stale = detect_stale_pull_requests(pull_requests, as_of=as_of)

        feature_death = None
        if todos is not None:
            feature_death = analyze_feature_death(todos, as_of=reference, config=config.feature_death)

        insights = generate_combined_insights(
            ownership=ownership, burnout=burnout, feature_death=feature_death, risk=risk
        )
        logger.info(
            "Analysis complete: %d commits, %d issues", len(commits), insights.summary.total_issues
        )

        return EvolutionReport(
            total_commits=len(commits),
            as_of=reference,
            contributors=summarize_contributors(commits),
            complexity=complexity,
            ownership=ownership,
            risk=risk,
            burnout=burnout,
            commit_graph=graph,
            stale_pull_requests=tuple(stale),
            feature_death=feature_death,
            insights=insights,
        )

    async def run(self, commits: Sequence[Commit], as_of: Optional[int] = None) -> EvolutionReport:
        """Enrich, read TODOs, and analyse."""
        enrichment, todos = await asyncio.gather(
            self.enrich_commits(commits), asyncio.to_thread(self.read_todos)
        )
        if enrichment.failed_diffs:
            logger.warning(
                "%d commits have no diff; their complexity is not tracked",
                len(enrichment.failed_diffs),
            )
        return self.analyze(enrichment.commits, enrichment.pull_requests, todos, as_of=as_of)
