"""Commit graph with pull-request enrichment."""

from .commit_graph import (
    build_commit_graph,
    detect_stale_pull_requests,
    match_commit_to_prs,
    match_commits_to_prs,
    pull_request_stats,
)
from .models import (
    EnrichedCommitNode,
    MatchedPullRequest,
    MatchType,
    PullRequestRecord,
    PullRequestRef,
    PullRequestStats,
    StalePullRequest,
)

__all__ = [
    "EnrichedCommitNode",
    "MatchedPullRequest",
    "MatchType",
    "PullRequestRecord",
    "PullRequestRef",
    "PullRequestStats",
    "StalePullRequest",
    "build_commit_graph",
    "detect_stale_pull_requests",
    "match_commit_to_prs",
    "match_commits_to_prs",
    "pull_request_stats",
]
