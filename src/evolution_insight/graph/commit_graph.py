"""Commit graph enriched with pull-request matches.

A commit is matched to pull requests by hash first (the PR lists the commit
among its own). Only when no PR claims the hash are messages compared: a PR
matches when one of its commit messages contains, or is contained in, the
commit message, or when its title and the commit message contain each other.
The best match is the most recently updated PR.

Ages are measured against an explicit reference time, never the wall clock.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Optional

from ..logging_config import get_logger
from ..temporal.models import Commit
from .models import (
    EnrichedCommitNode,
    MatchedPullRequest,
    MatchType,
    PullRequestRecord,
    PullRequestRef,
    PullRequestStats,
    StalePullRequest,
)

logger = get_logger(__name__)

DEFAULT_STALE_DAYS = 14


def _days_between(start: Optional[int], end: Optional[int]) -> Optional[int]:
    if start is None or end is None:
        return None
    return int(max(0, end - start) // 86400)


def pull_request_stats(
    pr: PullRequestRecord, as_of: int, days_stale: int = DEFAULT_STALE_DAYS
) -> PullRequestStats:
    days_since_update = _days_between(pr.updated_at, as_of)
    return PullRequestStats(
        reviewer_count=pr.reviewer_count,
        approval_count=pr.approval_count,
        days_since_creation=_days_between(pr.created_at, as_of),
        days_since_update=days_since_update,
        time_to_close=_days_between(pr.created_at, pr.closed_at),
        is_stale=pr.is_open and days_since_update is not None and days_since_update > days_stale,
    )


def _contains_either(a: str, b: str) -> bool:
    return bool(a) and bool(b) and (a in b or b in a)


def _matches_message(commit: Commit, pr: PullRequestRecord) -> bool:
    if not commit.message:
        return False
    if _contains_either(commit.message, pr.title):
        return True
    return any(_contains_either(commit.message, msg) for msg in pr.commit_messages)


def _most_recent(prs: Sequence[PullRequestRecord]) -> PullRequestRecord:
    # max() keeps the first of equal keys, so ties resolve to input order
    return max(prs, key=lambda pr: pr.updated_at if pr.updated_at is not None else float("-inf"))


def match_commit_to_prs(
    commit: Commit, prs: Sequence[PullRequestRecord]
) -> tuple[Optional[PullRequestRecord], Optional[MatchType], list[PullRequestRecord]]:
    """Best PR, how it matched, and every PR that matched."""
    by_hash = [pr for pr in prs if commit.hash in pr.commit_hashes]
    if by_hash:
        return _most_recent(by_hash), MatchType.HASH, by_hash

    by_message = [pr for pr in prs if _matches_message(commit, pr)]
    if by_message:
        return _most_recent(by_message), MatchType.MESSAGE, by_message

    return None, None, []


def _reference_time(
    commits: Sequence[Commit], prs: Sequence[PullRequestRecord]
) -> Optional[int]:
    times = [c.timestamp for c in commits if c.timestamp is not None]
    times.extend(pr.updated_at for pr in prs if pr.updated_at is not None)
    return max(times) if times else None


def build_commit_graph(
    commits: Iterable[Commit],
    prs: Optional[Sequence[PullRequestRecord]] = None,
    as_of: Optional[int] = None,
) -> dict[str, EnrichedCommitNode]:
    """Map each commit hash to its node, with PR data when PRs were supplied.

    Args:
        commits: Normalized commits; the graph keeps their order
        prs: Optional pull requests to match against
        as_of: Reference time for PR ages; defaults to the latest commit or
            PR update time
    """
    commits = list(commits)
    prs = list(prs or [])
    reference = as_of if as_of is not None else _reference_time(commits, prs)

    graph: dict[str, EnrichedCommitNode] = {}
    matched = 0
    for commit in commits:
        best, match_type, related = (None, None, []) if not prs else match_commit_to_prs(commit, prs)

        pr_node: Optional[MatchedPullRequest] = None
        if best is not None and match_type is not None:
            matched += 1
            pr_node = MatchedPullRequest(
                number=best.number,
                title=best.title,
                url=best.url,
                state=best.state,
                author=best.author,
                created_at=best.created_at,
                updated_at=best.updated_at,
                merged_at=best.merged_at,
                closed_at=best.closed_at,
                match_type=match_type,
                stats=pull_request_stats(best, reference if reference is not None else 0),
            )

        graph[commit.hash] = EnrichedCommitNode(
            hash=commit.hash,
            author=commit.author,
            timestamp=commit.timestamp,
            message=commit.message,
            files=commit.files,
            insertions=commit.insertions,
            deletions=commit.deletions,
            churn=commit.churn,
            pr=pr_node,
            related_prs=(
                tuple(PullRequestRef(p.number, p.title, p.url) for p in related)
                if len(related) > 1
                else ()
            ),
        )

    if prs:
        logger.info("Matched %d of %d commits to pull requests", matched, len(commits))
    return graph


def match_commits_to_prs(
    commits: Iterable[Commit], prs: Sequence[PullRequestRecord]
) -> dict[str, Optional[PullRequestRecord]]:
    """Best matching PR per commit hash, None where nothing matched."""
    return {c.hash: match_commit_to_prs(c, prs)[0] for c in commits}


def detect_stale_pull_requests(
    prs: Iterable[PullRequestRecord],
    days_stale: int = DEFAULT_STALE_DAYS,
    as_of: Optional[int] = None,
) -> list[StalePullRequest]:
    """Open PRs not updated for at least ``days_stale`` days, stalest first."""
    prs = list(prs)
    if as_of is None:
        as_of = _reference_time([], prs)
    if as_of is None:
        return []

    stale: list[StalePullRequest] = []
    for pr in prs:
        if not pr.is_open or pr.updated_at is None:
            continue
        days = _days_between(pr.updated_at, as_of) or 0
        if days >= days_stale:
            stale.append(
                StalePullRequest(
                    number=pr.number,
                    title=pr.title,
                    url=pr.url,
                    author=pr.author,
                    created_at=pr.created_at,
                    days_since_update=days,
                    reviewer_count=pr.reviewer_count,
                )
            )
    stale.sort(key=lambda s: (-s.days_since_update, s.number))
    return stale
