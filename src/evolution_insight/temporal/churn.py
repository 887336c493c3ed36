"""Churn aggregates: per-file change volume and per-contributor summaries."""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable
from math import log2
from typing import Optional

from .models import Commit, ContributorStat, ContributorSummary, FileChurn


def build_file_churn(commits: Iterable[Commit]) -> dict[str, FileChurn]:
    """Aggregate change counts, line churn and authorship per file.

    A commit's insertions/deletions are commit-level totals, so every file in
    the commit is credited with the whole amount (git does not report
    per-file numbers in the stat summary). Commits touching no files are
    ignored here.
    """
    file_changes: dict[str, int] = defaultdict(int)
    file_insertions: dict[str, int] = defaultdict(int)
    file_deletions: dict[str, int] = defaultdict(int)
    file_authors: dict[str, Counter[str]] = defaultdict(Counter)
    file_first: dict[str, Optional[int]] = {}
    file_last: dict[str, Optional[int]] = {}

    for commit in commits:
        for path in commit.files:
            file_changes[path] += 1
            file_insertions[path] += commit.insertions
            file_deletions[path] += commit.deletions
            if commit.author:
                file_authors[path][commit.author] += 1
            if commit.timestamp is not None:
                first = file_first.get(path)
                last = file_last.get(path)
                file_first[path] = commit.timestamp if first is None else min(first, commit.timestamp)
                file_last[path] = commit.timestamp if last is None else max(last, commit.timestamp)

    results: dict[str, FileChurn] = {}
    for path in sorted(file_changes):
        author_counts = file_authors[path]
        author_entropy = _compute_author_entropy(author_counts)
        results[path] = FileChurn(
            path=path,
            change_count=file_changes[path],
            insertions=file_insertions[path],
            deletions=file_deletions[path],
            authors=tuple(sorted(author_counts)),
            first_modified=file_first.get(path),
            last_modified=file_last.get(path),
            author_entropy=author_entropy,
            bus_factor=2**author_entropy,
        )

    return results


def summarize_contributors(commits: Iterable[Commit]) -> ContributorSummary:
    """Commit and churn totals per contributor.

    Unlike the file-based aggregates this counts every commit, including
    merges and other commits that touched no files.
    """
    commit_counts: Counter[str] = Counter()
    churn_by_author: dict[str, int] = defaultdict(int)
    total_churn = 0
    total_commits = 0

    for commit in commits:
        author = commit.author or "unknown"
        commit_counts[author] += 1
        churn_by_author[author] += commit.churn
        total_churn += commit.churn
        total_commits += 1

    if total_commits == 0:
        return ContributorSummary(total_commits=0, total_contributors=0)

    # Highest count first, name as tie-breaker
    ranked = sorted(commit_counts.items(), key=lambda item: (-item[1], item[0]))
    contributors = tuple(
        ContributorStat(
            author=author,
            commits=count,
            churn=churn_by_author[author],
            percent=round(count / total_commits * 100, 1),
        )
        for author, count in ranked
    )

    return ContributorSummary(
        total_commits=total_commits,
        total_contributors=len(contributors),
        contributors=contributors,
        average_commits_per_contributor=round(total_commits / len(contributors), 2),
        average_churn_per_commit=round(total_churn / total_commits, 2),
        top_contributor=contributors[0].author,
        total_churn=total_churn,
    )


def _compute_author_entropy(author_counts: Counter[str]) -> float:
    """Compute Shannon entropy of author commit distribution.

    Higher entropy = more diverse authorship = better bus factor.
    Single author = 0 entropy = bus_factor of 1.

    Returns:
        Entropy in bits.
    """
    total = sum(author_counts.values())
    if total == 0:
        return 0.0
    probs = [count / total for count in author_counts.values() if count > 0]
    return max(0.0, -sum(p * log2(p) for p in probs))
