"""Data models for the PR-enriched commit graph."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..exceptions import MalformedInputError


class MatchType(str, Enum):
    HASH = "hash"
    MESSAGE = "message"


@dataclass(frozen=True)
class PullRequestRecord:
    """One pull request as delivered by a PR source. Times are unix seconds."""

    number: int
    title: str = ""
    url: str = ""
    state: str = "open"
    author: str = ""
    created_at: Optional[int] = None
    updated_at: Optional[int] = None
    merged_at: Optional[int] = None
    closed_at: Optional[int] = None
    commit_hashes: tuple[str, ...] = ()
    commit_messages: tuple[str, ...] = ()
    reviewers: tuple[str, ...] = ()
    approval_count: int = 0
    first_approval_days: Optional[float] = None
    related_commits: tuple[str, ...] = ()  # commits that referenced this PR

    @property
    def is_open(self) -> bool:
        return self.state == "open"

    @property
    def reviewer_count(self) -> int:
        return len(self.reviewers)


@dataclass(frozen=True)
class PullRequestStats:
    reviewer_count: int
    approval_count: int
    days_since_creation: Optional[int]
    days_since_update: Optional[int]
    time_to_close: Optional[int]
    is_stale: bool


@dataclass(frozen=True)
class PullRequestRef:
    number: int
    title: str
    url: str


@dataclass(frozen=True)
class MatchedPullRequest:
    number: int
    title: str
    url: str
    state: str
    author: str
    created_at: Optional[int]
    updated_at: Optional[int]
    merged_at: Optional[int]
    closed_at: Optional[int]
    match_type: MatchType
    stats: PullRequestStats


@dataclass(frozen=True)
class EnrichedCommitNode:
    hash: str
    author: str
    timestamp: Optional[int]
    message: str
    files: tuple[str, ...]
    insertions: int
    deletions: int
    churn: int
    pr: Optional[MatchedPullRequest] = None
    related_prs: tuple[PullRequestRef, ...] = ()

    def __post_init__(self) -> None:
        if self.churn != self.insertions + self.deletions:
            raise MalformedInputError(self.hash, "churn must equal insertions + deletions")


@dataclass(frozen=True)
class StalePullRequest:
    number: int
    title: str
    url: str
    author: str
    created_at: Optional[int]
    days_since_update: int
    reviewer_count: int
