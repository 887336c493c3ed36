"""Data models for temporal (git-based) analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

TimestampInput = Union[int, float, str, None]


@dataclass(frozen=True)
class CommitStats:
    insertions: int = 0
    deletions: int = 0

    @property
    def churn(self) -> int:
        return self.insertions + self.deletions


@dataclass(frozen=True)
class RawCommit:
    """One commit as handed over by a collaborator, before normalization.

    ``timestamp`` may be unix seconds, an ISO-8601 string, a datetime or a
    git ``"%at %z"`` pair. ``files`` is optional; when missing the touched
    files are read from ``stat_text``.
    """

    hash: str
    author: Optional[str] = None
    timestamp: object = None
    message: str = ""
    stat_text: str = ""
    files: Optional[tuple[str, ...]] = None


@dataclass(frozen=True)
class Commit:
    hash: str
    author: str
    timestamp: Optional[int]  # unix seconds, None when unparseable
    message: str = ""
    files: tuple[str, ...] = ()  # relative paths changed
    insertions: int = 0
    deletions: int = 0
    tz_offset_minutes: Optional[int] = None  # author's UTC offset, when known
    diff: Optional[str] = None  # unified diff, filled in by enrichment

    @property
    def churn(self) -> int:
        return self.insertions + self.deletions

    @property
    def subject(self) -> str:
        return self.message.split("\n", 1)[0]

    @property
    def has_valid_timestamp(self) -> bool:
        return self.timestamp is not None

    @property
    def touches_files(self) -> bool:
        return bool(self.files)


@dataclass
class GitHistory:
    commits: list[Commit]  # oldest first
    file_set: set[str]  # all files ever seen
    span_days: int  # time range covered

    @property
    def total_commits(self) -> int:
        return len(self.commits)


@dataclass(frozen=True)
class FileChurn:
    path: str
    change_count: int
    insertions: int
    deletions: int
    authors: tuple[str, ...]
    first_modified: Optional[int]
    last_modified: Optional[int]
    author_entropy: float = 0.0  # Shannon entropy of per-file author commit distribution
    bus_factor: float = 1.0  # 2^H

    @property
    def churn(self) -> int:
        return self.insertions + self.deletions

    @property
    def author_count(self) -> int:
        return len(self.authors)


@dataclass(frozen=True)
class ContributorStat:
    author: str
    commits: int
    churn: int
    percent: float  # share of all commits, 0-100


@dataclass(frozen=True)
class ContributorSummary:
    total_commits: int
    total_contributors: int
    contributors: tuple[ContributorStat, ...] = ()
    average_commits_per_contributor: Optional[float] = None
    average_churn_per_commit: Optional[float] = None
    top_contributor: Optional[str] = None
    total_churn: int = field(default=0)
