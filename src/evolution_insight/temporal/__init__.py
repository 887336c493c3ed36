"""Temporal analysis: git history, commit normalization, and churn."""

from .churn import build_file_churn, summarize_contributors
from .git_extractor import GitExtractor
from .models import (
    Commit,
    CommitStats,
    ContributorStat,
    ContributorSummary,
    FileChurn,
    GitHistory,
    RawCommit,
)
from .normalizer import (
    chronological,
    normalize_commit,
    normalize_commits,
    parse_stat_files,
    parse_stat_output,
    parse_timestamp,
)

__all__ = [
    "Commit",
    "CommitStats",
    "ContributorStat",
    "ContributorSummary",
    "FileChurn",
    "GitHistory",
    "GitExtractor",
    "RawCommit",
    "build_file_churn",
    "chronological",
    "normalize_commit",
    "normalize_commits",
    "parse_stat_files",
    "parse_stat_output",
    "parse_timestamp",
    "summarize_contributors",
]
