"""Data-fetching collaborators: git, GitHub, TODO inventories, PR cache."""

from .cache import (
    CachePersistence,
    JsonFilePersistence,
    NullPersistence,
    PullRequestCache,
    SqlitePersistence,
)
from .git import GitCommitDataSource
from .github import GitHubPullRequestSource, extract_pr_numbers
from .protocols import CommitDataSource, PullRequestSource, TodoInventorySource
from .todo import JsonTodoInventory, TodoScanner

__all__ = [
    "CachePersistence",
    "CommitDataSource",
    "GitCommitDataSource",
    "GitHubPullRequestSource",
    "JsonFilePersistence",
    "JsonTodoInventory",
    "NullPersistence",
    "PullRequestCache",
    "PullRequestSource",
    "SqlitePersistence",
    "TodoInventorySource",
    "TodoScanner",
    "extract_pr_numbers",
]
