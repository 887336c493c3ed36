"""Interfaces the engine consumes to fetch data it does not own."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ..graph.models import PullRequestRecord
from ..insights.models import TodoItem
from ..temporal.models import Commit, CommitStats


@runtime_checkable
class CommitDataSource(Protocol):
    async def get_commit_stats(self, commit_hash: str) -> CommitStats: ...

    async def get_commit_diff(self, commit_hash: str) -> str: ...


@runtime_checkable
class PullRequestSource(Protocol):
    async def fetch_pull_requests_for_commits(
        self, commits: Sequence[Commit]
    ) -> list[PullRequestRecord]: ...


@runtime_checkable
class TodoInventorySource(Protocol):
    def read_todo_inventory(self) -> dict[str, list[TodoItem]]: ...
