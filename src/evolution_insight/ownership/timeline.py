"""Per-file ownership timelines.

A file's owner is the author of its most recent commit. Every time a commit
by a different author touches the file, the running period closes at that
commit's time and a new one opens.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from ..logging_config import get_logger
from ..temporal.models import Commit
from .models import FileAuthorship, FileCommitRef, OwnershipPeriod

logger = get_logger(__name__)

SECONDS_PER_DAY = 86400


def whole_days(seconds: float) -> int:
    """Seconds to whole days, rounding half up. Negative spans count as 0."""
    if seconds <= 0:
        return 0
    return math.floor(seconds / SECONDS_PER_DAY + 0.5)


def usable_commits(commits: Iterable[Commit]) -> list[Commit]:
    """Commits carrying an author, a timestamp and at least one file, oldest first."""
    usable: list[Commit] = []
    for commit in commits:
        if not commit.author:
            logger.warning("Skipping commit %s for ownership: no author", commit.hash[:12])
            continue
        if commit.timestamp is None:
            logger.warning("Skipping commit %s for ownership: no timestamp", commit.hash[:12])
            continue
        if not commit.files:
            logger.debug("Skipping commit %s for ownership: no files", commit.hash[:12])
            continue
        usable.append(commit)
    usable.sort(key=lambda c: c.timestamp)
    return usable


@dataclass
class _OpenPeriod:
    author: str
    start: int
    end: Optional[int] = None
    commits: int = 1


@dataclass
class _FileTimeline:
    periods: list[_OpenPeriod] = field(default_factory=list)
    history: list[FileCommitRef] = field(default_factory=list)
    authors: set[str] = field(default_factory=set)

    def touch(self, commit: Commit) -> None:
        assert commit.timestamp is not None
        self.history.append(FileCommitRef(commit.hash, commit.author, commit.timestamp))
        self.authors.add(commit.author)

        current = self.periods[-1] if self.periods else None
        if current is not None and current.author == commit.author:
            current.commits += 1
            return
        if current is not None:
            current.end = commit.timestamp
        self.periods.append(_OpenPeriod(author=commit.author, start=commit.timestamp))


def extract_file_authorships(
    commits: Iterable[Commit], as_of: Optional[int] = None
) -> dict[str, FileAuthorship]:
    """Build ownership periods for every file in the commit stream.

    Args:
        commits: Commits in any order; they are sorted by timestamp here
        as_of: Reference time (unix seconds) for measuring open periods.
            Defaults to the latest usable commit timestamp.
    """
    ordered = usable_commits(commits)
    if not ordered:
        return {}

    reference = as_of if as_of is not None else ordered[-1].timestamp
    assert reference is not None

    timelines: dict[str, _FileTimeline] = {}
    for commit in ordered:
        for path in commit.files:
            timelines.setdefault(path, _FileTimeline()).touch(commit)

    result: dict[str, FileAuthorship] = {}
    for path in sorted(timelines):
        timeline = timelines[path]
        periods = tuple(
            OwnershipPeriod(
                file=path,
                author=p.author,
                start_timestamp=p.start,
                end_timestamp=p.end,
                duration_days=whole_days((p.end if p.end is not None else reference) - p.start),
                commit_count=p.commits,
            )
            for p in timeline.periods
        )
        result[path] = FileAuthorship(
            file=path,
            current_owner=periods[-1].author,
            periods=periods,
            commit_history=tuple(timeline.history),
            authors=frozenset(timeline.authors),
        )

    return result
