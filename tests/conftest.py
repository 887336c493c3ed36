"""Shared test fixtures for Evolution Insight tests."""

import pytest

from evolution_insight.temporal.models import Commit

DAY = 86400
# 2024-01-01T00:00:00Z, a Monday
T0 = 1704067200


@pytest.fixture
def make_commit():
    """Factory for normalized commits with sequential hashes."""
    counter = iter(range(1, 10_000))

    def _make(
        author="alice@example.com",
        timestamp=T0,
        files=("src/app.js",),
        message="change",
        insertions=0,
        deletions=0,
        diff=None,
        tz_offset_minutes=None,
        hash=None,
    ):
        return Commit(
            hash=hash or f"{next(counter):040x}",
            author=author,
            timestamp=timestamp,
            message=message,
            files=tuple(files),
            insertions=insertions,
            deletions=deletions,
            tz_offset_minutes=tz_offset_minutes,
            diff=diff,
        )

    return _make


@pytest.fixture
def abbb_history(make_commit):
    """Authors A, A, B, B, B on one file, one day apart."""
    authors = ["a@x.io", "a@x.io", "b@x.io", "b@x.io", "b@x.io"]
    return [
        make_commit(author=author, timestamp=T0 + i * DAY, files=("f.js",))
        for i, author in enumerate(authors)
    ]
