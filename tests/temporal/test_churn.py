"""Tests for file churn and contributor aggregates."""

import math

import pytest

from evolution_insight.temporal.churn import build_file_churn, summarize_contributors

DAY = 86400
T0 = 1704067200


@pytest.fixture
def mixed_history(make_commit):
    """A(+100/-0), B(+50/-50), A(+10/-5) on x.js; B also touches y.js once."""
    return [
        make_commit(author="a", timestamp=T0, files=("x.js",), insertions=100),
        make_commit(author="b", timestamp=T0 + DAY, files=("x.js", "y.js"), insertions=50, deletions=50),
        make_commit(author="a", timestamp=T0 + 2 * DAY, files=("x.js",), insertions=10, deletions=5),
    ]


class TestBuildFileChurn:
    """Tests for per-file aggregation."""

    def test_churn_totals(self, mixed_history):
        churn = build_file_churn(mixed_history)
        x = churn["x.js"]
        assert x.change_count == 3
        assert x.insertions == 160
        assert x.deletions == 55
        assert x.churn == 215
        assert x.authors == ("a", "b")
        assert x.first_modified == T0
        assert x.last_modified == T0 + 2 * DAY

    def test_every_file_gets_commit_totals(self, mixed_history):
        y = build_file_churn(mixed_history)["y.js"]
        assert y.change_count == 1
        assert y.churn == 100
        assert y.author_count == 1

    def test_author_entropy_and_bus_factor(self, mixed_history):
        x = build_file_churn(mixed_history)["x.js"]
        expected = -(2 / 3 * math.log2(2 / 3) + 1 / 3 * math.log2(1 / 3))
        assert x.author_entropy == pytest.approx(expected)
        assert x.bus_factor == pytest.approx(2**expected)

    def test_single_author_has_zero_entropy(self, make_commit):
        churn = build_file_churn([make_commit(author="a", files=("z.js",))])
        assert churn["z.js"].author_entropy == 0.0
        assert churn["z.js"].bus_factor == 1.0

    def test_commits_without_files_ignored(self, make_commit):
        assert build_file_churn([make_commit(files=())]) == {}

    def test_keys_sorted(self, make_commit):
        churn = build_file_churn([make_commit(files=("b.js", "a.js"))])
        assert list(churn) == ["a.js", "b.js"]


class TestSummarizeContributors:
    """Tests for contributor statistics."""

    def test_summary(self, mixed_history, make_commit):
        merge = make_commit(author="c", files=(), insertions=0)
        summary = summarize_contributors(mixed_history + [merge])

        assert summary.total_commits == 4
        assert summary.total_contributors == 3
        assert summary.top_contributor == "a"
        assert summary.total_churn == 215
        assert summary.average_commits_per_contributor == round(4 / 3, 2)
        assert summary.average_churn_per_commit == round(215 / 4, 2)
        assert [c.author for c in summary.contributors] == ["a", "b", "c"]
        assert summary.contributors[0].percent == 50.0

    def test_missing_author_counted_as_unknown(self, make_commit):
        summary = summarize_contributors([make_commit(author="")])
        assert summary.top_contributor == "unknown"

    def test_empty(self):
        summary = summarize_contributors([])
        assert summary.total_commits == 0
        assert summary.contributors == ()
        assert summary.top_contributor is None
