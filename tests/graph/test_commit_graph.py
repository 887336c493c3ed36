"""Tests for the PR-enriched commit graph."""

import pytest

from evolution_insight.exceptions import MalformedInputError
from evolution_insight.graph import (
    EnrichedCommitNode,
    MatchType,
    PullRequestRecord,
    build_commit_graph,
    detect_stale_pull_requests,
    match_commit_to_prs,
    pull_request_stats,
)

DAY = 86400
T0 = 1704067200


class TestMatching:
    """Tests for commit to PR matching."""

    def test_hash_match_wins_over_message(self, make_commit):
        commit = make_commit(message="Add login form")
        by_message = PullRequestRecord(number=1, title="Add login form", updated_at=T0 + 9 * DAY)
        by_hash = PullRequestRecord(number=2, commit_hashes=(commit.hash,), updated_at=T0)
        best, match_type, related = match_commit_to_prs(commit, [by_message, by_hash])
        assert best.number == 2
        assert match_type is MatchType.HASH
        assert related == [by_hash]

    def test_message_containment_either_way(self, make_commit):
        commit = make_commit(message="Fix crash")
        pr = PullRequestRecord(number=3, commit_messages=("Fix crash on startup",))
        best, match_type, _ = match_commit_to_prs(commit, [pr])
        assert best is pr
        assert match_type is MatchType.MESSAGE

    def test_most_recently_updated_wins(self, make_commit):
        commit = make_commit(message="refactor parser")
        older = PullRequestRecord(number=4, title="refactor parser", updated_at=T0)
        newer = PullRequestRecord(number=5, title="refactor parser", updated_at=T0 + DAY)
        best, _, related = match_commit_to_prs(commit, [older, newer])
        assert best is newer
        assert len(related) == 2

    def test_no_match(self, make_commit):
        commit = make_commit(message="")
        pr = PullRequestRecord(number=6, title="anything")
        assert match_commit_to_prs(commit, [pr]) == (None, None, [])


class TestBuildCommitGraph:
    """Tests for build_commit_graph."""

    def test_nodes_without_prs(self, make_commit):
        commits = [make_commit(insertions=3, deletions=2), make_commit()]
        graph = build_commit_graph(commits)
        assert list(graph) == [c.hash for c in commits]
        node = graph[commits[0].hash]
        assert node.churn == 5
        assert node.pr is None
        assert node.related_prs == ()

    def test_matched_pr_stats(self, make_commit):
        commit = make_commit(timestamp=T0 + 20 * DAY, message="Ship it")
        pr = PullRequestRecord(
            number=7,
            title="Ship it",
            created_at=T0,
            updated_at=T0 + 2 * DAY,
            reviewers=("r1", "r2"),
            approval_count=1,
        )
        node = build_commit_graph([commit], [pr])[commit.hash]
        assert node.pr.number == 7
        assert node.pr.match_type is MatchType.MESSAGE
        assert node.pr.stats.days_since_creation == 20
        assert node.pr.stats.days_since_update == 18
        assert node.pr.stats.reviewer_count == 2
        assert node.pr.stats.is_stale

    def test_related_prs_listed_when_several_match(self, make_commit):
        commit = make_commit(message="bump deps")
        prs = [
            PullRequestRecord(number=8, title="bump deps", url="u8", updated_at=T0),
            PullRequestRecord(number=9, title="bump deps", url="u9", updated_at=T0 + 1),
        ]
        node = build_commit_graph([commit], prs, as_of=T0)[commit.hash]
        assert node.pr.number == 9
        assert [ref.number for ref in node.related_prs] == [8, 9]

    def test_churn_must_add_up(self):
        with pytest.raises(MalformedInputError):
            EnrichedCommitNode(
                hash="h",
                author="a",
                timestamp=T0,
                message="",
                files=(),
                insertions=1,
                deletions=1,
                churn=3,
            )


class TestPullRequestStats:
    """Tests for pull_request_stats."""

    def test_time_to_close(self):
        pr = PullRequestRecord(number=1, state="closed", created_at=T0, closed_at=T0 + 3 * DAY + 5)
        stats = pull_request_stats(pr, as_of=T0 + 30 * DAY)
        assert stats.time_to_close == 3
        assert not stats.is_stale

    def test_missing_times(self):
        stats = pull_request_stats(PullRequestRecord(number=1), as_of=T0)
        assert stats.days_since_creation is None
        assert stats.days_since_update is None
        assert not stats.is_stale


class TestDetectStalePullRequests:
    """Tests for detect_stale_pull_requests."""

    def test_open_and_old_enough(self):
        prs = [
            PullRequestRecord(number=1, updated_at=T0),
            PullRequestRecord(number=2, updated_at=T0 + 6 * DAY),
            PullRequestRecord(number=3, updated_at=T0 + 10 * DAY),
            PullRequestRecord(number=4, state="merged", updated_at=T0),
        ]
        stale = detect_stale_pull_requests(prs, as_of=T0 + 20 * DAY)
        assert [(s.number, s.days_since_update) for s in stale] == [(1, 20), (2, 14)]

    def test_reference_defaults_to_latest_update(self):
        prs = [
            PullRequestRecord(number=1, updated_at=T0),
            PullRequestRecord(number=2, state="closed", updated_at=T0 + 30 * DAY),
        ]
        assert [s.number for s in detect_stale_pull_requests(prs)] == [1]

    def test_empty(self):
        assert detect_stale_pull_requests([]) == []
