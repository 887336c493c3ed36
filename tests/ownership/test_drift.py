"""Tests for ownership change detection and stability scoring."""

import pytest

from evolution_insight.config import OwnershipConfig
from evolution_insight.exceptions import InvalidConfigError
from evolution_insight.ownership.drift import (
    analyze_ownership_drift,
    calculate_stability_scores,
    detect_ownership_changes,
    stability_score,
)
from evolution_insight.ownership.models import OwnershipChangeSummary, StabilityClass
from evolution_insight.ownership.timeline import extract_file_authorships

DAY = 86400
T0 = 1704067200


def history(make_commit, authors, spacing_days=1, file="f.js"):
    return [
        make_commit(author=author, timestamp=T0 + i * spacing_days * DAY, files=(file,))
        for i, author in enumerate(authors)
    ]


class TestRapidChangeWindows:
    """Tests for sliding-window rapid ownership change detection."""

    def test_three_changes_in_window_give_one_window(self, make_commit):
        authorships = extract_file_authorships(history(make_commit, "abcd"))
        summary = detect_ownership_changes(authorships)["f.js"]

        assert summary.total_changes == 3
        (window,) = summary.rapid_changes
        assert window.change_count == 3
        assert window.unique_authors == frozenset("abcd")
        assert window.start_timestamp == T0 + DAY
        assert window.end_timestamp == T0 + 3 * DAY
        assert window.duration_days == 2

    def test_overlapping_windows(self, make_commit):
        authorships = extract_file_authorships(history(make_commit, "abcde"))
        summary = detect_ownership_changes(authorships)["f.js"]
        assert len(summary.rapid_changes) == 2

    def test_spread_out_changes_are_not_rapid(self, make_commit):
        authorships = extract_file_authorships(history(make_commit, "abcd", spacing_days=10))
        summary = detect_ownership_changes(authorships)["f.js"]
        assert summary.rapid_changes == ()
        assert not summary.has_rapid_changes

    def test_window_and_threshold_configurable(self, make_commit):
        authorships = extract_file_authorships(history(make_commit, "abcd", spacing_days=10))
        config = OwnershipConfig(window_days=30, rapid_change_threshold=2)
        summary = detect_ownership_changes(authorships, config)["f.js"]
        assert len(summary.rapid_changes) == 2

    def test_summary_counts(self, abbb_history):
        summary = detect_ownership_changes(extract_file_authorships(abbb_history))["f.js"]
        assert summary.total_owners == 2
        assert summary.total_changes == 1
        assert summary.average_ownership_duration == 2.0


class TestStabilityScores:
    """Tests for stability scoring and classification."""

    def test_fewer_than_three_commits_is_insufficient(self, make_commit):
        authorships = extract_file_authorships(history(make_commit, "ab"))
        changes = detect_ownership_changes(authorships)
        score = calculate_stability_scores(authorships, changes)["f.js"]
        assert score.score is None
        assert score.classification is StabilityClass.INSUFFICIENT_DATA

    def test_single_owner_long_history_is_stable(self, make_commit):
        authorships = extract_file_authorships(history(make_commit, "aaaa", spacing_days=40))
        changes = detect_ownership_changes(authorships)
        score = calculate_stability_scores(authorships, changes)["f.js"]
        assert score.score == 1.0
        assert score.classification is StabilityClass.HIGH

    def test_formula(self, abbb_history):
        authorships = extract_file_authorships(abbb_history)
        changes = detect_ownership_changes(authorships)
        score = calculate_stability_scores(authorships, changes)["f.js"]
        # 0.3 * 0 + 0.4 * (1 - 2/5) + 0.3 * (2/90)
        assert score.score == pytest.approx(round(0.24 + 0.3 * 2 / 90, 4))
        assert score.classification is StabilityClass.LOW

    def test_rapid_penalty_clamps_at_zero(self):
        summary = OwnershipChangeSummary(
            file="f.js",
            total_owners=4,
            total_changes=3,
            rapid_changes=(object(),),
            average_ownership_duration=1.0,
        )
        assert stability_score(summary, commit_count=4, max_owners=4, config=OwnershipConfig()) == 0.0

    def test_weights_must_sum_to_one(self):
        with pytest.raises(InvalidConfigError):
            OwnershipConfig(author_count_weight=0.5)


class TestAnalyzeOwnershipDrift:
    """Tests for the full ownership pipeline."""

    def test_result_lists(self, make_commit):
        commits = (
            history(make_commit, "aaaa", spacing_days=40, file="stable.js")
            + history(make_commit, "abcd", file="churny.js")
            + history(make_commit, "ab", file="young.js")
        )
        result = analyze_ownership_drift(commits)

        assert set(result.file_authors) == {"stable.js", "churny.js", "young.js"}
        assert result.sorted_files == ("churny.js", "stable.js")
        assert result.unstable_files == ("churny.js",)
        assert result.high_stability_files == ("stable.js",)
        assert result.stability_scores["young.js"].classification is StabilityClass.INSUFFICIENT_DATA

        overall = result.insights.overall
        assert overall.total_files_analyzed == 3
        assert overall.insufficient_data_files == 1
        assert overall.rapid_changes_detected == 1
        assert [r.file for r in result.insights.recommendations] == ["churny.js"]
        assert result.insights.file_insights["churny.js"].suggestions

    def test_empty(self):
        result = analyze_ownership_drift([])
        assert result.file_authors == {}
        assert result.sorted_files == ()
