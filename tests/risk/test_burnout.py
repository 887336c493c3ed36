"""Tests for contributor burnout risk."""

from datetime import date

import pytest

from evolution_insight.config import BurnoutConfig
from evolution_insight.exceptions import InvalidConfigError
from evolution_insight.risk.burnout import analyze_burnout_risk, local_time, longest_day_streak
from evolution_insight.risk.models import BurnoutPattern, RiskLevel, SubjectKind

DAY = 86400
HOUR = 3600
T0 = 1704067200  # Monday 2024-01-01 00:00 UTC
SATURDAY = T0 + 5 * DAY


@pytest.fixture
def team(make_commit):
    night_owl = [make_commit(author="owl", timestamp=T0 + i * DAY + 23 * HOUR) for i in range(5)]
    weekender = [
        make_commit(author="weekender", timestamp=SATURDAY + offset * DAY + 12 * HOUR)
        for offset in (0, 1, 7, 8, 14)
    ]
    nine_to_five = [make_commit(author="day", timestamp=T0 + i * DAY + 10 * HOUR) for i in range(5)]
    casual = [make_commit(author="casual", timestamp=T0 + 2 * HOUR) for _ in range(2)]
    return night_owl + weekender + nine_to_five + casual


class TestHelpers:
    """Tests for time helpers."""

    def test_local_time_uses_author_offset(self, make_commit):
        commit = make_commit(timestamp=T0 + 3 * HOUR, tz_offset_minutes=-300)
        when = local_time(commit)
        assert when.hour == 22
        assert when.weekday() == 6

    def test_local_time_defaults_to_utc(self, make_commit):
        assert local_time(make_commit(timestamp=T0 + 3 * HOUR)).hour == 3

    def test_longest_day_streak(self):
        days = [date(2024, 1, d) for d in (1, 2, 3, 5, 6)]
        assert longest_day_streak(days) == 3
        assert longest_day_streak([]) == 0

    def test_off_hours_ranges(self):
        wrapping = BurnoutConfig()
        assert wrapping.is_off_hours(23)
        assert wrapping.is_off_hours(5)
        assert not wrapping.is_off_hours(6)
        plain = BurnoutConfig(off_hours_start=9, off_hours_end=17)
        assert plain.is_off_hours(10)
        assert not plain.is_off_hours(17)


class TestAnalyzeBurnoutRisk:
    """Tests for analyze_burnout_risk."""

    def test_classification(self, team):
        result = analyze_burnout_risk(team)
        assert result.high_risk_authors == ("owl",)
        assert result.medium_risk_authors == ("weekender",)
        assert result.low_risk_authors == ("day",)
        assert result.excluded_authors == ("casual",)

    def test_author_insight(self, team):
        owl = analyze_burnout_risk(team).insights.authors["owl"]
        assert owl.off_hours_ratio == 1.0
        assert owl.weekend_ratio == 0.0
        assert owl.burnout_risk_score == pytest.approx(0.6)
        assert owl.longest_late_night_streak == 5
        assert {p.type for p in owl.concerning_patterns} == {
            BurnoutPattern.HIGH_OFF_HOURS,
            BurnoutPattern.LATE_NIGHT_STREAK,
        }
        assert owl.risk.subject_kind is SubjectKind.AUTHOR
        assert owl.risk.composite_score == 6.0

    def test_excluded_authors_are_not_scored(self, team):
        assert "casual" not in analyze_burnout_risk(team).insights.authors

    def test_team_insights(self, team):
        insights = analyze_burnout_risk(team).insights
        assert insights.team.total_authors == 4
        assert insights.team.analyzed_authors == 3
        assert insights.team.off_hours_percentage == 33.3
        assert insights.team.weekend_percentage == 33.3
        assert insights.recommendations

    def test_weekends_can_be_ignored(self, team):
        result = analyze_burnout_risk(team, BurnoutConfig(include_weekends=False))
        assert result.insights.authors["owl"].burnout_risk_score == 1.0
        assert result.insights.authors["weekender"].classification is RiskLevel.LOW

    def test_commits_without_author_or_time_skipped(self, make_commit):
        commits = [make_commit(author=""), make_commit(timestamp=None)]
        result = analyze_burnout_risk(commits)
        assert result.insights.team.total_authors == 0

    def test_invalid_hours_rejected(self):
        with pytest.raises(InvalidConfigError):
            BurnoutConfig(off_hours_start=25)
