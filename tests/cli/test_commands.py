"""Tests for the evolution-insight CLI commands."""

import json

import pytest
from typer.testing import CliRunner

from evolution_insight.cli import _common, app
from evolution_insight.engine import EvolutionEngine
from evolution_insight.exceptions import InsufficientDataError

DAY = 86400
HOUR = 3600
T0 = 1704067200

runner = CliRunner()


@pytest.fixture
def report(make_commit):
    commits = [
        make_commit(author="owl@x.io", timestamp=T0 + i * DAY + 23 * HOUR, files=("src/app.js",))
        for i in range(5)
    ]
    commits += [
        make_commit(author="day@x.io", timestamp=T0 + i * DAY + 10 * HOUR, files=("src/app.js",))
        for i in range(5, 8)
    ]
    return EvolutionEngine().analyze(commits)


@pytest.fixture
def calls(monkeypatch, report):
    """Replace the repository analysis with a canned report, recording each call."""
    recorded = []

    def fake_analyze(path, config_file=None, **overrides):
        recorded.append({"path": path, "config_file": config_file, **overrides})
        return report

    monkeypatch.setattr(_common, "analyze_repository", fake_analyze)
    return recorded


class TestMainCallback:
    """Tests for global options."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "version" in result.output

    def test_no_command_runs_analyze(self, calls):
        """Bare invocation prints the combined summary."""
        result = runner.invoke(app, [])
        assert result.exit_code == 0, result.output
        assert "EVOLUTION SUMMARY" in result.output
        assert len(calls) == 1

    def test_options_become_overrides(self, calls, tmp_path):
        result = runner.invoke(
            app, ["-C", str(tmp_path), "--max-commits", "10", "--no-diffs", "-v", "risk"]
        )
        assert result.exit_code == 0, result.output
        (call,) = calls
        assert call["path"] == str(tmp_path)
        assert call["git_max_commits"] == 10
        assert call["fetch_diffs"] is False
        assert call["verbose"] is True
        assert "github_repo" not in call

    def test_errors_exit_with_status_one(self, monkeypatch):
        def failing(path, config_file=None, **overrides):
            raise InsufficientDataError("no git history found", minimum_required=1)

        monkeypatch.setattr(_common, "analyze_repository", failing)
        result = runner.invoke(app, ["risk"])
        assert result.exit_code == 1
        assert "Insufficient data" in result.output


class TestCommands:
    """Tests for each subcommand."""

    def test_risk_json(self, calls):
        result = runner.invoke(app, ["risk", "--format", "json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["file_risks"][0]["subject"] == "src/app.js"

    def test_burnout_skips_diffs(self, calls):
        result = runner.invoke(app, ["burnout"])
        assert result.exit_code == 0, result.output
        assert "BURNOUT" in result.output
        assert calls[0]["fetch_diffs"] is False

    def test_burnout_json(self, calls):
        result = runner.invoke(app, ["burnout", "--format", "json"])
        data = json.loads(result.output)
        assert data["high_risk_authors"] == ["owl@x.io"]
        assert data["excluded_authors"] == ["day@x.io"]

    def test_ownership(self, calls):
        result = runner.invoke(app, ["ownership"])
        assert result.exit_code == 0, result.output
        assert "OWNERSHIP" in result.output

    def test_complexity_without_trends(self, calls):
        result = runner.invoke(app, ["complexity"])
        assert result.exit_code == 0, result.output
        assert "No functions with increasing complexity" in result.output

    def test_analyze_json(self, calls):
        result = runner.invoke(app, ["analyze", "--format", "json"])
        data = json.loads(result.output)
        assert data["total_commits"] == 8
        assert data["insights"]["issues"][0]["id"] == "burnout-risk"
