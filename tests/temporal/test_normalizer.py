"""Tests for commit normalization."""

from datetime import datetime, timedelta, timezone

from evolution_insight.temporal.models import RawCommit
from evolution_insight.temporal.normalizer import (
    chronological,
    normalize_commit,
    normalize_commits,
    parse_stat_files,
    parse_stat_output,
    parse_timestamp,
)

STAT_TEXT = """\
 src/app.js                  | 12 ++++++++----
 src/{old => new}/util.js    |  3 ++-
 docs/a.md => docs/b.md      |  0
 logo.png                    | Bin 0 -> 1234 bytes
 4 files changed, 10 insertions(+), 5 deletions(-)
"""


class TestParseStatOutput:
    """Tests for insertion/deletion extraction."""

    def test_both_counts(self):
        stats = parse_stat_output(STAT_TEXT)
        assert stats.insertions == 10
        assert stats.deletions == 5
        assert stats.churn == 15

    def test_singular_forms(self):
        stats = parse_stat_output(" 1 file changed, 1 insertion(+), 1 deletion(-)")
        assert (stats.insertions, stats.deletions) == (1, 1)

    def test_missing_deletions_default_to_zero(self):
        stats = parse_stat_output(" 1 file changed, 7 insertions(+)")
        assert (stats.insertions, stats.deletions) == (7, 0)

    def test_empty_and_none(self):
        assert parse_stat_output("").churn == 0
        assert parse_stat_output(None).churn == 0


class TestParseStatFiles:
    """Tests for touched-file extraction from stat listings."""

    def test_paths_and_renames(self):
        files = parse_stat_files(STAT_TEXT)
        assert files == ("src/app.js", "src/new/util.js", "docs/b.md", "logo.png")

    def test_summary_line_is_not_a_file(self):
        assert parse_stat_files(" 2 files changed, 3 insertions(+)") == ()


class TestParseTimestamp:
    """Tests for the accepted timestamp forms."""

    def test_unix_seconds(self):
        assert parse_timestamp(1704067200) == (1704067200, None)
        assert parse_timestamp(1704067200.9) == (1704067200, None)
        assert parse_timestamp("1704067200") == (1704067200, None)

    def test_git_epoch_with_offset(self):
        assert parse_timestamp("1704067200 +0130") == (1704067200, 90)
        assert parse_timestamp("1704067200 -0500") == (1704067200, -300)

    def test_iso_strings(self):
        assert parse_timestamp("2024-01-01T00:00:00Z") == (1704067200, 0)
        assert parse_timestamp("2024-01-01T02:00:00+02:00") == (1704067200, 120)
        # Naive strings are read as UTC
        assert parse_timestamp("2024-01-01T00:00:00") == (1704067200, None)

    def test_datetime(self):
        aware = datetime(2024, 1, 1, 1, 0, tzinfo=timezone(timedelta(hours=1)))
        assert parse_timestamp(aware) == (1704067200, 60)

    def test_unparseable(self):
        assert parse_timestamp("yesterday") == (None, None)
        assert parse_timestamp("") == (None, None)
        assert parse_timestamp(None) == (None, None)
        assert parse_timestamp(True) == (None, None)
        assert parse_timestamp(["2024"]) == (None, None)


class TestNormalizeCommit:
    """Tests for building Commit records."""

    def test_fields_from_stat_text(self):
        raw = RawCommit(
            hash="a" * 40,
            author=" alice@example.com ",
            timestamp="1704067200 +0100",
            message="Fix parser",
            stat_text=STAT_TEXT,
        )
        commit = normalize_commit(raw)
        assert commit.author == "alice@example.com"
        assert commit.timestamp == 1704067200
        assert commit.tz_offset_minutes == 60
        assert commit.insertions == 10
        assert commit.deletions == 5
        assert commit.churn == 15
        assert "src/app.js" in commit.files

    def test_explicit_files_win(self):
        raw = RawCommit(hash="b" * 40, timestamp=0, files=("x.go",), stat_text=STAT_TEXT)
        assert normalize_commit(raw).files == ("x.go",)

    def test_missing_values_default(self):
        commit = normalize_commit(RawCommit(hash="c" * 40))
        assert commit.author == ""
        assert commit.timestamp is None
        assert commit.files == ()
        assert commit.churn == 0
        assert not commit.has_valid_timestamp

    def test_zero_file_commit_is_retained(self):
        commit = normalize_commit(RawCommit(hash="d" * 40, timestamp=5, message="merge"))
        assert commit.files == ()
        assert not commit.touches_files


class TestNormalizeCommits:
    """Tests for batch normalization."""

    def test_duplicates_keep_first(self):
        first = RawCommit(hash="a" * 40, author="first", timestamp=1)
        second = RawCommit(hash="a" * 40, author="second", timestamp=2)
        commits = normalize_commits([first, second])
        assert len(commits) == 1
        assert commits[0].author == "first"

    def test_mapping_input(self):
        raw = {"h1": RawCommit(hash="h1", timestamp=2), "h2": RawCommit(hash="h2", timestamp=1)}
        assert [c.hash for c in normalize_commits(raw)] == ["h1", "h2"]

    def test_missing_hash_dropped(self):
        assert normalize_commits([RawCommit(hash="")]) == []


class TestChronological:
    """Tests for timestamp ordering."""

    def test_sorted_and_invalid_dropped(self):
        commits = normalize_commits(
            [
                RawCommit(hash="late", timestamp=30),
                RawCommit(hash="bad", timestamp="garbage"),
                RawCommit(hash="early", timestamp=10),
                RawCommit(hash="tie", timestamp=30),
            ]
        )
        assert [c.hash for c in chronological(commits)] == ["early", "late", "tie"]
