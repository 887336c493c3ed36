"""Tests for the GitHub pull-request source."""

import asyncio
import json

import httpx
import pytest

from evolution_insight.collaborators import GitHubPullRequestSource, extract_pr_numbers
from evolution_insight.exceptions import CollaboratorUnavailableError

SHA_A = "a" * 40
SHA_B = "b" * 40

PR_12 = {
    "number": 12,
    "title": "Fix login bug",
    "html_url": "https://github.com/o/r/pull/12",
    "state": "closed",
    "user": {"login": "alice"},
    "created_at": "2024-01-01T00:00:00Z",
    "updated_at": "2024-01-03T00:00:00Z",
    "merged_at": "2024-01-03T00:00:00Z",
    "closed_at": "2024-01-03T00:00:00Z",
}
REVIEWS_12 = [
    {"user": {"login": "bob"}, "state": "COMMENTED", "submitted_at": "2024-01-01T06:00:00Z"},
    {"user": {"login": "carol"}, "state": "APPROVED", "submitted_at": "2024-01-02T00:00:00Z"},
]
COMMITS_12 = [{"sha": SHA_A, "commit": {"message": "Fix login bug"}}]


def github_handler(calls):
    routes = {
        f"/repos/o/r/commits/{SHA_A}/pulls": [{"number": 12}],
        f"/repos/o/r/commits/{SHA_B}/pulls": [],
        "/repos/o/r/pulls/12": PR_12,
        "/repos/o/r/pulls/12/reviews": REVIEWS_12,
        "/repos/o/r/pulls/12/commits": COMMITS_12,
    }

    def handler(request):
        calls.append(request)
        body = routes.get(request.url.path)
        if body is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(200, content=json.dumps(body))

    return handler


def fetch(source, commits):
    return asyncio.run(source.fetch_pull_requests_for_commits(commits))


@pytest.fixture
def calls():
    return []


@pytest.fixture
def source(calls):
    client = httpx.AsyncClient(transport=httpx.MockTransport(github_handler(calls)))
    return GitHubPullRequestSource("o/r", token="secret", client=client)


class TestExtractPrNumbers:
    """Tests for PR references in commit messages."""

    def test_reference_styles(self):
        assert extract_pr_numbers("Merge pull request #42 from x/y") == [42]
        assert extract_pr_numbers("Fix (#7), see PR #9 and pull/11") == [7, 9, 11]

    def test_duplicates_and_empty(self):
        assert extract_pr_numbers("#3 and again #3") == [3]
        assert extract_pr_numbers(None) == []
        assert extract_pr_numbers("no refs here") == []


class TestGitHubPullRequestSource:
    """Tests for fetching PRs through a mocked API."""

    def test_record_built_from_api(self, source, make_commit):
        commits = [
            make_commit(hash=SHA_A, message="Fix login bug"),
            make_commit(hash=SHA_B, message="Follow-up for #12, see #99"),
        ]
        (pr,) = fetch(source, commits)

        assert pr.number == 12
        assert pr.author == "alice"
        assert pr.state == "closed"
        assert pr.created_at == 1704067200
        assert pr.reviewers == ("bob", "carol")
        assert pr.approval_count == 1
        assert pr.first_approval_days == 1.0
        assert pr.commit_hashes == (SHA_A,)
        assert pr.related_commits == (SHA_A, SHA_B)

    def test_token_sent(self, source, calls, make_commit):
        fetch(source, [make_commit(hash=SHA_B, message="")])
        assert calls
        assert calls[0].headers["Authorization"] == "token secret"

    def test_cached_pr_not_refetched(self, source, calls, make_commit):
        commits = [make_commit(hash=SHA_A, message="")]
        fetch(source, commits)
        first = len(calls)
        fetch(source, commits)
        assert len(calls) == first

    def test_without_token_returns_nothing(self, calls, make_commit):
        client = httpx.AsyncClient(transport=httpx.MockTransport(github_handler(calls)))
        source = GitHubPullRequestSource("o/r", client=client)
        assert fetch(source, [make_commit(hash=SHA_A)]) == []
        assert calls == []

    def test_server_errors_omit_enrichment(self, make_commit):
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(500))
        )
        source = GitHubPullRequestSource("o/r", token="t", client=client)
        assert fetch(source, [make_commit(hash=SHA_A, message="#5")]) == []

    def test_malformed_pull_request_makes_source_unavailable(self, make_commit):
        def handler(request):
            if request.url.path == "/repos/o/r/pulls/5":
                return httpx.Response(200, json={"title": "no number or dates"})
            return httpx.Response(200, json=[])

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        source = GitHubPullRequestSource("o/r", token="t", client=client)
        with pytest.raises(CollaboratorUnavailableError) as excinfo:
            fetch(source, [make_commit(hash=SHA_A, message="#5")])
        assert excinfo.value.collaborator == "github"
