"""Pull-request metadata from the GitHub REST API.

PR numbers for a commit come from two places: the commit's associated pulls
endpoint and references in the commit message (``#123``, ``PR #123``,
``pull/123``). Each PR is then fetched once with its reviews and commits.

Only the first page of each listing is read; there is no retry or backoff.
A failed request omits that piece of enrichment and is logged. A payload or
cache entry that cannot be turned into a record makes the whole source
unavailable for the run.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Sequence
from dataclasses import replace
from typing import Any, Optional

import httpx

from ..exceptions import CollaboratorUnavailableError
from ..graph.models import PullRequestRecord
from ..logging_config import get_logger
from ..temporal.models import Commit
from ..temporal.normalizer import parse_timestamp
from .cache import PullRequestCache

logger = get_logger(__name__)

GITHUB_API = "https://api.github.com"

_PR_REFERENCE_RE = re.compile(r"(?:pull request #|\bpr #|\bpull/|#)(\d+)", re.IGNORECASE)


def extract_pr_numbers(message: Optional[str]) -> list[int]:
    """PR numbers referenced in a commit message, in order of first mention."""
    if not message:
        return []
    seen: dict[int, None] = {}
    for match in _PR_REFERENCE_RE.finditer(message):
        number = int(match.group(1))
        if number > 0:
            seen.setdefault(number, None)
    return list(seen)


def _iso_to_unix(value: Optional[str]) -> Optional[int]:
    return parse_timestamp(value)[0] if value else None


def _login(payload: Optional[dict[str, Any]]) -> str:
    return (payload or {}).get("login") or ""


class GitHubPullRequestSource:
    """Fetches PRs for a list of commits from one ``owner/name`` repository."""

    name = "github"

    def __init__(
        self,
        repo: str,
        token: Optional[str] = None,
        cache: Optional[PullRequestCache] = None,
        client: Optional[httpx.AsyncClient] = None,
        max_concurrent: int = 8,
        base_url: str = GITHUB_API,
    ):
        self.repo = repo
        self.token = token
        self.cache = cache if cache is not None else PullRequestCache()
        self._client = client
        self.max_concurrent = max_concurrent
        self.base_url = base_url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    async def _get_json(self, client: httpx.AsyncClient, path: str) -> Any:
        response = await client.get(f"{self.base_url}{path}", headers=self._headers())
        response.raise_for_status()
        return response.json()

    async def _commit_pr_numbers(
        self, client: httpx.AsyncClient, commit: Commit, semaphore: asyncio.Semaphore
    ) -> list[int]:
        cached = self.cache.get_commit_prs(commit.hash)
        if cached is None:
            async with semaphore:
                try:
                    data = await self._get_json(
                        client, f"/repos/{self.repo}/commits/{commit.hash}/pulls"
                    )
                    cached = [int(pr["number"]) for pr in data if "number" in pr]
                    self.cache.put_commit_prs(commit.hash, cached)
                except httpx.HTTPStatusError as e:
                    if e.response.status_code == 404:
                        cached = []
                        self.cache.put_commit_prs(commit.hash, cached)
                    else:
                        logger.warning("PR lookup failed for %s: %s", commit.hash[:12], e)
                        cached = []
                except httpx.HTTPError as e:
                    logger.warning("PR lookup failed for %s: %s", commit.hash[:12], e)
                    cached = []

        numbers = dict.fromkeys(cached)
        numbers.update(dict.fromkeys(extract_pr_numbers(commit.message)))
        return list(numbers)

    async def _pull_request(
        self, client: httpx.AsyncClient, number: int, semaphore: asyncio.Semaphore
    ) -> Optional[PullRequestRecord]:
        cached = self.cache.get_pull_request(number)
        if cached is not None:
            return cached

        base = f"/repos/{self.repo}/pulls/{number}"
        async with semaphore:
            try:
                pr, reviews, commits = await asyncio.gather(
                    self._get_json(client, base),
                    self._get_json(client, f"{base}/reviews"),
                    self._get_json(client, f"{base}/commits"),
                )
            except httpx.HTTPError as e:
                logger.warning("Could not fetch PR #%d in %s: %s", number, self.repo, e)
                return None

        record = self._to_record(pr, reviews, commits)
        self.cache.put_pull_request(record)
        return record

    @staticmethod
    def _to_record(pr: dict[str, Any], reviews: list[dict], commits: list[dict]) -> PullRequestRecord:
        created = _iso_to_unix(pr.get("created_at"))
        reviewers = sorted({_login(r.get("user")) for r in reviews if _login(r.get("user"))})
        approvals = [
            _iso_to_unix(r.get("submitted_at")) for r in reviews if r.get("state") == "APPROVED"
        ]
        approval_times = [t for t in approvals if t is not None]
        first_approval_days = None
        if approval_times and created is not None:
            first_approval_days = round((min(approval_times) - created) / 86400, 2)

        return PullRequestRecord(
            number=int(pr["number"]),
            title=pr.get("title") or "",
            url=pr.get("html_url") or "",
            state=pr.get("state") or "open",
            author=_login(pr.get("user")),
            created_at=created,
            updated_at=_iso_to_unix(pr.get("updated_at")),
            merged_at=_iso_to_unix(pr.get("merged_at")),
            closed_at=_iso_to_unix(pr.get("closed_at")),
            commit_hashes=tuple(c["sha"] for c in commits if c.get("sha")),
            commit_messages=tuple(
                (c.get("commit") or {}).get("message") or "" for c in commits
            ),
            reviewers=tuple(reviewers),
            approval_count=len(approvals),
            first_approval_days=first_approval_days,
        )

    async def fetch_pull_requests_for_commits(
        self, commits: Sequence[Commit]
    ) -> list[PullRequestRecord]:
        if not self.token:
            logger.warning("No GitHub token set; skipping pull-request enrichment")
            return []

        semaphore = asyncio.Semaphore(self.max_concurrent)
        try:
            self.cache.load(self.repo)
            if self._client is not None:
                records = await self._fetch(self._client, commits, semaphore)
            else:
                async with httpx.AsyncClient(timeout=30) as client:
                    records = await self._fetch(client, commits, semaphore)
            self.cache.save()
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise CollaboratorUnavailableError(
                self.name, f"malformed pull-request data: {e!r}"
            ) from e

        logger.info("Fetched %d pull requests for %s", len(records), self.repo)
        return records

    async def _fetch(
        self,
        client: httpx.AsyncClient,
        commits: Sequence[Commit],
        semaphore: asyncio.Semaphore,
    ) -> list[PullRequestRecord]:
        per_commit = await asyncio.gather(
            *(self._commit_pr_numbers(client, c, semaphore) for c in commits)
        )

        referencing: dict[int, list[str]] = {}
        for commit, numbers in zip(commits, per_commit):
            for number in numbers:
                referencing.setdefault(number, []).append(commit.hash)

        numbers = sorted(referencing)
        fetched = await asyncio.gather(
            *(self._pull_request(client, n, semaphore) for n in numbers)
        )

        records: list[PullRequestRecord] = []
        for number, record in zip(numbers, fetched):
            if record is None:
                continue
            records.append(replace(record, related_commits=tuple(referencing[number])))
        return records
