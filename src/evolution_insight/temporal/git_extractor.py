"""Extract git history via subprocess."""

from __future__ import annotations

import re
import subprocess
from pathlib import Path
from typing import Optional

from ..logging_config import get_logger
from .models import GitHistory, RawCommit
from .normalizer import normalize_commits

logger = get_logger(__name__)

# Record separator in front of every header so subjects can't be mistaken for headers
_RS = "\x1e"


class GitExtractor:
    """Parse ``git log --stat`` into a normalized GitHistory."""

    def __init__(self, repo_path: str, max_commits: int = 5000):
        self.repo_path = str(Path(repo_path).resolve())
        self.max_commits = max_commits

    def extract(self) -> Optional[GitHistory]:
        """Parse git log via subprocess. Return None if not a git repo."""
        if not self._is_git_repo():
            logger.info("Not a git repository, skipping history extraction")
            return None

        raw = self._run_git_log()
        if raw is None:
            return None

        raw_commits = self._parse_log(raw)
        if not raw_commits:
            return None

        # git log is newest first
        commits = normalize_commits(reversed(raw_commits))

        file_set: set[str] = set()
        for c in commits:
            file_set.update(c.files)

        timestamps = [c.timestamp for c in commits if c.timestamp is not None]
        span_days = 0
        if len(timestamps) >= 2:
            span_days = max(1, (max(timestamps) - min(timestamps)) // 86400)

        return GitHistory(
            commits=commits,
            file_set=file_set,
            span_days=span_days,
        )

    def _is_git_repo(self) -> bool:
        try:
            result = subprocess.run(
                ["git", "-C", self.repo_path, "rev-parse", "--git-dir"],
                capture_output=True,
                text=True,
                timeout=5,
            )
            return result.returncode == 0
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return False

    def remote_github_repo(self) -> Optional[str]:
        """``owner/name`` of the first GitHub remote, if any."""
        try:
            result = subprocess.run(
                ["git", "-C", self.repo_path, "remote", "--verbose"],
                capture_output=True,
                text=True,
                timeout=5,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return None
        if result.returncode != 0:
            return None
        for line in result.stdout.splitlines():
            match = _GITHUB_REMOTE_RE.search(line)
            if match:
                return match.group(1)
        return None

    # Maximum git log output size (50MB) to prevent OOM on huge repos
    _MAX_OUTPUT_BYTES = 50 * 1024 * 1024

    def _run_git_log(self) -> Optional[str]:
        try:
            cmd = [
                "git",
                "-C",
                self.repo_path,
                "log",
                f"--format={_RS}%H|%at %z|%ae|%s",
                "--stat=4096,4000",
            ]
            if self.max_commits:
                cmd.append(f"-n{self.max_commits}")
            # Use Popen for streaming to avoid loading unbounded output into memory
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
            try:
                chunks = []
                total_size = 0
                stdout = proc.stdout
                if stdout is None:
                    return None
                while True:
                    chunk = stdout.read(1024 * 1024)
                    if not chunk:
                        break
                    total_size += len(chunk)
                    if total_size > self._MAX_OUTPUT_BYTES:
                        logger.warning(
                            "git log output exceeded %dMB limit, truncating",
                            self._MAX_OUTPUT_BYTES // (1024 * 1024),
                        )
                        proc.kill()
                        break
                    chunks.append(chunk)

                proc.wait(timeout=30)
                if proc.returncode != 0 and proc.returncode != -9:  # -9 = killed
                    stderr = proc.stderr.read() if proc.stderr else ""
                    logger.warning("git log failed: %s", stderr.strip())
                    return None
                return "".join(chunks)
            finally:
                if proc.stdout:
                    proc.stdout.close()
                if proc.stderr:
                    proc.stderr.close()
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            logger.warning("git log error: %s", e)
            return None

    # Matches: 40-char hex hash | unix timestamp and offset | author email | subject
    _HEADER_RE = re.compile(r"^[0-9a-f]{40}\|-?\d+ [+-]\d{4}\|[^|]*\|.*$")

    def _parse_log(self, raw: str) -> list[RawCommit]:
        """Split git log output into raw commits, newest first.

        Each record starts with the record separator followed by the header
        line; everything after the header is the stat block. A record cut off
        by truncation is kept with whatever stat text arrived.
        """
        commits: list[RawCommit] = []
        for record in raw.split(_RS):
            if not record.strip():
                continue
            header, _, stat_text = record.partition("\n")
            header = header.strip()
            if not self._HEADER_RE.match(header):
                logger.warning("Skipping unparseable git log header: %r", header[:80])
                continue

            # Subject can contain | characters, so split at most three times
            sha, timestamp, author, subject = header.split("|", 3)
            commits.append(
                RawCommit(
                    hash=sha,
                    author=author,
                    timestamp=timestamp,
                    message=subject,
                    stat_text=stat_text,
                )
            )

        return commits


_GITHUB_REMOTE_RE = re.compile(r"github\.com[:/]([^/\s]+/[^/\s]+?)(?:\.git)?(?:\s|$)")
