"""Per-commit stats and diffs from a local git checkout."""

from __future__ import annotations

import asyncio
from pathlib import Path

from ..exceptions import CollaboratorUnavailableError
from ..logging_config import get_logger
from ..temporal.models import CommitStats
from ..temporal.normalizer import parse_stat_output

logger = get_logger(__name__)

# Diffs larger than this are cut; the differ drops the incomplete tail
_MAX_DIFF_BYTES = 8 * 1024 * 1024


class GitCommitDataSource:
    """Runs ``git show`` as an asyncio subprocess per request."""

    name = "git"

    def __init__(self, repo_path: str, git_binary: str = "git"):
        self.repo_path = str(Path(repo_path).resolve())
        self.git_binary = git_binary

    async def _git(self, *args: str) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                self.git_binary,
                "-C",
                self.repo_path,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise CollaboratorUnavailableError(self.name, str(e)) from e

        stdout, stderr = await proc.communicate()
        if proc.returncode != 0:
            reason = stderr.decode("utf-8", errors="replace").strip() or f"exit {proc.returncode}"
            raise CollaboratorUnavailableError(self.name, reason)

        if len(stdout) > _MAX_DIFF_BYTES:
            logger.warning(
                "git %s output exceeded %dMB, truncating", args[0], _MAX_DIFF_BYTES // (1024 * 1024)
            )
            stdout = stdout[:_MAX_DIFF_BYTES]
        return stdout.decode("utf-8", errors="replace")

    async def get_commit_stats(self, commit_hash: str) -> CommitStats:
        output = await self._git("show", "--stat", "--format=", commit_hash)
        return parse_stat_output(output)

    async def get_commit_diff(self, commit_hash: str) -> str:
        return await self._git(
            "show", "--format=", "--no-color", "--function-context", commit_hash
        )
