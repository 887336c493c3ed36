"""Normalize raw per-commit log/stat output into Commit records.

Nothing in here raises on bad input: missing numbers default to zero and
unparseable timestamps become ``None`` so downstream analyses can skip the
record with a warning.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Optional

from ..logging_config import get_logger
from .models import Commit, CommitStats, RawCommit

logger = get_logger(__name__)

_INSERTIONS_RE = re.compile(r"(\d+) insertions?\b")
_DELETIONS_RE = re.compile(r"(\d+) deletions?\b")

# " src/app.js | 12 ++++----" / " logo.png | Bin 0 -> 1234 bytes"
_STAT_FILE_RE = re.compile(r"^\s*(?P<path>.+?)\s+\|\s+(?:\d+|Bin\b)")
# "{old => new}" segments and plain "old => new" renames
_BRACE_RENAME_RE = re.compile(r"\{([^{}]*?) => ([^{}]*?)\}")
_PLAIN_RENAME_RE = re.compile(r"^(?P<old>.+?) => (?P<new>.+)$")

# "1704067200 +0100" as produced by --format=%at %z
_GIT_EPOCH_TZ_RE = re.compile(r"^(?P<epoch>-?\d+)\s+(?P<sign>[+-])(?P<hh>\d{2})(?P<mm>\d{2})$")


def parse_stat_output(stat_text: Optional[str]) -> CommitStats:
    """Extract insertion and deletion counts from ``git show --stat`` text.

    Absent patterns default to 0.
    """
    if not stat_text:
        return CommitStats()
    insertions = _INSERTIONS_RE.search(stat_text)
    deletions = _DELETIONS_RE.search(stat_text)
    return CommitStats(
        insertions=int(insertions.group(1)) if insertions else 0,
        deletions=int(deletions.group(1)) if deletions else 0,
    )


def _resolve_rename(path: str) -> str:
    if _BRACE_RENAME_RE.search(path):
        path = _BRACE_RENAME_RE.sub(lambda m: m.group(2), path)
        return re.sub(r"/{2,}", "/", path).strip("/")
    match = _PLAIN_RENAME_RE.match(path)
    if match:
        return match.group("new")
    return path


def parse_stat_files(stat_text: Optional[str]) -> tuple[str, ...]:
    """Touched file paths from the ``path | N +-`` listing of a stat block.

    Renames resolve to the new path. Order of first appearance is kept.
    """
    if not stat_text:
        return ()
    seen: dict[str, None] = {}
    for line in stat_text.splitlines():
        match = _STAT_FILE_RE.match(line)
        if not match:
            continue
        path = _resolve_rename(match.group("path").strip())
        if path:
            seen.setdefault(path, None)
    return tuple(seen)


def parse_timestamp(value: object) -> tuple[Optional[int], Optional[int]]:
    """Parse a commit timestamp into ``(unix_seconds, tz_offset_minutes)``.

    Accepts unix seconds (int/float or numeric string), ``datetime``,
    ISO-8601 strings (``Z`` suffix allowed) and git ``"%at %z"`` pairs.
    Returns ``(None, None)`` for anything else.
    """
    if value is None or isinstance(value, bool):
        return None, None

    if isinstance(value, (int, float)):
        return int(value), None

    if isinstance(value, datetime):
        return _from_datetime(value)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None, None

        match = _GIT_EPOCH_TZ_RE.match(text)
        if match:
            offset = int(match.group("hh")) * 60 + int(match.group("mm"))
            if match.group("sign") == "-":
                offset = -offset
            return int(match.group("epoch")), offset

        try:
            return int(float(text)), None
        except ValueError:
            pass

        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None, None
        return _from_datetime(parsed)

    return None, None


def _from_datetime(value: datetime) -> tuple[int, Optional[int]]:
    if value.tzinfo is None:
        return int(value.replace(tzinfo=timezone.utc).timestamp()), None
    offset = value.utcoffset()
    offset_minutes = int(offset.total_seconds() // 60) if offset is not None else None
    return int(value.timestamp()), offset_minutes


def normalize_commit(raw: RawCommit) -> Commit:
    """Build a Commit from one raw record, defaulting whatever is missing."""
    stats = parse_stat_output(raw.stat_text)
    timestamp, tz_offset = parse_timestamp(raw.timestamp)
    if timestamp is None:
        logger.warning("Commit %s has unparseable timestamp %r", raw.hash[:12], raw.timestamp)

    files = tuple(raw.files) if raw.files is not None else parse_stat_files(raw.stat_text)

    return Commit(
        hash=raw.hash,
        author=(raw.author or "").strip(),
        timestamp=timestamp,
        message=raw.message or "",
        files=files,
        insertions=stats.insertions,
        deletions=stats.deletions,
        tz_offset_minutes=tz_offset,
    )


def normalize_commits(raw_commits: Mapping[str, RawCommit] | Iterable[RawCommit]) -> list[Commit]:
    """Normalize a batch of raw commits keyed (or identified) by hash.

    Duplicate hashes keep their first occurrence; records without a hash are
    dropped with a warning.
    """
    records = raw_commits.values() if isinstance(raw_commits, Mapping) else raw_commits

    commits: list[Commit] = []
    seen: set[str] = set()
    for raw in records:
        if not raw.hash:
            logger.warning("Skipping raw commit without hash")
            continue
        if raw.hash in seen:
            logger.debug("Duplicate commit %s ignored", raw.hash[:12])
            continue
        seen.add(raw.hash)
        commits.append(normalize_commit(raw))

    return commits


def chronological(commits: Iterable[Commit]) -> list[Commit]:
    """Commits with a valid timestamp, oldest first (stable for equal times)."""
    return sorted((c for c in commits if c.timestamp is not None), key=lambda c: c.timestamp)
