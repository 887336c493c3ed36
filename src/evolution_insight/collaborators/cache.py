"""Pull-request cache with pluggable disk persistence.

The cache itself is a plain in-memory mapping owned by whoever creates it and
handed to the GitHub source. Persistence is a strategy:

- NullPersistence: memory only
- JsonFilePersistence: one JSON file per repository, expired as a whole
- SqlitePersistence: one row per entry, expired per entry
"""

from __future__ import annotations

import json
import sqlite3
import time
from collections.abc import Callable
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Optional, Protocol

from ..graph.models import PullRequestRecord
from ..logging_config import get_logger

logger = get_logger(__name__)

Clock = Callable[[], float]

# Schema version for migrations
_SCHEMA_VERSION = 1


class CachePersistence(Protocol):
    def load(self, namespace: str) -> dict[str, Any]: ...

    def save(self, namespace: str, entries: dict[str, Any]) -> None: ...


class NullPersistence:
    def load(self, namespace: str) -> dict[str, Any]:
        return {}

    def save(self, namespace: str, entries: dict[str, Any]) -> None:
        return None


def _cache_file_stem(namespace: str) -> str:
    return namespace.replace("/", "_")


class JsonFilePersistence:
    """``<cache_dir>/<owner>_<repo>_pr_cache.json`` with a write timestamp."""

    def __init__(self, cache_dir: str | Path, ttl_seconds: float, clock: Clock = time.time):
        self.cache_dir = Path(cache_dir)
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def path_for(self, namespace: str) -> Path:
        return self.cache_dir / f"{_cache_file_stem(namespace)}_pr_cache.json"

    def load(self, namespace: str) -> dict[str, Any]:
        path = self.path_for(namespace)
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable PR cache %s: %s", path, e)
            return {}
        written = data.get("timestamp")
        if not isinstance(written, (int, float)) or self.clock() - written >= self.ttl_seconds:
            logger.debug("PR cache %s expired", path)
            return {}
        entries = data.get("entries")
        return entries if isinstance(entries, dict) else {}

    def save(self, namespace: str, entries: dict[str, Any]) -> None:
        path = self.path_for(namespace)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(
                    {"timestamp": self.clock(), "entries": entries}, indent=2, sort_keys=True
                ),
                encoding="utf-8",
            )
        except OSError as e:
            logger.warning("Could not write PR cache %s: %s", path, e)


class SqlitePersistence:
    """SQLite-backed entries, each stamped with the time it was stored.

    Usage:
        with SqlitePersistence(".evolution-cache", ttl_seconds=86400) as store:
            cache = PullRequestCache(store)
    """

    def __init__(self, cache_dir: str | Path, ttl_seconds: float, clock: Clock = time.time):
        self._cache_dir = Path(cache_dir)
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        self._db_path = self._cache_dir / "pr_cache.db"
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._conn: sqlite3.Connection | None = None
        self._init_db()

    def _init_db(self) -> None:
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS cache_meta (
                key TEXT PRIMARY KEY,
                value TEXT
            );

            CREATE TABLE IF NOT EXISTS pr_entries (
                namespace TEXT NOT NULL,
                key TEXT NOT NULL,
                value TEXT NOT NULL,
                stored_at REAL NOT NULL,
                PRIMARY KEY (namespace, key)
            );
            """
        )

        row = self._conn.execute(
            "SELECT value FROM cache_meta WHERE key = 'schema_version'"
        ).fetchone()
        if row is None:
            self._conn.execute(
                "INSERT INTO cache_meta (key, value) VALUES ('schema_version', ?)",
                (str(_SCHEMA_VERSION),),
            )
        elif int(row["value"]) != _SCHEMA_VERSION:
            logger.warning(
                "PR cache schema version mismatch: %s vs %s. Clearing cache.",
                row["value"],
                _SCHEMA_VERSION,
            )
            self._conn.execute("DELETE FROM pr_entries")
            self._conn.execute(
                "UPDATE cache_meta SET value = ? WHERE key = 'schema_version'",
                (str(_SCHEMA_VERSION),),
            )
        self._conn.commit()

    def load(self, namespace: str) -> dict[str, Any]:
        if self._conn is None:
            return {}
        cutoff = self.clock() - self.ttl_seconds
        try:
            rows = self._conn.execute(
                "SELECT key, value FROM pr_entries WHERE namespace = ? AND stored_at > ?",
                (namespace, cutoff),
            ).fetchall()
        except sqlite3.Error as e:
            logger.warning("Ignoring unreadable PR cache %s: %s", self._db_path, e)
            return {}

        entries: dict[str, Any] = {}
        for row in rows:
            try:
                entries[row["key"]] = json.loads(row["value"])
            except json.JSONDecodeError:
                logger.warning("Skipping corrupt PR cache entry %s", row["key"])
        return entries

    def save(self, namespace: str, entries: dict[str, Any]) -> None:
        if self._conn is None:
            return
        now = self.clock()
        try:
            self._conn.executemany(
                "INSERT OR REPLACE INTO pr_entries (namespace, key, value, stored_at) "
                "VALUES (?, ?, ?, ?)",
                [(namespace, k, json.dumps(v, sort_keys=True), now) for k, v in entries.items()],
            )
            self._conn.commit()
        except sqlite3.Error as e:
            logger.warning("Could not write PR cache %s: %s", self._db_path, e)

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> SqlitePersistence:
        return self

    def __exit__(self, *args) -> None:
        self.close()


_PR_TUPLE_FIELDS = frozenset({"commit_hashes", "commit_messages", "reviewers", "related_commits"})


def pull_request_to_dict(pr: PullRequestRecord) -> dict[str, Any]:
    return {k: list(v) if isinstance(v, tuple) else v for k, v in asdict(pr).items()}


def pull_request_from_dict(data: dict[str, Any]) -> PullRequestRecord:
    known = {f.name for f in fields(PullRequestRecord)}
    values = {
        k: tuple(v) if k in _PR_TUPLE_FIELDS else v for k, v in data.items() if k in known
    }
    return PullRequestRecord(**values)


class PullRequestCache:
    """In-memory PR lookups for one repository at a time.

    Keys are ``pr:<number>`` for PR details and ``commit:<sha>`` for the PR
    numbers GitHub associates with a commit.
    """

    def __init__(self, persistence: Optional[CachePersistence] = None):
        self.persistence: CachePersistence = persistence or NullPersistence()
        self._entries: dict[str, Any] = {}
        self._namespace: Optional[str] = None

    def load(self, namespace: str) -> int:
        if namespace != self._namespace:
            self._entries.clear()
        self._namespace = namespace
        self._entries.update(self.persistence.load(namespace))
        return len(self._entries)

    def save(self) -> None:
        if self._namespace is not None:
            self.persistence.save(self._namespace, dict(self._entries))

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get_pull_request(self, number: int) -> Optional[PullRequestRecord]:
        data = self._entries.get(f"pr:{number}")
        return pull_request_from_dict(data) if data is not None else None

    def put_pull_request(self, pr: PullRequestRecord) -> None:
        self._entries[f"pr:{pr.number}"] = pull_request_to_dict(pr)

    def get_commit_prs(self, sha: str) -> Optional[list[int]]:
        value = self._entries.get(f"commit:{sha}")
        return list(value) if value is not None else None

    def put_commit_prs(self, sha: str, numbers: list[int]) -> None:
        self._entries[f"commit:{sha}"] = sorted(set(numbers))
