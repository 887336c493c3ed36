"""TODO inventories: a prepared JSON file, or a scan of the working tree."""

from __future__ import annotations

import json
import re
import subprocess
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Optional

from ..config import DEFAULT_SOURCE_EXTENSIONS
from ..exceptions import CollaboratorUnavailableError
from ..insights.models import TodoItem
from ..logging_config import get_logger
from ..temporal.normalizer import parse_timestamp

logger = get_logger(__name__)

_TODO_RE = re.compile(r"\bTODO\b", re.IGNORECASE)
_AUTHOR_TIME_RE = re.compile(r"^author-time (\d+)$", re.MULTILINE)

SKIP_DIRS = frozenset({".git", "node_modules", "vendor", "dist", "build", ".venv", "__pycache__"})


class JsonTodoInventory:
    """Reads ``{file: [{"text": ..., "date": ..., "line": ...}]}`` from disk.

    ``date`` may be unix seconds or an ISO-8601 string.
    """

    name = "todo-json"

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def read_todo_inventory(self) -> dict[str, list[TodoItem]]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise CollaboratorUnavailableError(self.name, f"{self.path}: {e}") from e
        if not isinstance(raw, dict):
            raise CollaboratorUnavailableError(self.name, f"{self.path}: expected an object")

        inventory: dict[str, list[TodoItem]] = {}
        for file, entries in sorted(raw.items()):
            if entries is None:
                entries = []
            if not isinstance(entries, list):
                logger.warning("Skipping %s: expected a list of TODOs", file)
                continue
            items = [self._item(file, e) for e in entries if isinstance(e, dict)]
            inventory[file] = [i for i in items if i is not None]
        return inventory

    @staticmethod
    def _item(file: str, entry: dict[str, Any]) -> Optional[TodoItem]:
        text = entry.get("text")
        if not isinstance(text, str):
            logger.warning("Skipping TODO without text in %s", file)
            return None
        date, _ = parse_timestamp(entry.get("date"))
        line = entry.get("line")
        return TodoItem(text=text.strip(), date=date, line=line if isinstance(line, int) else None)


class TodoScanner:
    """Walks a checkout for TODO comments, dating each one with ``git blame``."""

    name = "todo-scanner"

    def __init__(
        self,
        root_dir: str | Path,
        extensions: Iterable[str] = DEFAULT_SOURCE_EXTENSIONS,
        use_blame: bool = True,
    ):
        self.root_dir = Path(root_dir).resolve()
        self.extensions = tuple(ext.lower() for ext in extensions)
        self.use_blame = use_blame

    def _source_files(self) -> list[Path]:
        files = []
        for path in self.root_dir.rglob("*"):
            relative = path.relative_to(self.root_dir)
            if any(part in SKIP_DIRS for part in relative.parts):
                continue
            if path.is_file() and path.suffix.lower() in self.extensions:
                files.append(path)
        return sorted(files)

    def _blame_time(self, path: Path, line: int) -> Optional[int]:
        try:
            result = subprocess.run(
                [
                    "git",
                    "-C",
                    str(self.root_dir),
                    "blame",
                    "--line-porcelain",
                    "-L",
                    f"{line},{line}",
                    "--",
                    str(path.relative_to(self.root_dir)),
                ],
                capture_output=True,
                text=True,
                timeout=10,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return None
        if result.returncode != 0:
            return None
        match = _AUTHOR_TIME_RE.search(result.stdout)
        return int(match.group(1)) if match else None

    def read_todo_inventory(self) -> dict[str, list[TodoItem]]:
        if not self.root_dir.is_dir():
            raise CollaboratorUnavailableError(self.name, f"{self.root_dir} is not a directory")

        inventory: dict[str, list[TodoItem]] = {}
        for path in self._source_files():
            try:
                lines = path.read_text(encoding="utf-8", errors="replace").split("\n")
            except OSError as e:
                logger.warning("Could not read %s: %s", path, e)
                continue

            items = [
                TodoItem(
                    text=text.strip(),
                    date=self._blame_time(path, number) if self.use_blame else None,
                    line=number,
                )
                for number, text in enumerate(lines, start=1)
                if _TODO_RE.search(text)
            ]
            if items:
                inventory[path.relative_to(self.root_dir).as_posix()] = items

        logger.debug("Found TODOs in %d files", len(inventory))
        return inventory
