"""Extract changed functions from a unified diff and measure their complexity.

The function-boundary scan is a two-state machine over diff lines:

    OUTSIDE --DECLARATION--> INSIDE_FUNCTION --CLOSING_BRACE--> OUTSIDE

``classify_line`` turns one diff line into a ``LineKind`` and ``TRANSITIONS``
maps ``(state, kind)`` to ``(next_state, action)``. Both are pure, so the
machine can be tested without any diff text at all.

Works best on diffs produced with ``--function-context`` so every hunk
carries whole functions. A function still open when its hunk or file ends is
incomplete and dropped.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..config import ComplexityConfig
from ..logging_config import get_logger
from .metrics import compute_complexity
from .models import ExtractedFunction, FunctionComplexityChange

logger = get_logger(__name__)


class ScanState(Enum):
    OUTSIDE = "outside"
    INSIDE_FUNCTION = "inside-function"


class LineKind(Enum):
    FILE_HEADER = "file-header"  # "diff --git a/x b/x"
    HUNK_HEADER = "hunk-header"
    META = "meta"  # "\ No newline at end of file"
    DECLARATION = "declaration"
    INLINE_FUNCTION = "inline-function"  # declaration whose braces balance on one line
    CLOSING_BRACE = "closing-brace"  # brace at or left of the open declaration's indent
    BODY = "body"


class Action(Enum):
    IGNORE = "ignore"
    OPEN = "open"
    OPEN_AND_CLOSE = "open-and-close"
    APPEND = "append"
    CLOSE = "close"
    DISCARD = "discard"


TRANSITIONS: dict[tuple[ScanState, LineKind], tuple[ScanState, Action]] = {
    (ScanState.OUTSIDE, LineKind.FILE_HEADER): (ScanState.OUTSIDE, Action.IGNORE),
    (ScanState.OUTSIDE, LineKind.HUNK_HEADER): (ScanState.OUTSIDE, Action.IGNORE),
    (ScanState.OUTSIDE, LineKind.META): (ScanState.OUTSIDE, Action.IGNORE),
    (ScanState.OUTSIDE, LineKind.BODY): (ScanState.OUTSIDE, Action.IGNORE),
    (ScanState.OUTSIDE, LineKind.CLOSING_BRACE): (ScanState.OUTSIDE, Action.IGNORE),
    (ScanState.OUTSIDE, LineKind.DECLARATION): (ScanState.INSIDE_FUNCTION, Action.OPEN),
    (ScanState.OUTSIDE, LineKind.INLINE_FUNCTION): (ScanState.OUTSIDE, Action.OPEN_AND_CLOSE),
    (ScanState.INSIDE_FUNCTION, LineKind.FILE_HEADER): (ScanState.OUTSIDE, Action.DISCARD),
    (ScanState.INSIDE_FUNCTION, LineKind.HUNK_HEADER): (ScanState.OUTSIDE, Action.DISCARD),
    (ScanState.INSIDE_FUNCTION, LineKind.META): (ScanState.INSIDE_FUNCTION, Action.IGNORE),
    (ScanState.INSIDE_FUNCTION, LineKind.BODY): (ScanState.INSIDE_FUNCTION, Action.APPEND),
    (ScanState.INSIDE_FUNCTION, LineKind.DECLARATION): (ScanState.INSIDE_FUNCTION, Action.APPEND),
    (ScanState.INSIDE_FUNCTION, LineKind.INLINE_FUNCTION): (
        ScanState.INSIDE_FUNCTION,
        Action.APPEND,
    ),
    (ScanState.INSIDE_FUNCTION, LineKind.CLOSING_BRACE): (ScanState.OUTSIDE, Action.CLOSE),
}


@dataclass(frozen=True)
class DiffLine:
    kind: LineKind
    origin: str  # "+", "-" or " "
    code: str
    indent: int
    function_name: Optional[str] = None


def _indent_of(code: str) -> int:
    return len(code.expandtabs(4)) - len(code.expandtabs(4).lstrip())


def compile_patterns(patterns: Sequence[str]) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p) for p in patterns)


def match_declaration(code: str, patterns: Sequence[re.Pattern[str]]) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(code)
        if match:
            return match.group(1)
    return None


def classify_line(
    line: str,
    patterns: Sequence[re.Pattern[str]],
    open_indent: Optional[int] = None,
) -> DiffLine:
    """Classify one hunk line.

    Args:
        line: Raw diff line, including its ``+``/``-``/space prefix
        patterns: Compiled function-declaration patterns
        open_indent: Indentation of the currently open declaration, or None
            when no function is open
    """
    if line.startswith("diff --git "):
        return DiffLine(LineKind.FILE_HEADER, " ", line, 0)
    if line.startswith("@@"):
        return DiffLine(LineKind.HUNK_HEADER, " ", line, 0)
    if line.startswith("\\"):
        return DiffLine(LineKind.META, " ", line, 0)

    if line[:1] in ("+", "-", " "):
        origin, code = line[0], line[1:]
    else:
        # Some tools strip the space from empty context lines
        origin, code = " ", line

    indent = _indent_of(code)
    stripped = code.strip()

    if open_indent is not None and stripped.startswith("}") and indent <= open_indent:
        return DiffLine(LineKind.CLOSING_BRACE, origin, code, indent)

    name = match_declaration(code, patterns)
    if name is not None:
        opens = code.count("{")
        if opens and opens == code.count("}"):
            return DiffLine(LineKind.INLINE_FUNCTION, origin, code, indent, name)
        return DiffLine(LineKind.DECLARATION, origin, code, indent, name)

    return DiffLine(LineKind.BODY, origin, code, indent)


@dataclass
class _FunctionBuffer:
    name: str
    indent: int
    before: list[str] = field(default_factory=list)
    after: list[str] = field(default_factory=list)
    changed: bool = False

    def add(self, line: DiffLine) -> None:
        if line.origin == "-":
            self.before.append(line.code)
            self.changed = True
        elif line.origin == "+":
            self.after.append(line.code)
            self.changed = True
        else:
            self.before.append(line.code)
            self.after.append(line.code)


class FunctionScanner:
    """Runs the transition table over the hunk lines of one file."""

    def __init__(self, file: str, patterns: Sequence[re.Pattern[str]]):
        self.file = file
        self.patterns = patterns
        self.state = ScanState.OUTSIDE
        self._current: Optional[_FunctionBuffer] = None
        self.functions: list[ExtractedFunction] = []

    def feed(self, raw_line: str) -> None:
        open_indent = self._current.indent if self._current is not None else None
        line = classify_line(raw_line, self.patterns, open_indent)
        next_state, action = TRANSITIONS[(self.state, line.kind)]

        if action is Action.OPEN:
            self._current = _FunctionBuffer(name=line.function_name or "", indent=line.indent)
            self._current.add(line)
        elif action is Action.OPEN_AND_CLOSE:
            buffer = _FunctionBuffer(name=line.function_name or "", indent=line.indent)
            buffer.add(line)
            self._emit(buffer)
        elif action is Action.APPEND and self._current is not None:
            self._current.add(line)
        elif action is Action.CLOSE and self._current is not None:
            self._current.add(line)
            self._emit(self._current)
            self._current = None
        elif action is Action.DISCARD:
            self._drop_incomplete()

        self.state = next_state

    def finish(self) -> list[ExtractedFunction]:
        if self.state is ScanState.INSIDE_FUNCTION:
            self._drop_incomplete()
            self.state = ScanState.OUTSIDE
        return self.functions

    def _drop_incomplete(self) -> None:
        if self._current is not None:
            logger.debug(
                "Dropping incomplete function %s in %s", self._current.name, self.file
            )
        self._current = None

    def _emit(self, buffer: _FunctionBuffer) -> None:
        if not buffer.changed:
            return
        self.functions.append(
            ExtractedFunction(
                file=self.file,
                name=buffer.name,
                before="\n".join(buffer.before),
                after="\n".join(buffer.after),
            )
        )


@dataclass
class FileDiff:
    path: str
    hunk_lines: list[str]


def split_file_diffs(diff_text: str) -> Iterator[FileDiff]:
    """Yield one FileDiff per ``diff --git`` section.

    Header lines (``index``, ``---``, ``+++``, mode lines) are consumed here
    so the state machine only sees hunk content.
    """
    path: Optional[str] = None
    old_path: Optional[str] = None
    git_path: Optional[str] = None
    hunk_lines: list[str] = []
    in_section = False
    in_hunks = False

    def flush() -> Optional[FileDiff]:
        resolved = path or old_path or git_path
        if in_section and resolved:
            return FileDiff(resolved, hunk_lines)
        return None

    for line in diff_text.split("\n"):
        if line.startswith("diff --git "):
            section = flush()
            if section is not None:
                yield section
            in_section, in_hunks = True, False
            path = old_path = None
            hunk_lines = []
            parts = line.split(" b/", 1)
            git_path = parts[1].strip() if len(parts) == 2 else None
            continue

        if not in_section:
            continue

        if not in_hunks:
            if line.startswith("+++ "):
                target = line[4:].strip()
                path = target[2:] if target.startswith("b/") else None
            elif line.startswith("--- "):
                source = line[4:].strip()
                old_path = source[2:] if source.startswith("a/") else None
            elif line.startswith("@@"):
                in_hunks = True
                hunk_lines.append(line)
            continue

        hunk_lines.append(line)

    section = flush()
    if section is not None:
        yield section


def extract_changed_functions(
    diff_text: str, config: Optional[ComplexityConfig] = None
) -> list[ExtractedFunction]:
    """Every function with at least one added or removed line in the diff."""
    config = config or ComplexityConfig()
    patterns = compile_patterns(config.function_patterns)

    functions: list[ExtractedFunction] = []
    for file_diff in split_file_diffs(diff_text):
        if not file_diff.path.lower().endswith(config.source_extensions):
            continue
        scanner = FunctionScanner(file_diff.path, patterns)
        for line in file_diff.hunk_lines:
            scanner.feed(line)
        functions.extend(scanner.finish())

    return functions


def measure_change(
    function: ExtractedFunction, config: Optional[ComplexityConfig] = None
) -> FunctionComplexityChange:
    """Before/after complexity of one extracted function."""
    config = config or ComplexityConfig()
    before = compute_complexity(function.before)
    after = compute_complexity(function.after)

    increase = after.complexity - before.complexity
    nesting_change = after.nesting_depth - before.nesting_depth

    significant = (
        increase > config.significant_increase_threshold
        and nesting_change > config.significant_nesting_threshold
    )
    refactoring_candidate = increase > config.refactor_increase_threshold or (
        increase > config.refactor_moderate_increase_threshold
        and nesting_change > config.refactor_nesting_threshold
    )

    return FunctionComplexityChange(
        file=function.file,
        function=function.name,
        before_complexity=before.complexity,
        after_complexity=after.complexity,
        complexity_increase=increase,
        nesting_level_change=nesting_change,
        line_count_change=after.line_count - before.line_count,
        before_line_count=before.line_count,
        after_line_count=after.line_count,
        before_nesting_depth=before.nesting_depth,
        after_nesting_depth=after.nesting_depth,
        is_complexity_increasing=increase > 0,
        is_significant_increase=significant,
        refactoring_candidate=refactoring_candidate,
        is_new=not function.before,
        is_deleted=not function.after,
    )


def analyze_complexity(
    diff_text: Optional[str], config: Optional[ComplexityConfig] = None
) -> list[FunctionComplexityChange]:
    """Complexity changes for every function a commit's diff touched."""
    if not diff_text:
        return []
    config = config or ComplexityConfig()
    return [measure_change(f, config) for f in extract_changed_functions(diff_text, config)]
