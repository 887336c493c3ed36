"""Structural complexity of a function body.

Cyclomatic complexity is approximated by counting branch keywords and
short-circuit operators in the source text:

    complexity = 1 + if + for + while + do + case + catch + (&& and || count)

Nesting depth is the maximum running net brace depth across lines.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_BRANCH_PATTERNS: dict[str, re.Pattern[str]] = {
    "if": re.compile(r"\bif\s*\("),
    "for": re.compile(r"\bfor\s*\("),
    "while": re.compile(r"\bwhile\s*\("),
    "do": re.compile(r"\bdo\s*\{"),
    "case": re.compile(r"\bcase\b"),
    "catch": re.compile(r"\bcatch\s*\("),
}
_ELSE_RE = re.compile(r"\belse\b")
_LOGICAL_RE = re.compile(r"&&|\|\|")


@dataclass(frozen=True)
class ComplexityMetrics:
    complexity: int
    nesting_depth: int
    line_count: int
    control_structures: int = 0  # branches plus else
    logical_operators: int = 0


def count_branches(code: str) -> dict[str, int]:
    return {name: len(pattern.findall(code)) for name, pattern in _BRANCH_PATTERNS.items()}


def max_nesting_depth(lines: list[str]) -> int:
    depth = 0
    deepest = 0
    for line in lines:
        depth += line.count("{") - line.count("}")
        deepest = max(deepest, depth)
    return deepest


def compute_complexity(code: str) -> ComplexityMetrics:
    """Measure one version of a function body.

    An absent body (the function is new or deleted) is a single empty line
    with the base complexity of 1.
    """
    lines = code.split("\n")
    branches = count_branches(code)
    branch_total = sum(branches.values())
    logical = len(_LOGICAL_RE.findall(code))

    return ComplexityMetrics(
        complexity=1 + branch_total + logical,
        nesting_depth=max_nesting_depth(lines),
        line_count=len(lines),
        control_structures=branch_total + len(_ELSE_RE.findall(code)),
        logical_operators=logical,
    )
