"""Shared CLI helpers."""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console

from ..api import analyze_repository
from ..engine import EvolutionReport
from ..exceptions import EvolutionInsightError
from ..risk.models import RiskLevel
from ..serializers import dumps

console = Console()


class OutputFormat(str, Enum):
    RICH = "rich"
    JSON = "json"


LEVEL_STYLES = {
    RiskLevel.HIGH: "red",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.LOW: "green",
}


def styled_level(level: RiskLevel) -> str:
    style = LEVEL_STYLES[level]
    return f"[{style}]{level.value}[/{style}]"


def format_date(timestamp: Optional[int]) -> str:
    if timestamp is None:
        return "--"
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")


def load_report(ctx: typer.Context, fetch_diffs: bool = True) -> EvolutionReport:
    """Run the analysis with the options collected by the main callback.

    Commands that never look at function complexity pass ``fetch_diffs=False``
    to skip the per-commit diff fetch.
    """
    options: dict[str, Any] = dict(ctx.obj or {})
    path: Path = options.pop("path", Path.cwd())
    config_file: Optional[Path] = options.pop("config", None)

    overrides = {k: v for k, v in options.items() if v is not None}
    if not fetch_diffs:
        overrides["fetch_diffs"] = False

    try:
        return analyze_repository(str(path), config_file=config_file, **overrides)
    except (EvolutionInsightError, FileNotFoundError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def print_json(obj: Any) -> None:
    # Plain print keeps the output free of rich markup and wrapping
    print(dumps(obj))
