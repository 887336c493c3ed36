"""Main callback and the combined ``analyze`` command."""

from pathlib import Path
from typing import Optional

import typer
from rich.panel import Panel
from rich.table import Table

from ..engine import EvolutionReport
from ..insights.models import Priority
from . import app
from ._common import (
    OutputFormat,
    console,
    format_date,
    load_report,
    print_json,
    styled_level,
)

_PRIORITY_STYLES = {
    Priority.CRITICAL: "bold red",
    Priority.HIGH: "red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "dim",
}


# ---------------------------------------------------------------------------
# Main callback
# ---------------------------------------------------------------------------


@app.callback(invoke_without_command=True, no_args_is_help=False)
def main(
    ctx: typer.Context,
    path: Optional[Path] = typer.Option(
        None,
        "-C",
        "--path",
        help="Repository root to analyze (default: current directory)",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    max_commits: Optional[int] = typer.Option(
        None,
        "--max-commits",
        help="Maximum commits to read from git log (0 = unlimited)",
        min=0,
    ),
    no_diffs: bool = typer.Option(
        False,
        "--no-diffs",
        help="Skip per-commit diffs (no function complexity analysis)",
    ),
    github_repo: Optional[str] = typer.Option(
        None,
        "--github-repo",
        help="owner/name for pull-request enrichment (default: from git remote)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
):
    """
    Analyze how a codebase evolved: churn, complexity trends, ownership
    stability, risk and contributor burnout.

    [bold cyan]Examples:[/bold cyan]

      evolution-insight

      evolution-insight -C /path/to/repo risk --format json

      evolution-insight --max-commits 500 --no-diffs ownership
    """
    if version:
        from .. import __version__

        console.print(
            f"[bold cyan]Evolution Insight[/bold cyan] version [green]{__version__}[/green]"
        )
        raise typer.Exit(0)

    ctx.ensure_object(dict)
    ctx.obj.update(
        path=Path(path) if path else Path.cwd(),
        config=config,
        git_max_commits=max_commits,
        fetch_diffs=False if no_diffs else None,
        github_repo=github_repo,
        verbose=True if verbose else None,
        quiet=True if quiet else None,
    )

    if ctx.invoked_subcommand is None:
        analyze(ctx, output_format=OutputFormat.RICH, top=10)


# ---------------------------------------------------------------------------
# analyze
# ---------------------------------------------------------------------------


def _print_summary(report: EvolutionReport, top: int) -> None:
    contributors = report.contributors
    ownership = report.ownership.insights.overall
    risk = report.risk.summary
    team = report.burnout.insights.team

    lines = [
        f"Commits: [bold]{report.total_commits}[/bold]   "
        f"Contributors: [bold]{contributors.total_contributors}[/bold]   "
        f"Total churn: [bold]{contributors.total_churn}[/bold]   "
        f"As of: {format_date(report.as_of)}",
        f"Functions scored: {risk.total_analyzed} "
        f"([red]{risk.high_risk} high[/red], [yellow]{risk.medium_risk} medium[/yellow]), "
        f"{risk.refactoring_candidates} refactoring candidates",
        f"Files with ownership scores: {ownership.total_files_analyzed} "
        f"({ownership.unstable_files} unstable, {ownership.rapid_changes_detected} rapid-change windows)",
        f"Authors analysed for burnout: {team.analyzed_authors} of {team.total_authors} "
        f"([red]{team.high_risk_authors} high risk[/red])",
    ]
    if report.feature_death is not None:
        lines.append(
            f"TODOs: {report.feature_death.total_todos} "
            f"({len(report.feature_death.stale_files)} files with stale TODOs)"
        )
    if report.stale_pull_requests:
        oldest = report.stale_pull_requests[0]
        lines.append(
            f"Stale pull requests: {len(report.stale_pull_requests)} "
            f"(oldest #{oldest.number}, opened {format_date(oldest.created_at)})"
        )
    console.print(Panel("\n".join(lines), title="[bold cyan]EVOLUTION SUMMARY[/bold cyan]"))

    if report.risk.file_risks:
        table = Table(title="Riskiest files", show_header=True)
        table.add_column("File", min_width=30)
        table.add_column("Changes", justify="right")
        table.add_column("Complexity", justify="right")
        table.add_column("Score", justify="right")
        table.add_column("Level")
        for score in report.risk.file_risks[:top]:
            table.add_row(
                score.subject,
                str(score.change_count),
                str(score.latest_complexity),
                f"{score.composite_score:.2f}",
                styled_level(score.classification),
            )
        console.print(table)

    issues = report.insights.issues
    if not issues:
        console.print("[green]No issues found.[/green]")
        return

    console.print()
    console.print(f"[bold]ISSUES[/bold] -- {len(issues)} found")
    for issue in issues[:top]:
        style = _PRIORITY_STYLES[issue.priority]
        console.print(f"  [{style}]{issue.priority.name:<8}[/{style}] {issue.description}")
    console.print()
    console.print("[bold]NEXT STEPS[/bold]")
    for item in report.insights.action_items[:top]:
        console.print(f"  {item.order + 1}. {item.action}")


@app.command()
def analyze(
    ctx: typer.Context,
    output_format: OutputFormat = typer.Option(
        OutputFormat.RICH, "--format", "-f", help="Output format"
    ),
    top: int = typer.Option(10, "--top", "-n", help="Rows per table", min=1),
):
    """
    Run every analysis and show a combined summary with prioritised issues.
    """
    report = load_report(ctx)
    if output_format is OutputFormat.JSON:
        print_json(report)
        return
    _print_summary(report, top)
