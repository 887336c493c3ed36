"""Risk CLI command -- composite churn and complexity risk."""

import typer
from rich.table import Table

from ..risk.models import RiskScore
from . import app
from ._common import OutputFormat, console, load_report, print_json, styled_level


def _risk_table(title: str, scores: tuple[RiskScore, ...], top: int) -> Table:
    table = Table(title=title, show_header=True)
    table.add_column("Subject", min_width=30)
    table.add_column("Churn", justify="right")
    table.add_column("Complexity", justify="right")
    table.add_column("Trend", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Level")
    table.add_column("Refactor")
    for score in scores[:top]:
        table.add_row(
            score.subject,
            f"{score.churn_component:.1f}",
            f"{score.complexity_component:.1f}",
            f"{score.trend_component:+.1f}",
            f"{score.composite_score:.2f}",
            styled_level(score.classification),
            "[red]yes[/red]" if score.is_refactoring_candidate else "",
        )
    return table


@app.command()
def risk(
    ctx: typer.Context,
    output_format: OutputFormat = typer.Option(
        OutputFormat.RICH, "--format", "-f", help="Output format"
    ),
    top: int = typer.Option(15, "--top", "-n", help="Rows per table", min=1),
):
    """
    Rank functions and files by combined churn, complexity and trend risk.
    """
    result = load_report(ctx).risk

    if output_format is OutputFormat.JSON:
        print_json(result)
        return

    summary = result.summary
    console.print(
        f"[bold cyan]RISK[/bold cyan] -- {summary.total_analyzed} functions: "
        f"[red]{summary.high_risk} high[/red], [yellow]{summary.medium_risk} medium[/yellow], "
        f"[green]{summary.low_risk} low[/green]; "
        f"{summary.refactoring_candidates} refactoring candidates"
    )
    if result.detailed:
        console.print(_risk_table("Functions", result.detailed, top))
    if result.file_risks:
        console.print(_risk_table("Files", result.file_risks, top))
