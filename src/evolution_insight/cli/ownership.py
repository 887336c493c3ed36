"""Ownership CLI command -- per-file ownership stability."""

import typer
from rich.table import Table

from ..ownership.models import StabilityClass
from . import app
from ._common import OutputFormat, console, load_report, print_json

_STABILITY_STYLES = {
    StabilityClass.HIGH: "green",
    StabilityClass.MEDIUM: "yellow",
    StabilityClass.LOW: "red",
    StabilityClass.INSUFFICIENT_DATA: "dim",
}


@app.command()
def ownership(
    ctx: typer.Context,
    output_format: OutputFormat = typer.Option(
        OutputFormat.RICH, "--format", "-f", help="Output format"
    ),
    top: int = typer.Option(15, "--top", "-n", help="Rows to show", min=1),
):
    """
    Show files whose ownership changes hands often, least stable first.
    """
    result = load_report(ctx, fetch_diffs=False).ownership

    if output_format is OutputFormat.JSON:
        print_json(result)
        return

    overall = result.insights.overall
    console.print(
        f"[bold cyan]OWNERSHIP[/bold cyan] -- {overall.total_files_analyzed} files scored, "
        f"{overall.insufficient_data_files} with too little history"
    )

    if not result.sorted_files:
        console.print("[yellow]Not enough history to score any file.[/yellow]")
        return

    table = Table(show_header=True)
    table.add_column("File", min_width=30)
    table.add_column("Owner")
    table.add_column("Owners", justify="right")
    table.add_column("Changes", justify="right")
    table.add_column("Rapid", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Stability")
    for path in result.sorted_files[:top]:
        score = result.stability_scores[path]
        changes = result.ownership_changes[path]
        style = _STABILITY_STYLES[score.classification]
        table.add_row(
            path,
            result.file_authors[path].current_owner,
            str(changes.total_owners),
            str(changes.total_changes),
            str(len(changes.rapid_changes)),
            f"{score.score:.2f}",
            f"[{style}]{score.classification.value}[/{style}]",
        )
    console.print(table)

    for rec in result.insights.recommendations[:top]:
        console.print(f"  [red]*[/red] {rec.file}: {rec.summary}")
