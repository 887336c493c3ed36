"""Complexity CLI command -- function complexity trends."""

import typer
from rich.table import Table

from . import app
from ._common import OutputFormat, console, load_report, print_json


def _sparkline(values: list) -> str:
    """ASCII sparkline of a complexity history."""
    if not values:
        return ""
    blocks = " ▁▂▃▄▅▆▇█"
    mn, mx = min(values), max(values)
    if mx == mn:
        return blocks[4] * len(values)
    return "".join(blocks[min(8, int((v - mn) / (mx - mn) * 8))] for v in values)


@app.command()
def complexity(
    ctx: typer.Context,
    output_format: OutputFormat = typer.Option(
        OutputFormat.RICH, "--format", "-f", help="Output format"
    ),
    top: int = typer.Option(15, "--top", "-n", help="Rows to show", min=1),
    show_all: bool = typer.Option(
        False, "--all", help="Include functions without an increasing trend"
    ),
):
    """
    Show per-function complexity trends across the commit history.

    [bold cyan]Examples:[/bold cyan]

      evolution-insight complexity

      evolution-insight complexity --all --format json
    """
    result = load_report(ctx).complexity
    trends = result.all_trends if show_all else result.complexity_trends

    if output_format is OutputFormat.JSON:
        print_json({"complexity_changes": result.complexity_changes, "trends": trends})
        return

    if not trends:
        console.print("[green]No functions with increasing complexity.[/green]")
        return

    ranked = sorted(trends, key=lambda t: (-t.growth_rate, t.file, t.function))
    table = Table(title="Function complexity trends", show_header=True)
    table.add_column("Function", min_width=30)
    table.add_column("Samples", justify="right")
    table.add_column("Latest", justify="right")
    table.add_column("Growth", justify="right")
    table.add_column("Trend", min_width=10)
    table.add_column("Refactor")
    for trend in ranked[:top]:
        table.add_row(
            f"{trend.file}::{trend.function}",
            str(len(trend.history)),
            str(trend.latest_complexity if trend.latest_complexity is not None else "--"),
            f"{trend.growth_rate:+.2f}",
            _sparkline([s.complexity for s in trend.history]),
            "[red]yes[/red]" if trend.needs_refactoring else "",
        )
    console.print(table)
    console.print(f"[dim]{len(result.complexity_changes)} complexity increases recorded[/dim]")
