"""Burnout CLI command -- commit-time patterns per contributor."""

import typer
from rich.table import Table

from . import app
from ._common import OutputFormat, console, load_report, print_json, styled_level


@app.command()
def burnout(
    ctx: typer.Context,
    output_format: OutputFormat = typer.Option(
        OutputFormat.RICH, "--format", "-f", help="Output format"
    ),
):
    """
    Show contributors who commit off-hours or on weekends.
    """
    result = load_report(ctx, fetch_diffs=False).burnout

    if output_format is OutputFormat.JSON:
        print_json(result)
        return

    team = result.insights.team
    console.print(
        f"[bold cyan]BURNOUT[/bold cyan] -- {team.analyzed_authors} of {team.total_authors} "
        f"authors analysed; team off-hours {team.off_hours_percentage}%, "
        f"weekend {team.weekend_percentage}%"
    )

    authors = result.insights.authors
    if not authors:
        console.print("[yellow]No author has enough commits to analyse.[/yellow]")
        return

    table = Table(show_header=True)
    table.add_column("Author", min_width=24)
    table.add_column("Commits", justify="right")
    table.add_column("Off-hours", justify="right")
    table.add_column("Weekend", justify="right")
    table.add_column("Streak", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Risk")
    for name in result.high_risk_authors + result.medium_risk_authors + result.low_risk_authors:
        insight = authors[name]
        table.add_row(
            name,
            str(insight.total_commits),
            f"{insight.off_hours_ratio:.0%}",
            f"{insight.weekend_ratio:.0%}",
            str(insight.longest_late_night_streak),
            f"{insight.burnout_risk_score:.2f}",
            styled_level(insight.classification),
        )
    console.print(table)

    if result.excluded_authors:
        console.print(
            f"[dim]{len(result.excluded_authors)} authors below the minimum commit count[/dim]"
        )
    for rec in result.insights.recommendations:
        console.print(f"  [yellow]*[/yellow] {rec.description}")
        for action in rec.actions:
            console.print(f"      - {action}")
