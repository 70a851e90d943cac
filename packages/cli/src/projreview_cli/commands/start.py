"""start command — upload a spreadsheet and ingest the analysed projects."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from projreview_cli.commands import format_score, get_controller, workflow_errors

console = Console()


@click.command("start")
@click.argument("spreadsheet", type=click.Path(exists=True, dir_okay=False))
@click.option("--title", required=True, help="Display title for the review batch.")
@click.pass_context
def start_cmd(ctx, spreadsheet: str, title: str):
    """Start a review from an uploaded SPREADSHEET of candidate projects.

    Runs the analysis agent on the file (this can take several minutes), stores
    every scored project, and makes the new review the current one for
    `score`, `show` and `submit`.
    """
    controller = get_controller(ctx)

    with workflow_errors():
        with console.status(f"Analysing [bold]{spreadsheet}[/bold]..."):
            detail = controller.create_review(title, spreadsheet)

    review = detail.review
    console.print(f"[green]Review created:[/green] [bold]{review.title}[/bold] ({review.id})")

    if not detail.projects:
        console.print("[yellow]The analysis returned no projects.[/yellow]")
        return

    table = Table(title=f"{len(detail.projects)} project(s) to score", show_header=True, header_style="bold cyan")
    table.add_column("Project ID", style="dim", no_wrap=True)
    table.add_column("Name", max_width=40)
    table.add_column("AI score", justify="right")
    table.add_column("Celo", justify="center")
    for p in detail.projects:
        table.add_row(p.id, p.project_name, format_score(p.ai_score), "✓" if p.celo_integrated else "")
    console.print(table)
    console.print("Score projects with: [bold]projreview score <project-id>=<score> ...[/bold]")
