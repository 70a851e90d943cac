"""completed command — completed reviews with their project leaderboards."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from projreview_cli.commands import format_score, get_controller, workflow_errors
from projreview_core.scoring import rank_projects

console = Console()


@click.command("completed")
@click.option("--limit", default=10, show_default=True, help="Maximum number of reviews to show.")
@click.option("--top", default=None, type=int, help="Only show the N best projects of each review.")
@click.pass_context
def completed_cmd(ctx, limit: int, top: int | None):
    """Show completed reviews, newest first, each ranked by final score."""
    controller = get_controller(ctx)

    with workflow_errors():
        details = controller.list_completed_reviews()

    if not details:
        console.print("[yellow]No completed reviews yet.[/yellow]")
        return

    for detail in details[:limit]:
        review = detail.review
        ranked = rank_projects(detail.projects)
        if top is not None:
            ranked = ranked[:top]

        table = Table(
            title=f"{review.title} — completed {review.updated_at[:10]}",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("#", justify="right", width=3)
        table.add_column("Project", max_width=40)
        table.add_column("AI", justify="right")
        table.add_column("Human", justify="right")
        table.add_column("Final", justify="right", style="bold")
        table.add_column("GitHub", overflow="fold")

        for rank, p in enumerate(ranked, 1):
            table.add_row(
                str(rank),
                p.project_name,
                format_score(p.ai_score),
                format_score(p.human_score),
                format_score(p.final_score),
                p.project_github_url,
            )
        console.print(table)
