"""show command — display one review with its projects."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from projreview_cli.commands import format_score, get_controller, styled_status, workflow_errors

console = Console()


@click.command("show")
@click.option("--review", "review_id", default=None, help="Review ID. Defaults to the current review.")
@click.option("--evidence", is_flag=True, help="Also list the Celo integration evidence per project.")
@click.pass_context
def show_cmd(ctx, review_id: str | None, evidence: bool):
    """Show a review's projects, their scores and the scoring progress."""
    controller = get_controller(ctx)

    with workflow_errors():
        detail = controller.get_review(review_id)

    review = detail.review
    console.print(f"\n[bold]{review.title}[/bold]  {styled_status(review.status)}  [dim]{review.id}[/dim]")
    if review.error:
        console.print(f"[red]Error:[/red] {review.error}")

    if not detail.projects:
        console.print("[yellow]No projects in this review.[/yellow]")
        return

    console.print(f"Scored {detail.scored_count}/{len(detail.projects)} project(s)")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Project ID", style="dim", no_wrap=True)
    table.add_column("Name", max_width=40)
    table.add_column("AI", justify="right")
    table.add_column("Human", justify="right")
    table.add_column("Final", justify="right", style="bold")
    table.add_column("Celo", justify="center")
    for p in detail.projects:
        table.add_row(
            p.id,
            p.project_name,
            format_score(p.ai_score),
            format_score(p.human_score),
            format_score(p.final_score),
            "✓" if p.celo_integrated else "",
        )
    console.print(table)

    if evidence:
        for p in detail.projects:
            if p.celo_evidence:
                console.print(f"\n[bold]{p.project_name}[/bold]")
                for item in p.celo_evidence:
                    console.print(f"  • {item}")
