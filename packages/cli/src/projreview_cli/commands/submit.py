"""submit command — finalise a fully scored review."""

from __future__ import annotations

import click
from rich.console import Console

from projreview_cli.commands import get_controller, workflow_errors

console = Console()


@click.command("submit")
@click.option("--review", "review_id", default=None, help="Review ID. Defaults to the current review.")
@click.pass_context
def submit_cmd(ctx, review_id: str | None):
    """Mark a review completed once every project has a human score."""
    controller = get_controller(ctx)

    with workflow_errors():
        review = controller.submit(review_id)

    console.print(f"[green]Review submitted:[/green] [bold]{review.title}[/bold] is now {review.status}.")
