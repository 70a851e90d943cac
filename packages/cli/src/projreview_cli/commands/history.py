"""history command — list every review, newest first."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from projreview_cli.commands import get_controller, styled_status, workflow_errors

console = Console()


@click.command("history")
@click.option(
    "--status",
    type=click.Choice(["pending", "completed", "failed"]),
    default=None,
    help="Only show reviews in this state.",
)
@click.option("--limit", default=20, show_default=True, help="Maximum number of reviews to show.")
@click.pass_context
def history_cmd(ctx, status: str | None, limit: int):
    """Show all reviews, most recently created first."""
    controller = get_controller(ctx)

    with workflow_errors():
        reviews = controller.list_reviews()

    if status is not None:
        reviews = [r for r in reviews if r.status == status]
    if not reviews:
        console.print("[yellow]No reviews found.[/yellow]")
        return

    current = ctx.obj["session"].review_id if ctx.obj.get("session") else None

    table = Table(title="Reviews", show_header=True, header_style="bold cyan")
    table.add_column("Review ID", style="dim", no_wrap=True)
    table.add_column("Title", max_width=40)
    table.add_column("Status", width=10)
    table.add_column("Created At", width=20)
    table.add_column("Error", max_width=40)

    for r in reviews[:limit]:
        marker = " [bold](current)[/bold]" if r.id == current else ""
        table.add_row(
            r.id,
            r.title + marker,
            styled_status(r.status),
            r.created_at[:19].replace("T", " "),
            (r.error or "").splitlines()[0][:40] if r.error else "",
        )

    console.print(table)
