"""stats command — aggregate scores across completed reviews."""

from __future__ import annotations

from collections import Counter

import click
from rich.console import Console
from rich.table import Table

from projreview_cli.commands import get_controller, workflow_errors

console = Console()

_BANDS = [("90-100", 90), ("75-89", 75), ("50-74", 50), ("0-49", 0)]


def _band(score: int) -> str:
    for label, floor in _BANDS:
        if score >= floor:
            return label
    return _BANDS[-1][0]


@click.command("stats")
@click.pass_context
def stats_cmd(ctx):
    """Show aggregated scoring statistics for completed reviews.

    Reports average AI, human and final scores, how far reviewers drift from
    the AI on average, the final score distribution, and the share of projects
    with Celo integration.
    """
    controller = get_controller(ctx)

    with workflow_errors():
        details = controller.list_completed_reviews()

    projects = [p for d in details for p in d.projects if p.final_score is not None]
    if not projects:
        console.print("[yellow]No scored projects in completed reviews.[/yellow]")
        return

    total = len(projects)
    avg_ai = sum(p.ai_score for p in projects) / total
    avg_human = sum(p.human_score for p in projects) / total
    avg_final = sum(p.final_score for p in projects) / total
    avg_drift = sum(p.human_score - p.ai_score for p in projects) / total
    integrated = sum(1 for p in projects if p.celo_integrated)

    # --- Summary ---
    console.print("\n[bold]Scoring stats for completed reviews[/bold]")
    console.print(f"  Reviews:          {len(details)}")
    console.print(f"  Scored projects:  {total}")
    console.print(f"  Avg AI score:     {avg_ai:.1f}")
    console.print(f"  Avg human score:  {avg_human:.1f}")
    console.print(f"  Avg final score:  {avg_final:.1f}")
    console.print(f"  Human − AI drift: {avg_drift:+.1f}")
    console.print(f"  Celo integrated:  {integrated}/{total} ({integrated / total * 100:.1f}%)")

    # --- Final score distribution ---
    band_counter: Counter[str] = Counter(_band(p.final_score) for p in projects)
    dist_table = Table(title="Final Score Distribution", show_header=True)
    dist_table.add_column("Band", style="bold")
    dist_table.add_column("Projects", justify="right")
    dist_table.add_column("% of total", justify="right")
    for label, _ in _BANDS:
        count = band_counter.get(label, 0)
        dist_table.add_row(label, str(count), f"{count / total * 100:.1f}%")
    console.print(dist_table)
