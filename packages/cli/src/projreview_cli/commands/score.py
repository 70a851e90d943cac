"""score command — record human scores for one or more projects."""

from __future__ import annotations

import click
from rich.console import Console

from projreview_cli.commands import get_controller, workflow_errors

console = Console()


def _parse_assignment(value: str) -> tuple[str, int]:
    project_id, sep, score = value.partition("=")
    if not sep or not project_id.strip() or not score.strip():
        raise click.BadParameter(f"Expected <project-id>=<score>, got {value!r}.")
    try:
        return project_id.strip(), int(score)
    except ValueError:
        raise click.BadParameter(f"Score for {project_id.strip()} must be a whole number, got {score!r}.")


@click.command("score")
@click.argument("assignments", nargs=-1, required=True)
@click.option(
    "--by",
    "scored_by",
    default=None,
    help="Reviewer identity recorded with each score. Defaults to scored_by in config.",
)
@click.pass_context
def score_cmd(ctx, assignments: tuple[str, ...], scored_by: str | None):
    """Save human scores, given as PROJECT_ID=SCORE pairs (1-100).

    The final score of each project is the average of its AI score and the
    human score, rounded half up. Re-scoring a project overwrites the previous
    score. Each project is saved independently: one invalid entry does not
    stop the others.
    """
    controller = get_controller(ctx)
    scores = dict(_parse_assignment(a) for a in assignments)
    scored_by = scored_by or ctx.obj["config"].get("scored_by")

    with workflow_errors():
        batch = controller.save_scores(scores, scored_by=scored_by)

    for p in batch.updated:
        console.print(
            f"  [green]✓[/green] {p.project_name}: human [bold]{p.human_score}[/bold], "
            f"final [bold]{p.final_score}[/bold]"
        )
    for project_id, message in batch.failed.items():
        console.print(f"  [red]✗[/red] {project_id}: {message}")

    if not batch.ok:
        raise click.ClickException(f"{len(batch.failed)} of {len(scores)} score(s) could not be saved.")
    console.print(f"[green]Saved {len(batch.updated)} score(s).[/green]")
