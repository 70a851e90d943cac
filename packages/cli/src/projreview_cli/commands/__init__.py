"""Subcommands of the projreview CLI, plus the helpers they share."""

from __future__ import annotations

from contextlib import contextmanager

import click

from projreview_core.errors import ReviewError, ReviewFailed

_STATUS_STYLE = {"pending": "yellow", "completed": "green", "failed": "red"}


def get_controller(ctx: click.Context):
    controller = ctx.obj.get("controller") if ctx.obj else None
    if controller is None:
        raise click.UsageError("projreview is not configured. Run `projreview init` first.")
    return controller


def styled_status(status: str) -> str:
    style = _STATUS_STYLE.get(status, "white")
    return f"[{style}]{status}[/{style}]"


def format_score(value) -> str:
    return "—" if value is None else str(value)


@contextmanager
def workflow_errors():
    """Turn workflow errors into one-line CLI errors with a non-zero exit."""
    try:
        yield
    except ReviewFailed as e:
        raise click.ClickException(f"Review {e.review_id} failed ({e.kind}): {e.message}")
    except ReviewError as e:
        raise click.ClickException(str(e))
