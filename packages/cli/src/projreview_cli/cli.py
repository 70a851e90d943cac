"""CLI entry point for projreview.

Commands:
  start      — upload a spreadsheet, run the analysis agent, ingest projects
  show       — display a review's projects and scoring progress
  score      — record human scores for projects
  submit     — finalise a fully scored review
  history    — list all reviews, newest first
  completed  — completed reviews with their project leaderboards
  stats      — aggregate scores across completed reviews
  init       — interactive setup wizard
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from projreview_cli.commands.completed import completed_cmd
from projreview_cli.commands.history import history_cmd
from projreview_cli.commands.init import init_cmd
from projreview_cli.commands.score import score_cmd
from projreview_cli.commands.show import show_cmd
from projreview_cli.commands.start import start_cmd
from projreview_cli.commands.stats import stats_cmd
from projreview_cli.commands.submit import submit_cmd

console = Console()


def _build_store(config: dict):
    """Instantiate the configured store from .projreview.yml settings.

    Store selection:
      store: sqlite → SQLiteStore (uses store_path, default .projreview.db)
      store: gist   → GistStore  (requires gist_id and a GitHub token)

    This factory lives in cli.py so neither projreview_core nor
    projreview_store know about the CLI config format.
    """
    store_type = config.get("store", "sqlite")

    if store_type == "gist":
        from projreview_store.gist import GistStore

        gist_id = config.get("gist_id")
        token = config.get("github_token")
        if not gist_id or not token:
            raise click.UsageError(
                "GistStore requires gist_id in .projreview.yml and a GitHub token "
                "(set PROJREVIEW_GITHUB_TOKEN or GITHUB_TOKEN, or run `gh auth login`)."
            )
        return GistStore(gist_id=gist_id, token=token)

    if store_type == "sqlite":
        from projreview_store.sqlite import SQLiteStore

        return SQLiteStore(db_path=config.get("store_path", ".projreview.db"))

    raise click.UsageError(f"Unknown store {store_type!r}. Use 'sqlite' or 'gist'.")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("projreview"),
    prog_name="projreview",
)
@click.option(
    "--config",
    "config_path",
    default=".projreview.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PROJREVIEW_CONFIG",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    show_default=True,
    envvar="PROJREVIEW_LOG_LEVEL",
    help="Logging verbosity.",
)
@click.pass_context
def main(ctx: click.Context, config_path: str, log_level: str):
    """Score candidate projects with AI analysis and human review."""
    from projreview_cli.auth import resolve_github_token
    from projreview_cli.session import load_session, save_session
    from projreview_core.analyzers import get_analyzer
    from projreview_core.config import load_config
    from projreview_core.lifecycle import ReviewController

    _configure_logging(log_level)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.UsageError(str(e))

    if ctx.invoked_subcommand == "init":
        # The wizard writes the config; it must not need a working store.
        ctx.obj["config"] = config
        ctx.obj["config_path"] = config_path
        return

    if config.get("store") == "gist":
        token = resolve_github_token()
        if token:
            config["github_token"] = token

    store = _build_store(config)
    ctx.call_on_close(store.close)

    session = load_session(config["session_path"])
    ctx.call_on_close(lambda: save_session(session, config["session_path"]))

    try:
        analyzer = get_analyzer(config)
    except ValueError as e:
        raise click.UsageError(str(e))

    ctx.obj["config"] = config
    ctx.obj["store"] = store
    ctx.obj["session"] = session
    ctx.obj["controller"] = ReviewController(
        store,
        analyzer,
        session=session,
        ingest_workers=config["ingest_workers"],
    )


main.add_command(start_cmd)
main.add_command(show_cmd)
main.add_command(score_cmd)
main.add_command(submit_cmd)
main.add_command(history_cmd)
main.add_command(completed_cmd)
main.add_command(stats_cmd)
main.add_command(init_cmd)
