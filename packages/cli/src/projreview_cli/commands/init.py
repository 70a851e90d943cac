"""init command — interactive setup wizard.

Writes .projreview.yml with the store backend, the location of the analysis
agent, and the reviewer identity. For the Gist store it also creates the
shared Gist through the GitHub CLI so reviewers never touch the GitHub API.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import tempfile
from pathlib import Path

import click
import yaml
from rich.console import Console

console = Console()
logger = logging.getLogger(__name__)

_CONFIG_FILE = ".projreview.yml"
_GIST_FILENAME = "projreview_store.json"


@click.command("init")
@click.option("--title", default="projreview", show_default=True, help="Description used for a newly created Gist.")
@click.pass_context
def init_cmd(ctx, title: str):
    """Set up projreview in the current directory.

    Creates .projreview.yml and, for the shared Gist store, a private GitHub
    Gist holding every review and score.
    """
    console.print("\n[bold cyan]projreview init[/bold cyan] — setup wizard\n")

    # --- Choose store backend ---
    console.print("Review store:")
    console.print("  [bold]sqlite[/bold]  — local SQLite file (default, single machine)")
    console.print("  [bold]gist[/bold]    — shared GitHub Gist, zero infrastructure (committees)")
    store_type = click.prompt("Store backend", type=click.Choice(["sqlite", "gist"]), default="sqlite")

    config: dict = {"store": store_type}

    if store_type == "sqlite":
        db_path = click.prompt("SQLite database path", default=".projreview.db")
        if db_path != ".projreview.db":
            config["store_path"] = db_path
        console.print(f"[green]SQLite store configured at {db_path}[/green]")
    else:
        console.print(
            "\n[yellow]Note:[/yellow] the Gist store needs a token with [bold]gist[/bold] scope "
            "(PROJREVIEW_GITHUB_TOKEN, GITHUB_TOKEN, or a `gh auth login` session)."
        )
        gist_id = _create_store_gist(title)
        if gist_id:
            console.print(f"[green]Created store Gist: {gist_id}[/green]")
            config["gist_id"] = gist_id
        else:
            console.print("[yellow]Gist creation failed — add gist_id manually to .projreview.yml[/yellow]")

    # --- Analysis backend ---
    agent_dir = click.prompt("Analysis agent directory", default="agent")
    if agent_dir != "agent":
        config["agent_dir"] = agent_dir
    if not Path(agent_dir).is_dir():
        console.print(
            f"[yellow]{agent_dir} does not exist yet. `projreview start` needs the agent there, "
            "or set analyzer: report to load ready-made JSON reports.[/yellow]"
        )

    # --- Reviewer identity ---
    scored_by = click.prompt("Your reviewer name or e-mail (blank to skip)", default="", show_default=False)
    if scored_by.strip():
        config["scored_by"] = scored_by.strip()

    config_path = (ctx.obj or {}).get("config_path", _CONFIG_FILE)
    _write_config(config, config_path)
    console.print(f"[green]Wrote {config_path}[/green]")
    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("Start a review with: [bold]projreview start --title <title> <spreadsheet>[/bold]")


def _create_store_gist(title: str) -> str | None:
    """Create a private Gist holding an empty store document and return its ID."""
    tmp_dir = tempfile.mkdtemp(prefix="projreview-")
    # gh names Gist files after their path, so the file needs the store name.
    named_path = os.path.join(tmp_dir, _GIST_FILENAME)
    try:
        with open(named_path, "w") as f:
            json.dump({"reviews": [], "projects": []}, f)
        result = subprocess.run(
            ["gh", "gist", "create", "--public=false", "--desc", f"{title} review store", named_path],
            capture_output=True,
            text=True,
            timeout=15,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.warning("Could not run gh gist create: %s", e)
        return None
    finally:
        if os.path.exists(named_path):
            os.unlink(named_path)
        os.rmdir(tmp_dir)

    if result.returncode == 0:
        gist_url = result.stdout.strip()
        return gist_url.rstrip("/").split("/")[-1]
    logger.warning("gh gist create failed: %s", result.stderr.strip())
    return None


def _write_config(config: dict, config_path: str = _CONFIG_FILE) -> None:
    """Write or update the config file, preserving any existing keys."""
    path = Path(config_path)
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))
