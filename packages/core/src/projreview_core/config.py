import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "store": "sqlite",  # "sqlite" | "gist"
    "store_path": ".projreview.db",
    "gist_id": None,
    "analyzer": "agent",  # "agent" runs the scoring agent; "report" reads a ready-made JSON report
    "agent_dir": "agent",
    "agent_script": "run.py",
    "agent_python": None,  # None = agent_dir/venv python if present, else the current interpreter
    "reports_dir": "reports",
    "analysis_timeout": None,  # seconds; None waits for the agent indefinitely
    "ingest_workers": 4,
    "scored_by": None,
    "session_path": ".projreview_session.yml",
}


def load_config(config_path: str = ".projreview.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .projreview.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Reviewer identity: the environment wins over the file so shared
    # config files don't pin every score to one person.
    scored_by = os.environ.get("PROJREVIEW_SCORED_BY")
    if scored_by:
        config["scored_by"] = scored_by

    ingest_workers = config.get("ingest_workers")
    if not isinstance(ingest_workers, int) or isinstance(ingest_workers, bool) or ingest_workers < 1:
        raise ValueError(f"ingest_workers must be a positive integer, got {ingest_workers!r}")

    return config
