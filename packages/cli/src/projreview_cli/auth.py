"""GitHub token resolution for the Gist store, with gh CLI fallback.

Resolution order (stops at first success):
  1. PROJREVIEW_GITHUB_TOKEN — a PAT with 'gist' scope kept apart from
     any repository token the shell already exports
  2. GITHUB_TOKEN environment variable
  3. `gh auth token` (GitHub CLI session, works after `gh auth login`)
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

_TOKEN_ENV_VARS = ("PROJREVIEW_GITHUB_TOKEN", "GITHUB_TOKEN")


def resolve_github_token() -> str | None:
    """Return a GitHub token or None if no source provides one.

    Never raises; the caller decides whether a missing token is fatal.
    """
    for name in _TOKEN_ENV_VARS:
        token = os.environ.get(name)
        if token:
            logger.debug("Using GitHub token from %s.", name)
            return token

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        logger.debug("gh CLI unavailable; no GitHub token resolved.")
        return None

    gh_token = result.stdout.strip() if result.returncode == 0 else ""
    if gh_token:
        logger.debug("Resolved GitHub token via gh CLI session.")
        return gh_token
    return None
