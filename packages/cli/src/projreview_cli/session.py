"""Persist the current ReviewSession between CLI invocations.

Each `projreview` command is a fresh process, so the review a reviewer is
working on is written to a small YAML file (default
`.projreview_session.yml`) when the command exits.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from projreview_core.lifecycle import ReviewSession

logger = logging.getLogger(__name__)


def load_session(path: str) -> ReviewSession:
    p = Path(path)
    if not p.exists():
        return ReviewSession()
    try:
        data = yaml.safe_load(p.read_text()) or {}
    except yaml.YAMLError as e:
        logger.warning("Ignoring unreadable session file %s: %s", path, e)
        return ReviewSession()
    review_id = data.get("review_id") if isinstance(data, dict) else None
    return ReviewSession(review_id=str(review_id) if review_id else None)


def save_session(session: ReviewSession, path: str) -> None:
    p = Path(path)
    if session.review_id is None:
        if p.exists():
            p.unlink()
        return
    p.write_text(yaml.dump({"review_id": session.review_id}, default_flow_style=False))
