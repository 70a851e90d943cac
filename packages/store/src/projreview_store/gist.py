"""GistStore — zero-infrastructure shared review store via GitHub Gist.

Why Gist as the hosted store:
- Zero infra: no database to provision for a small review committee.
- Built-in access control: Gist ACL == GitHub account, so every reviewer with
  a token can read and score the same batches.
- Human-readable: the whole history is one JSON document anyone can inspect.

Data format: a single JSON file named `projreview_store.json` inside the Gist:

    {"reviews": [ReviewRecord dict, ...], "projects": [ProjectRecord dict, ...]}

Rows are appended in insertion order. Every write is a read-modify-write of
the whole document, so two machines writing at the same moment can lose one
update; within one process writes are serialised by a lock.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict

from projreview_store.base import BaseStore, StoreError
from projreview_store.models import ProjectRecord, ReviewRecord

logger = logging.getLogger(__name__)

_GIST_FILENAME = "projreview_store.json"

_REVIEW_UPDATABLE = {"status", "error", "updated_at"}
_PROJECT_UPDATABLE = {"human_score", "final_score", "scored_by", "scored_at", "error", "updated_at"}


class GistStore(BaseStore):
    """Stores reviews and projects in a GitHub Gist as one JSON document.

    Reads filter and sort in memory, which is fine for committees handling
    hundreds of projects. Larger deployments should use SQLiteStore.

    The Gist ID is stored in .projreview.yml under `gist_id`. Running
    `projreview init` creates the Gist and writes the ID automatically.
    """

    def __init__(self, gist_id: str, token: str):
        try:
            from github import Github
        except ImportError:
            raise ImportError("PyGithub is required for GistStore. Install projreview.")
        self._gist_id = gist_id
        self._gh = Github(token)
        self._lock = threading.Lock()

    def _get_gist(self):
        return self._gh.get_gist(self._gist_id)

    # ------------------------------------------------------------------ #
    # Reviews                                                              #
    # ------------------------------------------------------------------ #

    def insert_review(self, record: ReviewRecord) -> None:
        with self._lock:
            gist, doc = self._load()
            doc["reviews"].append(asdict(record))
            self._save(gist, doc)

    def get_review(self, review_id: str) -> ReviewRecord | None:
        _, doc = self._load()
        for r in doc["reviews"]:
            if r.get("id") == review_id:
                return self._review_from_dict(r)
        return None

    def list_reviews(self, status: str | None = None) -> list[ReviewRecord]:
        _, doc = self._load()
        rows = [r for r in doc["reviews"] if status is None or r.get("status") == status]
        # Reverse first so equal timestamps come out latest-insert first.
        rows = sorted(reversed(rows), key=lambda r: r.get("created_at", ""), reverse=True)
        return [self._review_from_dict(r) for r in rows]

    def update_review(self, review_id: str, fields: dict) -> bool:
        return self._update("reviews", _REVIEW_UPDATABLE, review_id, fields)

    # ------------------------------------------------------------------ #
    # Projects                                                             #
    # ------------------------------------------------------------------ #

    def insert_project(self, record: ProjectRecord) -> None:
        with self._lock:
            gist, doc = self._load()
            doc["projects"].append(asdict(record))
            self._save(gist, doc)

    def get_project(self, project_id: str) -> ProjectRecord | None:
        _, doc = self._load()
        for p in doc["projects"]:
            if p.get("id") == project_id:
                return self._project_from_dict(p)
        return None

    def list_projects(self, review_id: str) -> list[ProjectRecord]:
        _, doc = self._load()
        rows = [p for p in doc["projects"] if p.get("review_id") == review_id]
        rows.sort(key=lambda p: p.get("created_at", ""))
        return [self._project_from_dict(p) for p in rows]

    def update_project(self, project_id: str, fields: dict) -> bool:
        return self._update("projects", _PROJECT_UPDATABLE, project_id, fields)

    # ------------------------------------------------------------------ #
    # Helpers                                                              #
    # ------------------------------------------------------------------ #

    def _update(self, table: str, allowed: set[str], row_id: str, fields: dict) -> bool:
        unknown = set(fields) - allowed
        if unknown:
            raise StoreError(f"Cannot update field(s) {sorted(unknown)} on {table}")
        with self._lock:
            gist, doc = self._load()
            for row in doc[table]:
                if row.get("id") == row_id:
                    row.update(fields)
                    self._save(gist, doc)
                    return True
        return False

    def _load(self) -> tuple:
        """Fetch the Gist and its parsed document, or raise StoreError."""
        try:
            gist = self._get_gist()
        except Exception as e:
            logger.warning("GistStore could not fetch gist %s (%s): %s", self._gist_id, type(e).__name__, e)
            raise StoreError(f"Could not read Gist {self._gist_id}: {e}") from e
        return gist, self._read_document(gist)

    def _save(self, gist, doc: dict) -> None:
        try:
            gist.edit(files={_GIST_FILENAME: {"content": json.dumps(doc, indent=2)}})
        except Exception as e:
            logger.warning("GistStore write failed (%s): %s", type(e).__name__, e)
            raise StoreError(
                f"Could not write to Gist {self._gist_id} ({type(e).__name__}: {e}). "
                "The token needs the 'gist' scope."
            ) from e

    @staticmethod
    def _read_document(gist) -> dict:
        """Read the JSON document from the Gist file.

        A missing file is an empty store. A file that does not parse to
        {"reviews": [...], "projects": [...]} raises StoreError so the next
        write cannot replace the shared store with a single row.
        """
        file_obj = gist.files.get(_GIST_FILENAME)
        if file_obj is None:
            return {"reviews": [], "projects": []}
        try:
            doc = json.loads(file_obj.content)
        except (TypeError, json.JSONDecodeError) as e:
            raise StoreError(f"Gist document {_GIST_FILENAME} is corrupt: {e}") from e
        if (
            not isinstance(doc, dict)
            or not isinstance(doc.get("reviews", []), list)
            or not isinstance(doc.get("projects", []), list)
        ):
            raise StoreError(
                f"Gist document {_GIST_FILENAME} is corrupt: expected an object with 'reviews' and 'projects' lists"
            )
        return {"reviews": list(doc.get("reviews", [])), "projects": list(doc.get("projects", []))}

    @staticmethod
    def _review_from_dict(d: dict) -> ReviewRecord:
        return ReviewRecord(
            id=d.get("id", ""),
            title=d.get("title", ""),
            status=d.get("status", "pending"),
            created_at=d.get("created_at", ""),
            updated_at=d.get("updated_at", ""),
            error=d.get("error"),
        )

    @staticmethod
    def _project_from_dict(d: dict) -> ProjectRecord:
        return ProjectRecord(
            id=d.get("id", ""),
            review_id=d.get("review_id", ""),
            project_name=d.get("project_name", ""),
            project_description=d.get("project_description", ""),
            project_github_url=d.get("project_github_url", ""),
            project_owner_github_url=d.get("project_owner_github_url", ""),
            project_url=d.get("project_url", ""),
            analysis=d.get("analysis") or {},
            human_score=d.get("human_score"),
            final_score=d.get("final_score"),
            scored_by=d.get("scored_by"),
            scored_at=d.get("scored_at"),
            error=d.get("error"),
            created_at=d.get("created_at", ""),
            updated_at=d.get("updated_at", ""),
        )
