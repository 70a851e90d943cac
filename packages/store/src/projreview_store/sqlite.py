"""SQLiteStore — local relational store, the default backend.

Why SQLite as the default:
- Batteries included: ships with Python, no server to provision.
- The two-table layout (reviews, projects) maps one-to-one onto the hosted
  relational backend the review workflow was designed against.
- Indexed lookups on review_id/status keep the dashboard queries cheap.

Schema:
  reviews   — one row per review batch.
  projects  — one row per analysed project; ``analysis`` stored as JSON text.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading

from projreview_store.base import BaseStore, StoreError
from projreview_store.models import ProjectRecord, ReviewRecord

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS reviews (
    id          TEXT PRIMARY KEY,
    title       TEXT NOT NULL,
    status      TEXT NOT NULL DEFAULT 'pending',
    error       TEXT,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS projects (
    id                        TEXT PRIMARY KEY,
    review_id                 TEXT NOT NULL REFERENCES reviews (id),
    project_name              TEXT,
    project_description       TEXT,
    project_github_url        TEXT,
    project_owner_github_url  TEXT,
    project_url               TEXT,
    analysis_json             TEXT DEFAULT '{}',
    human_score               INTEGER,
    final_score               INTEGER,
    scored_by                 TEXT,
    scored_at                 TEXT,
    error                     TEXT,
    created_at                TEXT NOT NULL,
    updated_at                TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_reviews_status  ON reviews (status);
CREATE INDEX IF NOT EXISTS idx_projects_review ON projects (review_id);
"""

# Columns callers may change after insert. Metadata and analysis are immutable.
_REVIEW_UPDATABLE = {"status", "error", "updated_at"}
_PROJECT_UPDATABLE = {"human_score", "final_score", "scored_by", "scored_at", "error", "updated_at"}


class SQLiteStore(BaseStore):
    """Stores reviews and projects in a local SQLite database file.

    The database file path defaults to `.projreview.db` in the current working
    directory. Configure via .projreview.yml: `store_path: /path/to/file.db`.
    """

    def __init__(self, db_path: str = ".projreview.db"):
        # One connection shared by the ingestion worker threads; the lock
        # serialises every statement + commit pair.
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(_SCHEMA)
            self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Could not open SQLite store at {db_path}: {e}") from e

    # ------------------------------------------------------------------ #
    # Reviews                                                              #
    # ------------------------------------------------------------------ #

    def insert_review(self, record: ReviewRecord) -> None:
        self._execute(
            "INSERT INTO reviews (id, title, status, error, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?)",
            (record.id, record.title, record.status, record.error, record.created_at, record.updated_at),
        )

    def get_review(self, review_id: str) -> ReviewRecord | None:
        rows = self._query("SELECT * FROM reviews WHERE id=?", (review_id,))
        return self._row_to_review(rows[0]) if rows else None

    def list_reviews(self, status: str | None = None) -> list[ReviewRecord]:
        if status is not None:
            rows = self._query(
                "SELECT * FROM reviews WHERE status=? ORDER BY created_at DESC, rowid DESC",
                (status,),
            )
        else:
            rows = self._query("SELECT * FROM reviews ORDER BY created_at DESC, rowid DESC", ())
        return [self._row_to_review(r) for r in rows]

    def update_review(self, review_id: str, fields: dict) -> bool:
        return self._update("reviews", _REVIEW_UPDATABLE, review_id, fields)

    # ------------------------------------------------------------------ #
    # Projects                                                             #
    # ------------------------------------------------------------------ #

    def insert_project(self, record: ProjectRecord) -> None:
        self._execute(
            """
            INSERT INTO projects
              (id, review_id, project_name, project_description, project_github_url,
               project_owner_github_url, project_url, analysis_json, human_score,
               final_score, scored_by, scored_at, error, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                record.review_id,
                record.project_name,
                record.project_description,
                record.project_github_url,
                record.project_owner_github_url,
                record.project_url,
                json.dumps(record.analysis),
                record.human_score,
                record.final_score,
                record.scored_by,
                record.scored_at,
                record.error,
                record.created_at,
                record.updated_at,
            ),
        )

    def get_project(self, project_id: str) -> ProjectRecord | None:
        rows = self._query("SELECT * FROM projects WHERE id=?", (project_id,))
        return self._row_to_project(rows[0]) if rows else None

    def list_projects(self, review_id: str) -> list[ProjectRecord]:
        rows = self._query(
            "SELECT * FROM projects WHERE review_id=? ORDER BY created_at, rowid",
            (review_id,),
        )
        return [self._row_to_project(r) for r in rows]

    def update_project(self, project_id: str, fields: dict) -> bool:
        return self._update("projects", _PROJECT_UPDATABLE, project_id, fields)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # ------------------------------------------------------------------ #
    # Helpers                                                              #
    # ------------------------------------------------------------------ #

    def _execute(self, sql: str, params: tuple) -> int:
        with self._lock:
            try:
                cursor = self._conn.execute(sql, params)
                self._conn.commit()
                return cursor.rowcount
            except sqlite3.Error as e:
                self._conn.rollback()
                logger.error("SQLite write failed: %s", e)
                raise StoreError(str(e)) from e

    def _query(self, sql: str, params: tuple) -> list[sqlite3.Row]:
        with self._lock:
            try:
                return self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                logger.error("SQLite read failed: %s", e)
                raise StoreError(str(e)) from e

    def _update(self, table: str, allowed: set[str], row_id: str, fields: dict) -> bool:
        unknown = set(fields) - allowed
        if unknown:
            raise StoreError(f"Cannot update column(s) {sorted(unknown)} on {table}")
        if not fields:
            return self._query(f"SELECT 1 FROM {table} WHERE id=?", (row_id,)) != []
        columns = sorted(fields)
        assignments = ", ".join(f"{c}=?" for c in columns)
        params = tuple(fields[c] for c in columns) + (row_id,)
        return self._execute(f"UPDATE {table} SET {assignments} WHERE id=?", params) > 0

    @staticmethod
    def _row_to_review(row: sqlite3.Row) -> ReviewRecord:
        return ReviewRecord(
            id=row["id"],
            title=row["title"],
            status=row["status"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            error=row["error"],
        )

    @staticmethod
    def _row_to_project(row: sqlite3.Row) -> ProjectRecord:
        return ProjectRecord(
            id=row["id"],
            review_id=row["review_id"],
            project_name=row["project_name"] or "",
            project_description=row["project_description"] or "",
            project_github_url=row["project_github_url"] or "",
            project_owner_github_url=row["project_owner_github_url"] or "",
            project_url=row["project_url"] or "",
            analysis=json.loads(row["analysis_json"] or "{}"),
            human_score=row["human_score"],
            final_score=row["final_score"],
            scored_by=row["scored_by"],
            scored_at=row["scored_at"],
            error=row["error"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
