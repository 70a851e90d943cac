"""Abstract store interface.

Every persistence backend (SQLite, Gist) implements this interface. The core
workflow depends on BaseStore, not on a concrete backend, so backends are
swappable without touching the lifecycle code.

Backends are deliberately dumb: they persist and return rows. Validation,
score derivation and status transitions live in projreview_core.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from projreview_store.models import ProjectRecord, ReviewRecord


class StoreError(Exception):
    """Raised by a backend when a read or write cannot be completed."""


class BaseStore(ABC):
    """Pluggable persistence layer for reviews and their projects.

    Ordering contract:
      list_reviews  — newest ``created_at`` first, latest insert first on ties
      list_projects — oldest ``created_at`` first, insertion order on ties

    Implementations must be safe to call from several threads of one process;
    ingestion inserts projects from a small worker pool.
    """

    # ------------------------------------------------------------------ #
    # Reviews                                                              #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def insert_review(self, record: ReviewRecord) -> None:
        """Persist a new review row."""

    @abstractmethod
    def get_review(self, review_id: str) -> ReviewRecord | None:
        """Return the review, or None if no such row exists."""

    @abstractmethod
    def list_reviews(self, status: str | None = None) -> list[ReviewRecord]:
        """Return reviews, optionally filtered by status.

        Returns an empty list if no reviews exist.
        """

    @abstractmethod
    def update_review(self, review_id: str, fields: dict) -> bool:
        """Apply ``fields`` to one review row. Returns False if it does not exist."""

    # ------------------------------------------------------------------ #
    # Projects                                                             #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def insert_project(self, record: ProjectRecord) -> None:
        """Persist a new project row."""

    @abstractmethod
    def get_project(self, project_id: str) -> ProjectRecord | None:
        """Return the project, or None if no such row exists."""

    @abstractmethod
    def list_projects(self, review_id: str) -> list[ProjectRecord]:
        """Return the projects of one review."""

    @abstractmethod
    def update_project(self, project_id: str, fields: dict) -> bool:
        """Apply ``fields`` to one project row. Returns False if it does not exist."""

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Default is a no-op so callers can always call close() safely.
        """
