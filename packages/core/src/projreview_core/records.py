"""Record accessors over a BaseStore.

The backends in projreview_store only persist rows. These accessors add the
workflow rules on top: identifiers and timestamps, score derivation, status
transitions, and translation of StoreError into the workflow error taxonomy.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from projreview_core.errors import NotFoundError, PersistenceError, ValidationError
from projreview_core.scoring import combine, validate_human_score
from projreview_store.base import StoreError
from projreview_store.models import COMPLETED, FAILED, PENDING, REVIEW_STATUSES, ProjectRecord, ReviewRecord

if TYPE_CHECKING:
    from projreview_core.analyzers.base import ProjectDescriptor
    from projreview_store.base import BaseStore

logger = logging.getLogger(__name__)

# status → statuses it may move to. Terminal states have no way out.
_TRANSITIONS = {
    PENDING: {COMPLETED, FAILED},
    COMPLETED: set(),
    FAILED: set(),
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class ReviewDetail:
    """A review together with its projects, oldest project first."""

    review: ReviewRecord
    projects: list[ProjectRecord] = field(default_factory=list)

    @property
    def scored_count(self) -> int:
        return sum(1 for p in self.projects if p.is_scored)

    @property
    def fully_scored(self) -> bool:
        return bool(self.projects) and self.scored_count == len(self.projects)


class ProjectRecordStore:
    def __init__(self, store: BaseStore):
        self._store = store

    def add(self, review_id: str, descriptor: ProjectDescriptor) -> ProjectRecord:
        """Persist one ingested project. Each call is an independent insert."""
        now = _now()
        record = ProjectRecord(
            id=_new_id(),
            review_id=review_id,
            project_name=descriptor.project_name,
            project_description=descriptor.project_description,
            project_github_url=descriptor.project_github_url,
            project_owner_github_url=descriptor.project_owner_github_url,
            project_url=descriptor.project_url,
            analysis=descriptor.analysis,
            created_at=now,
            updated_at=now,
        )
        try:
            self._store.insert_project(record)
        except StoreError as e:
            raise PersistenceError(f"Failed to insert project {descriptor.project_name!r}: {e}") from e
        return record

    def get(self, project_id: str) -> ProjectRecord:
        try:
            project = self._store.get_project(project_id)
        except StoreError as e:
            raise PersistenceError(f"Error fetching project: {e}") from e
        if project is None:
            raise NotFoundError(f"Project with ID {project_id} not found")
        return project

    def list_by_review(self, review_id: str) -> list[ProjectRecord]:
        """Return the projects of a review, oldest first. An empty list is valid."""
        try:
            return self._store.list_projects(review_id)
        except StoreError as e:
            raise NotFoundError(f"Error fetching projects for review {review_id}: {e}") from e

    def update_human_score(self, project_id: str, human_score: int, scored_by: str | None = None) -> ProjectRecord:
        """Record a human score and the derived final score in one update.

        The AI score is re-read from the stored analysis rather than trusted
        from the caller. Last writer wins.
        """
        human = validate_human_score(human_score)
        project = self.get(project_id)
        final_score = combine(project.ai_score, human)
        now = _now()
        fields = {
            "human_score": human,
            "final_score": final_score,
            "scored_by": scored_by,
            "scored_at": now,
            "updated_at": now,
        }
        try:
            found = self._store.update_project(project_id, fields)
        except StoreError as e:
            raise PersistenceError(f"Error updating project score: {e}") from e
        if not found:
            raise NotFoundError(f"Project with ID {project_id} not found")

        logger.debug(
            "Scored project %s: ai=%s human=%s final=%s", project_id, project.ai_score, human, final_score
        )
        project.human_score = human
        project.final_score = final_score
        project.scored_by = scored_by
        project.scored_at = now
        project.updated_at = now
        return project


class ReviewRecordStore:
    def __init__(self, store: BaseStore, projects: ProjectRecordStore | None = None):
        self._store = store
        self._projects = projects or ProjectRecordStore(store)

    def create(self, title: str) -> ReviewRecord:
        title = (title or "").strip()
        if not title:
            raise ValidationError("A review title is required.")
        now = _now()
        record = ReviewRecord(id=_new_id(), title=title, status=PENDING, created_at=now, updated_at=now)
        try:
            self._store.insert_review(record)
        except StoreError as e:
            raise PersistenceError(f"Failed to create review record: {e}") from e
        logger.info("Created review %s (%r)", record.id, title)
        return record

    def get(self, review_id: str) -> ReviewDetail:
        return ReviewDetail(review=self._get_review(review_id), projects=self._projects.list_by_review(review_id))

    def list_all(self) -> list[ReviewRecord]:
        try:
            return self._store.list_reviews()
        except StoreError as e:
            raise PersistenceError(f"Error fetching reviews: {e}") from e

    def list_completed(self) -> list[ReviewDetail]:
        try:
            reviews = self._store.list_reviews(status=COMPLETED)
        except StoreError as e:
            raise PersistenceError(f"Error fetching completed reviews: {e}") from e
        return [ReviewDetail(review=r, projects=self._projects.list_by_review(r.id)) for r in reviews]

    def set_status(self, review_id: str, status: str, error: str | None = None) -> None:
        if status not in REVIEW_STATUSES:
            raise ValidationError(f"Unknown review status: {status!r}")
        review = self._get_review(review_id)
        if status not in _TRANSITIONS[review.status]:
            raise ValidationError(f"Review {review_id} cannot move from {review.status!r} to {status!r}.")

        fields = {"status": status, "updated_at": _now()}
        if status == FAILED:
            fields["error"] = error
        try:
            found = self._store.update_review(review_id, fields)
        except StoreError as e:
            raise PersistenceError(f"Failed to update review status: {e}") from e
        if not found:
            raise NotFoundError(f"Review with ID {review_id} not found")
        logger.info("Review %s: %s → %s", review_id, review.status, status)

    def _get_review(self, review_id: str) -> ReviewRecord:
        try:
            review = self._store.get_review(review_id)
        except StoreError as e:
            raise PersistenceError(f"Error fetching review: {e}") from e
        if review is None:
            raise NotFoundError(f"Review with ID {review_id} not found")
        return review
