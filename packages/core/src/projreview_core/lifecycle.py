"""Review lifecycle orchestration.

A review moves through three states:

    pending ──► completed   (every project scored, then submitted)
       │
       └──────► failed      (analysis or ingestion error)

Both end states are terminal. The controller owns every transition; the
presentation layer only calls its public methods and renders what they return.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from projreview_core.errors import (
    AnalysisError,
    AnalysisFailed,
    IngestionFailed,
    ReviewError,
    ValidationError,
)
from projreview_core.records import ProjectRecordStore, ReviewDetail, ReviewRecordStore
from projreview_store.models import COMPLETED, FAILED

if TYPE_CHECKING:
    from projreview_core.analyzers.base import BaseAnalyzer, ProjectDescriptor
    from projreview_store.base import BaseStore
    from projreview_store.models import ProjectRecord, ReviewRecord

logger = logging.getLogger(__name__)

_DEFAULT_INGEST_WORKERS = 4


@dataclass
class ReviewSession:
    """The review a reviewer is currently working on.

    Passed into the controller explicitly; ``create_review`` sets it and
    ``submit`` clears it.
    """

    review_id: str | None = None

    def clear(self) -> None:
        self.review_id = None


@dataclass
class ScoreBatch:
    """Outcome of saving several scores at once. Failures are per project."""

    updated: list[ProjectRecord] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)  # project id → error message

    @property
    def ok(self) -> bool:
        return not self.failed


class ReviewController:
    def __init__(
        self,
        store: BaseStore,
        analyzer: BaseAnalyzer,
        session: ReviewSession | None = None,
        ingest_workers: int = _DEFAULT_INGEST_WORKERS,
    ):
        if ingest_workers < 1:
            raise ValueError(f"ingest_workers must be at least 1, got {ingest_workers}")
        self.analyzer = analyzer
        self.session = session if session is not None else ReviewSession()
        self.ingest_workers = ingest_workers
        self.projects = ProjectRecordStore(store)
        self.reviews = ReviewRecordStore(store, self.projects)

    # ------------------------------------------------------------------ #
    # Create → analyse → ingest                                           #
    # ------------------------------------------------------------------ #

    def create_review(self, title: str, artifact: str) -> ReviewDetail:
        """Create a pending review, run the analysis, and ingest its projects.

        On analysis failure the review is marked failed and AnalysisFailed is
        raised; on ingestion failure, IngestionFailed. Either way the error
        carries the id of the failed review.
        """
        review = self.reviews.create(title)
        self.session.review_id = review.id

        try:
            descriptors = self.analyzer.analyze(review.title, artifact)
        except AnalysisError as e:
            logger.error("Analysis failed for review %s: %s", review.id, e)
            self.reviews.set_status(review.id, FAILED, error=str(e))
            raise AnalysisFailed(review.id, str(e)) from e

        projects = self.ingest(review.id, descriptors)
        return ReviewDetail(review=self.reviews.get(review.id).review, projects=projects)

    def ingest(self, review_id: str, descriptors: list[ProjectDescriptor]) -> list[ProjectRecord]:
        """Persist analysed projects with a bounded pool of independent inserts.

        Best effort: there is no shared transaction. Inserts that finished
        before a failure stay persisted, not-yet-started inserts are
        cancelled, and the review is marked failed with the first error.
        """
        if not descriptors:
            logger.warning("Review %s: analysis returned no projects", review_id)
            return []

        inserted: dict[int, ProjectRecord] = {}
        first_error: Exception | None = None

        with ThreadPoolExecutor(max_workers=self.ingest_workers, thread_name_prefix="ingest") as pool:
            futures = {pool.submit(self.projects.add, review_id, d): i for i, d in enumerate(descriptors)}
            for future in as_completed(futures):
                try:
                    inserted[futures[future]] = future.result()
                except Exception as e:
                    first_error = e
                    for pending in futures:
                        pending.cancel()
                    break

        if first_error is not None:
            message = str(first_error)
            logger.error(
                "Ingestion failed for review %s after %d/%d insert(s): %s",
                review_id,
                len(inserted),
                len(descriptors),
                message,
            )
            self.reviews.set_status(review_id, FAILED, error=message)
            raise IngestionFailed(review_id, message) from first_error

        logger.info("Review %s: ingested %d project(s)", review_id, len(inserted))
        return [inserted[i] for i in sorted(inserted)]

    # ------------------------------------------------------------------ #
    # Scoring                                                              #
    # ------------------------------------------------------------------ #

    def update_human_score(self, project_id: str, human_score: int, scored_by: str | None = None) -> ProjectRecord:
        return self.projects.update_human_score(project_id, human_score, scored_by=scored_by)

    def save_scores(self, scores: dict[str, int], scored_by: str | None = None) -> ScoreBatch:
        """Save several human scores; one project's failure does not stop the others."""
        if not scores:
            raise ValidationError("No scores to save.")
        batch = ScoreBatch()
        for project_id, score in scores.items():
            try:
                batch.updated.append(self.update_human_score(project_id, score, scored_by=scored_by))
            except ReviewError as e:
                logger.warning("Could not save score for project %s: %s", project_id, e)
                batch.failed[project_id] = str(e)
        return batch

    # ------------------------------------------------------------------ #
    # Completion                                                           #
    # ------------------------------------------------------------------ #

    def submit(self, review_id: str | None = None) -> ReviewRecord:
        """Mark a fully scored review completed and clear the session."""
        review_id = review_id or self.session.review_id
        if not review_id:
            raise ValidationError("No review selected. Start a review or pass its id.")

        detail = self.reviews.get(review_id)
        if not detail.projects:
            raise ValidationError(f"Review {review_id} has no projects to submit.")
        unscored = [p.project_name for p in detail.projects if not p.is_scored]
        if unscored:
            raise ValidationError(
                f"Please score all projects before submitting ({len(unscored)} unscored: {', '.join(unscored)})."
            )

        self.reviews.set_status(review_id, COMPLETED)
        if self.session.review_id == review_id:
            self.session.clear()
        return self.reviews.get(review_id).review

    # ------------------------------------------------------------------ #
    # Queries                                                              #
    # ------------------------------------------------------------------ #

    def get_review(self, review_id: str | None = None) -> ReviewDetail:
        review_id = review_id or self.session.review_id
        if not review_id:
            raise ValidationError("No review selected. Start a review or pass its id.")
        return self.reviews.get(review_id)

    def list_reviews(self) -> list[ReviewRecord]:
        return self.reviews.list_all()

    def list_completed_reviews(self) -> list[ReviewDetail]:
        return self.reviews.list_completed()

    def progress(self, review_id: str | None = None) -> tuple[int, int]:
        """Return (scored, total) project counts for a review."""
        detail = self.get_review(review_id)
        return detail.scored_count, len(detail.projects)
