"""Error taxonomy for the review workflow.

Every error the workflow raises derives from ReviewError so the presentation
layer can catch one type and show ``str(e)`` to the user.
"""

from __future__ import annotations


class ReviewError(Exception):
    """Base class for all workflow errors."""


class ValidationError(ReviewError):
    """Malformed score, missing required field, or illegal status transition."""


class NotFoundError(ReviewError):
    """Reference to a review or project that does not exist."""


class AnalysisError(ReviewError):
    """The external analysis backend failed; carries its raw diagnostic text."""


class PersistenceError(ReviewError):
    """A store read or write failed."""


class ReviewFailed(ReviewError):
    """A review was moved to ``failed``.

    Carries the id of the failed review so callers never have to guess which
    review an error belongs to.
    """

    kind = "failed"

    def __init__(self, review_id: str, message: str):
        super().__init__(message)
        self.review_id = review_id
        self.message = message


class AnalysisFailed(ReviewFailed):
    kind = "analysis"


class IngestionFailed(ReviewFailed):
    kind = "ingestion"
