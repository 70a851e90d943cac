"""Review and project data models.

Decoupled from projreview_core so the store layer can be used independently.
Field names follow the persisted column names of the ``reviews`` and
``projects`` tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field

PENDING = "pending"
COMPLETED = "completed"
FAILED = "failed"

REVIEW_STATUSES = (PENDING, COMPLETED, FAILED)


@dataclass
class ReviewRecord:
    """A batch of projects to be scored, persisted in the ``reviews`` table."""

    id: str
    title: str
    status: str  # "pending" | "completed" | "failed"
    created_at: str  # ISO-8601 UTC timestamp
    updated_at: str
    error: str | None = None


@dataclass
class ProjectRecord:
    """One analysed project within a review, persisted in the ``projects`` table.

    ``analysis`` is kept as the raw mapping returned by the analysis backend so
    keys this package does not know about survive a save/load cycle.
    """

    id: str
    review_id: str
    project_name: str
    project_description: str
    project_github_url: str
    project_owner_github_url: str
    project_url: str
    analysis: dict = field(default_factory=dict)
    human_score: int | None = None
    final_score: int | None = None
    scored_by: str | None = None
    scored_at: str | None = None
    error: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def ai_score(self) -> float:
        return self.analysis.get("code_quality", {}).get("overall_score", 0)

    @property
    def celo_integrated(self) -> bool:
        return bool(self.analysis.get("celo_integration", {}).get("integrated", False))

    @property
    def celo_evidence(self) -> list[str]:
        return list(self.analysis.get("celo_integration", {}).get("evidence", []))

    @property
    def is_scored(self) -> bool:
        return self.human_score is not None
