"""Tests for the review and project record accessors."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from projreview_core.errors import NotFoundError, PersistenceError, ValidationError
from projreview_core.records import ProjectRecordStore, ReviewRecordStore
from projreview_store.base import BaseStore, StoreError


@pytest.fixture
def reviews(store):
    return ReviewRecordStore(store)


@pytest.fixture
def projects(store):
    return ProjectRecordStore(store)


class TestReviewRecordStore:
    def test_create_starts_pending(self, reviews):
        review = reviews.create("Batch 1")
        assert review.status == "pending"
        assert review.title == "Batch 1"
        assert review.id
        assert review.created_at == review.updated_at
        assert review.error is None

    def test_create_strips_title(self, reviews):
        assert reviews.create("  Batch 2 ").title == "Batch 2"

    @pytest.mark.parametrize("title", ["", "   ", None])
    def test_create_requires_title(self, reviews, title):
        with pytest.raises(ValidationError):
            reviews.create(title)

    def test_ids_are_unique(self, reviews):
        assert reviews.create("a").id != reviews.create("b").id

    def test_get_missing_raises_not_found(self, reviews):
        with pytest.raises(NotFoundError):
            reviews.get("does-not-exist")

    def test_get_includes_projects(self, reviews, projects, make_descriptor):
        review = reviews.create("Batch 1")
        projects.add(review.id, make_descriptor("Alpha"))
        detail = reviews.get(review.id)
        assert detail.review.id == review.id
        assert [p.project_name for p in detail.projects] == ["Alpha"]

    def test_list_all_newest_first(self, reviews):
        first = reviews.create("first")
        second = reviews.create("second")
        assert [r.id for r in reviews.list_all()] == [second.id, first.id]

    def test_set_status_failed_records_error(self, reviews):
        review = reviews.create("Batch 1")
        reviews.set_status(review.id, "failed", error="agent crashed")
        stored = reviews.get(review.id).review
        assert stored.status == "failed"
        assert stored.error == "agent crashed"
        assert stored.updated_at >= stored.created_at

    def test_set_status_completed_ignores_error(self, reviews):
        review = reviews.create("Batch 1")
        reviews.set_status(review.id, "completed", error="ignored")
        assert reviews.get(review.id).review.error is None

    @pytest.mark.parametrize("terminal", ["completed", "failed"])
    def test_terminal_states_have_no_exit(self, reviews, terminal):
        review = reviews.create("Batch 1")
        reviews.set_status(review.id, terminal)
        for target in ("pending", "completed", "failed"):
            with pytest.raises(ValidationError):
                reviews.set_status(review.id, target)

    def test_unknown_status_rejected(self, reviews):
        review = reviews.create("Batch 1")
        with pytest.raises(ValidationError):
            reviews.set_status(review.id, "in-progress")

    def test_set_status_missing_review(self, reviews):
        with pytest.raises(NotFoundError):
            reviews.set_status("nope", "completed")

    def test_list_completed_newest_first_with_projects(self, reviews, projects, make_descriptor):
        older = reviews.create("older")
        projects.add(older.id, make_descriptor("A1"))
        projects.add(older.id, make_descriptor("A2"))
        pending = reviews.create("still pending")
        newer = reviews.create("newer")
        projects.add(newer.id, make_descriptor("B1"))
        reviews.set_status(older.id, "completed")
        reviews.set_status(newer.id, "completed")

        completed = reviews.list_completed()

        assert [d.review.id for d in completed] == [newer.id, older.id]
        assert pending.id not in [d.review.id for d in completed]
        assert [p.project_name for p in completed[1].projects] == ["A1", "A2"]

    def test_backend_failure_becomes_persistence_error(self):
        backend = MagicMock(spec=BaseStore)
        backend.insert_review.side_effect = StoreError("disk full")
        with pytest.raises(PersistenceError, match="disk full"):
            ReviewRecordStore(backend).create("Batch 1")


class TestProjectRecordStore:
    def test_add_persists_unscored_project(self, reviews, projects, make_descriptor):
        review = reviews.create("Batch 1")
        project = projects.add(review.id, make_descriptor("Alpha", score=88))
        assert project.review_id == review.id
        assert project.ai_score == 88
        assert project.human_score is None
        assert project.final_score is None
        assert project.scored_at is None

    def test_list_by_review_empty(self, projects):
        assert projects.list_by_review("nothing-here") == []

    def test_list_by_review_backend_error(self):
        backend = MagicMock(spec=BaseStore)
        backend.list_projects.side_effect = StoreError("connection reset")
        with pytest.raises(NotFoundError):
            ProjectRecordStore(backend).list_by_review("r1")

    def test_update_human_score_derives_final(self, reviews, projects, make_descriptor):
        review = reviews.create("Batch 1")
        project = projects.add(review.id, make_descriptor("Alpha", score=81))

        updated = projects.update_human_score(project.id, 50, scored_by="ana@example.com")

        assert updated.human_score == 50
        assert updated.final_score == 66
        assert updated.scored_by == "ana@example.com"
        assert updated.scored_at is not None
        stored = projects.get(project.id)
        assert (stored.human_score, stored.final_score) == (50, 66)

    def test_update_is_idempotent(self, reviews, projects, make_descriptor):
        review = reviews.create("Batch 1")
        project = projects.add(review.id, make_descriptor("Alpha", score=75))
        first = projects.update_human_score(project.id, 80).final_score
        second = projects.update_human_score(project.id, 80).final_score
        assert first == second == 78
        assert projects.get(project.id).final_score == 78

    def test_last_writer_wins(self, reviews, projects, make_descriptor):
        review = reviews.create("Batch 1")
        project = projects.add(review.id, make_descriptor("Alpha", score=90))
        projects.update_human_score(project.id, 70, scored_by="ana")
        projects.update_human_score(project.id, 30, scored_by="ben")
        stored = projects.get(project.id)
        assert (stored.human_score, stored.final_score, stored.scored_by) == (30, 60, "ben")

    @pytest.mark.parametrize("score", [0, 101, -1, 55.5])
    def test_invalid_score_rejected_and_nothing_written(self, reviews, projects, score, make_descriptor):
        review = reviews.create("Batch 1")
        project = projects.add(review.id, make_descriptor("Alpha"))
        with pytest.raises(ValidationError):
            projects.update_human_score(project.id, score)
        stored = projects.get(project.id)
        assert stored.human_score is None
        assert stored.final_score is None

    def test_update_missing_project(self, projects):
        with pytest.raises(NotFoundError):
            projects.update_human_score("ghost", 50)

    def test_final_score_set_iff_human_score_set(self, reviews, projects, make_descriptor):
        review = reviews.create("Batch 1")
        a = projects.add(review.id, make_descriptor("A"))
        projects.add(review.id, make_descriptor("B"))
        projects.update_human_score(a.id, 40)
        for p in projects.list_by_review(review.id):
            assert (p.final_score is None) == (p.human_score is None)
