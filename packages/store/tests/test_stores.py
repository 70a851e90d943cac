"""Tests for projreview-store implementations."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from projreview_store.base import StoreError
from projreview_store.gist import GistStore
from projreview_store.models import ProjectRecord, ReviewRecord
from projreview_store.sqlite import SQLiteStore


def _make_review(review_id="r1", status="pending", created_at="2024-05-01T10:00:00+00:00", title="Batch 1"):
    return ReviewRecord(
        id=review_id,
        title=title,
        status=status,
        created_at=created_at,
        updated_at=created_at,
    )


def _make_project(project_id="p1", review_id="r1", created_at="2024-05-01T10:00:01+00:00", score=72):
    return ProjectRecord(
        id=project_id,
        review_id=review_id,
        project_name=f"Project {project_id}",
        project_description="A payments dapp",
        project_github_url=f"https://github.com/acme/{project_id}",
        project_owner_github_url="https://github.com/acme",
        project_url="https://acme.example",
        analysis={
            "code_quality": {"overall_score": score, "readability": 80},
            "celo_integration": {"integrated": True, "evidence": ["uses ContractKit"]},
        },
        created_at=created_at,
        updated_at=created_at,
    )


# ---------------------------------------------------------------------------
# ProjectRecord helpers
# ---------------------------------------------------------------------------


class TestProjectRecord:
    def test_ai_score_read_from_analysis(self):
        assert _make_project(score=64).ai_score == 64

    def test_celo_fields(self):
        p = _make_project()
        assert p.celo_integrated is True
        assert p.celo_evidence == ["uses ContractKit"]

    def test_missing_celo_integration_defaults(self):
        p = _make_project()
        p.analysis = {"code_quality": {"overall_score": 50}}
        assert p.celo_integrated is False
        assert p.celo_evidence == []

    def test_is_scored(self):
        p = _make_project()
        assert not p.is_scored
        p.human_score = 70
        assert p.is_scored


# ---------------------------------------------------------------------------
# SQLiteStore
# ---------------------------------------------------------------------------


@pytest.fixture
def sqlite_store(tmp_path):
    store = SQLiteStore(db_path=str(tmp_path / "test.db"))
    yield store
    store.close()


class TestSQLiteStore:
    def test_insert_and_get_review(self, sqlite_store):
        sqlite_store.insert_review(_make_review())
        review = sqlite_store.get_review("r1")
        assert review is not None
        assert review.title == "Batch 1"
        assert review.status == "pending"
        assert review.error is None

    def test_get_missing_review_returns_none(self, sqlite_store):
        assert sqlite_store.get_review("nope") is None

    def test_list_reviews_newest_first(self, sqlite_store):
        sqlite_store.insert_review(_make_review("old", created_at="2024-01-01T00:00:00+00:00"))
        sqlite_store.insert_review(_make_review("new", created_at="2024-03-01T00:00:00+00:00"))
        sqlite_store.insert_review(_make_review("mid", created_at="2024-02-01T00:00:00+00:00"))
        assert [r.id for r in sqlite_store.list_reviews()] == ["new", "mid", "old"]

    def test_list_reviews_filters_by_status(self, sqlite_store):
        sqlite_store.insert_review(_make_review("a", status="completed"))
        sqlite_store.insert_review(_make_review("b", status="pending"))
        assert [r.id for r in sqlite_store.list_reviews(status="completed")] == ["a"]

    def test_update_review(self, sqlite_store):
        sqlite_store.insert_review(_make_review())
        assert sqlite_store.update_review("r1", {"status": "failed", "error": "boom"}) is True
        review = sqlite_store.get_review("r1")
        assert review.status == "failed"
        assert review.error == "boom"

    def test_update_missing_review_returns_false(self, sqlite_store):
        assert sqlite_store.update_review("nope", {"status": "failed"}) is False

    def test_update_immutable_column_rejected(self, sqlite_store):
        sqlite_store.insert_review(_make_review())
        with pytest.raises(StoreError):
            sqlite_store.update_review("r1", {"title": "Renamed"})

    def test_duplicate_review_id_raises_store_error(self, sqlite_store):
        sqlite_store.insert_review(_make_review())
        with pytest.raises(StoreError):
            sqlite_store.insert_review(_make_review())

    def test_project_roundtrip_keeps_analysis(self, sqlite_store):
        sqlite_store.insert_review(_make_review())
        sqlite_store.insert_project(_make_project())
        project = sqlite_store.get_project("p1")
        assert project.project_name == "Project p1"
        assert project.analysis["code_quality"]["readability"] == 80
        assert project.human_score is None
        assert project.final_score is None

    def test_list_projects_oldest_first_and_scoped(self, sqlite_store):
        sqlite_store.insert_review(_make_review("r1"))
        sqlite_store.insert_review(_make_review("r2"))
        sqlite_store.insert_project(_make_project("b", created_at="2024-05-01T10:00:02+00:00"))
        sqlite_store.insert_project(_make_project("a", created_at="2024-05-01T10:00:01+00:00"))
        sqlite_store.insert_project(_make_project("other", review_id="r2"))
        assert [p.id for p in sqlite_store.list_projects("r1")] == ["a", "b"]

    def test_list_projects_ties_keep_insertion_order(self, sqlite_store):
        sqlite_store.insert_review(_make_review())
        for pid in ("x", "y", "z"):
            sqlite_store.insert_project(_make_project(pid, created_at="2024-05-01T10:00:00+00:00"))
        assert [p.id for p in sqlite_store.list_projects("r1")] == ["x", "y", "z"]

    def test_empty_review_has_no_projects(self, sqlite_store):
        assert sqlite_store.list_projects("r1") == []

    def test_update_project_scores(self, sqlite_store):
        sqlite_store.insert_review(_make_review())
        sqlite_store.insert_project(_make_project())
        sqlite_store.update_project("p1", {"human_score": 90, "final_score": 81, "scored_by": "ana"})
        project = sqlite_store.get_project("p1")
        assert (project.human_score, project.final_score, project.scored_by) == (90, 81, "ana")

    def test_update_project_metadata_rejected(self, sqlite_store):
        sqlite_store.insert_review(_make_review())
        sqlite_store.insert_project(_make_project())
        with pytest.raises(StoreError):
            sqlite_store.update_project("p1", {"review_id": "r2"})

    def test_persists_across_connections(self, tmp_path):
        """Data written by one SQLiteStore instance must be readable by another."""
        db_path = str(tmp_path / "test.db")
        store_a = SQLiteStore(db_path=db_path)
        store_a.insert_review(_make_review())
        store_a.close()

        store_b = SQLiteStore(db_path=db_path)
        assert store_b.get_review("r1") is not None
        store_b.close()


# ---------------------------------------------------------------------------
# GistStore
# ---------------------------------------------------------------------------


def _make_gist_mock(document: dict | None = None):
    """Return a mock Gist whose edit() rewrites the file content in place."""
    gist = MagicMock()
    if document is None:
        gist.files = {}
    else:
        file_mock = MagicMock()
        file_mock.content = json.dumps(document)
        gist.files = {"projreview_store.json": file_mock}

    def _edit(files):
        file_mock = MagicMock()
        file_mock.content = files["projreview_store.json"]["content"]
        gist.files = {"projreview_store.json": file_mock}

    gist.edit.side_effect = _edit
    return gist


def _make_gist_store(gist=None):
    """Return a GistStore with a mocked Github client."""
    # Github is a local import inside __init__, so bypass it entirely
    # by constructing the object and injecting the mock client directly.
    import threading

    store = object.__new__(GistStore)
    store._gist_id = "abc123"
    store._gh = MagicMock()
    store._lock = threading.Lock()
    store._gh.get_gist.return_value = gist if gist is not None else _make_gist_mock({"reviews": [], "projects": []})
    return store


class TestGistStore:
    def test_insert_review_writes_document(self):
        gist = _make_gist_mock({"reviews": [], "projects": []})
        store = _make_gist_store(gist)

        store.insert_review(_make_review())

        gist.edit.assert_called_once()
        content = json.loads(gist.edit.call_args[1]["files"]["projreview_store.json"]["content"])
        assert content["reviews"][0]["id"] == "r1"
        assert content["projects"] == []

    def test_missing_file_starts_empty(self):
        store = _make_gist_store(_make_gist_mock(None))
        assert store.list_reviews() == []
        store.insert_review(_make_review())
        assert store.get_review("r1").title == "Batch 1"

    def test_list_reviews_newest_first_and_filtered(self):
        store = _make_gist_store()
        store.insert_review(_make_review("old", status="completed", created_at="2024-01-01T00:00:00+00:00"))
        store.insert_review(_make_review("new", status="completed", created_at="2024-03-01T00:00:00+00:00"))
        store.insert_review(_make_review("pend", created_at="2024-04-01T00:00:00+00:00"))
        assert [r.id for r in store.list_reviews()] == ["pend", "new", "old"]
        assert [r.id for r in store.list_reviews(status="completed")] == ["new", "old"]

    def test_projects_roundtrip_and_order(self):
        store = _make_gist_store()
        store.insert_review(_make_review())
        store.insert_project(_make_project("b", created_at="2024-05-01T10:00:02+00:00"))
        store.insert_project(_make_project("a", created_at="2024-05-01T10:00:01+00:00"))
        projects = store.list_projects("r1")
        assert [p.id for p in projects] == ["a", "b"]
        assert projects[0].analysis["code_quality"]["overall_score"] == 72

    def test_update_project(self):
        store = _make_gist_store()
        store.insert_project(_make_project())
        assert store.update_project("p1", {"human_score": 60, "final_score": 66}) is True
        project = store.get_project("p1")
        assert project.human_score == 60
        assert project.final_score == 66

    def test_update_missing_project_returns_false(self):
        store = _make_gist_store()
        assert store.update_project("nope", {"human_score": 60}) is False

    def test_update_immutable_field_rejected(self):
        store = _make_gist_store()
        store.insert_review(_make_review())
        with pytest.raises(StoreError):
            store.update_review("r1", {"title": "x"})

    def test_read_failure_raises_store_error(self):
        store = _make_gist_store()
        store._gh.get_gist.side_effect = Exception("network error")
        with pytest.raises(StoreError, match="network error"):
            store.list_reviews()

    def test_write_failure_raises_store_error(self):
        gist = _make_gist_mock({"reviews": [], "projects": []})
        gist.edit.side_effect = Exception("401 Unauthorized")
        store = _make_gist_store(gist)
        with pytest.raises(StoreError, match="gist"):
            store.insert_review(_make_review())

    @pytest.mark.parametrize(
        "content",
        [
            '{"reviews": [{"id": "old", "title": "Jan"',
            "[]",
            '{"reviews": {"id": "old"}, "projects": []}',
        ],
    )
    def test_corrupt_document_is_never_overwritten(self, content):
        gist = MagicMock()
        file_mock = MagicMock()
        file_mock.content = content
        gist.files = {"projreview_store.json": file_mock}
        store = _make_gist_store(gist)

        with pytest.raises(StoreError, match="corrupt"):
            store.list_reviews()
        with pytest.raises(StoreError, match="corrupt"):
            store.insert_review(_make_review("new"))

        gist.edit.assert_not_called()
        assert gist.files["projreview_store.json"].content == content
