from __future__ import annotations

import pytest

from projreview_core.analyzers.base import BaseAnalyzer, ProjectDescriptor
from projreview_store.sqlite import SQLiteStore


def _descriptor(name: str, score: float = 70, integrated: bool = False) -> ProjectDescriptor:
    slug = name.lower().replace(" ", "-")
    return ProjectDescriptor(
        project_name=name,
        project_description=f"{name} description",
        project_github_url=f"https://github.com/acme/{slug}",
        project_owner_github_url="https://github.com/acme",
        project_url=f"https://{slug}.example",
        analysis={
            "code_quality": {"overall_score": score},
            "celo_integration": {"integrated": integrated, "evidence": []},
        },
    )


class StubAnalyzer(BaseAnalyzer):
    """Analyzer that returns fixed descriptors without running anything."""

    def __init__(self, descriptors=None, error=None):
        self.descriptors = descriptors or []
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def analyze(self, title, artifact):
        self.calls.append((title, artifact))
        if self.error is not None:
            raise self.error
        return list(self.descriptors)

    def _run(self, title, artifact):  # pragma: no cover - analyze is overridden
        raise NotImplementedError


@pytest.fixture
def make_descriptor():
    return _descriptor


@pytest.fixture
def make_analyzer():
    return StubAnalyzer


@pytest.fixture
def store(tmp_path):
    s = SQLiteStore(db_path=str(tmp_path / "reviews.db"))
    yield s
    s.close()
