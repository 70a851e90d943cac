from __future__ import annotations

from pathlib import Path

from projreview_core.analyzers.base import BaseAnalyzer
from projreview_core.errors import AnalysisError


class ReportAnalyzer(BaseAnalyzer):
    """Uses an agent report that was generated elsewhere; the artifact is the report."""

    def _run(self, title: str, artifact: str) -> str:
        path = Path(artifact)
        if not path.is_file():
            raise AnalysisError(f"Report file not found: {artifact}")
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise AnalysisError(f"Could not read report {artifact}: {e}") from e
