"""Base analyzer implementing the Template Method pattern.

All analysis backends share the same contract:
    analyze() → _run()    ← only this differs per backend
              → _parse()

Subclasses implement _run only: produce the raw JSON report text for an
uploaded artifact, raising AnalysisError on failure. Report validation and
descriptor construction live here so every backend yields identical
ProjectDescriptor objects.

There is no retry: the analysis can take minutes and re-running it is the
reviewer's call, not ours.
"""

from __future__ import annotations

import json
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from numbers import Real

from projreview_core.errors import AnalysisError

logger = logging.getLogger(__name__)

_METADATA_FIELDS = (
    "project_name",
    "project_description",
    "project_github_url",
    "project_owner_github_url",
    "project_url",
)


@dataclass
class ProjectDescriptor:
    """One scored project as returned by the analysis backend.

    Carries the immutable project metadata plus the raw ``analysis`` mapping.
    The lifecycle controller turns each descriptor into a ProjectRecord.
    """

    project_name: str
    project_description: str = ""
    project_github_url: str = ""
    project_owner_github_url: str = ""
    project_url: str = ""
    analysis: dict = field(default_factory=dict)

    @property
    def ai_score(self) -> float:
        return self.analysis["code_quality"]["overall_score"]


class BaseAnalyzer(ABC):
    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def analyze(self, title: str, artifact: str) -> list[ProjectDescriptor]:
        """Analyse an uploaded artifact and return one descriptor per project.

        Blocks until the backend finishes; there is no partial-progress signal.
        """
        logger.info("%s: analysing %s for review %r", self.__class__.__name__, artifact, title)
        raw = self._run(title, artifact)
        descriptors = self._parse(raw)
        logger.info("%s: %d project(s) analysed", self.__class__.__name__, len(descriptors))
        return descriptors

    # ------------------------------------------------------------------ #
    # Abstract: implement in each backend                                 #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _run(self, title: str, artifact: str) -> str:
        """Produce the raw JSON report text for ``artifact``.

        Must raise AnalysisError carrying the backend's diagnostic text on
        failure.
        """

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _parse(self, raw: str) -> list[ProjectDescriptor]:
        """Parse a JSON report (a list of project objects) into descriptors."""
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise AnalysisError(f"Analysis report is not valid JSON: {e}\n{raw[:200]}") from e

        if not isinstance(data, list):
            raise AnalysisError("Analysis report must be a JSON list of projects.")

        return [self._to_descriptor(i, item) for i, item in enumerate(data, 1)]

    @staticmethod
    def _to_descriptor(index: int, item) -> ProjectDescriptor:
        if not isinstance(item, dict):
            raise AnalysisError(f"Project #{index} in the analysis report is not an object.")

        name = item.get("project_name")
        if not name:
            raise AnalysisError(f"Project #{index} in the analysis report has no project_name.")

        analysis = item.get("analysis")
        if not isinstance(analysis, dict) or not isinstance(analysis.get("code_quality"), dict):
            raise AnalysisError(f"Project {name!r} has no code_quality analysis.")

        score = analysis["code_quality"].get("overall_score")
        if (
            not isinstance(score, Real)
            or isinstance(score, bool)
            or not math.isfinite(score)
            or not 0 <= score <= 100
        ):
            raise AnalysisError(f"Project {name!r} has an invalid overall_score: {score!r}.")

        celo = analysis.get("celo_integration")
        if not isinstance(celo, dict):
            # The dashboards read these keys; default them rather than fail.
            analysis = {**analysis, "celo_integration": {"integrated": False, "evidence": []}}

        return ProjectDescriptor(
            **{f: str(item.get(f) or "") for f in _METADATA_FIELDS},
            analysis=analysis,
        )
