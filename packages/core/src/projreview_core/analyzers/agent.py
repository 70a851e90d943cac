"""AgentAnalyzer — runs the external scoring agent as a subprocess.

The agent is a separate Python project (its own virtualenv) that reads the
uploaded spreadsheet, analyses every listed repository, and writes a JSON
report into its ``reports/`` directory. We only care about its exit code,
its stderr, and the newest report it leaves behind.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path

from projreview_core.analyzers.base import BaseAnalyzer
from projreview_core.errors import AnalysisError

logger = logging.getLogger(__name__)


class AgentAnalyzer(BaseAnalyzer):
    def __init__(
        self,
        agent_dir: str = "agent",
        script: str = "run.py",
        python: str | None = None,
        reports_dir: str = "reports",
        timeout: float | None = None,
    ):
        self.agent_dir = Path(agent_dir).resolve()
        self.script = script
        self.python = python or self._default_python()
        self.reports_dir = self.agent_dir / reports_dir
        self.timeout = timeout

    def _default_python(self) -> str:
        """Prefer the agent's own virtualenv, fall back to this interpreter."""
        if sys.platform == "win32":
            venv_python = self.agent_dir / "venv" / "Scripts" / "python.exe"
        else:
            venv_python = self.agent_dir / "venv" / "bin" / "python"
        return str(venv_python) if venv_python.exists() else sys.executable

    def _run(self, title: str, artifact: str) -> str:
        artifact_path = Path(artifact).resolve()
        if not artifact_path.exists():
            raise AnalysisError(f"Uploaded file not found: {artifact}")

        env = {**os.environ, "PYTHONPATH": str(self.agent_dir)}
        cmd = [self.python, self.script, "--excel", str(artifact_path)]
        logger.debug("Running agent: %s (cwd=%s)", " ".join(cmd), self.agent_dir)

        try:
            result = subprocess.run(
                cmd,
                cwd=self.agent_dir,
                env=env,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise AnalysisError(f"Agent process timed out after {self.timeout}s") from e
        except OSError as e:
            raise AnalysisError(f"Could not start agent process: {e}") from e

        if result.returncode != 0:
            logger.error("Agent process error: %s", result.stderr)
            raise AnalysisError(f"Agent process exited with code {result.returncode}\nError: {result.stderr}")

        return self._read_latest_report()

    def _read_latest_report(self) -> str:
        """Return the content of the newest report (report names sort by timestamp)."""
        if not self.reports_dir.is_dir():
            raise AnalysisError("No report file was generated")
        try:
            reports = sorted((p for p in self.reports_dir.iterdir() if p.suffix == ".json"), reverse=True)
        except OSError as e:
            raise AnalysisError(f"Could not list agent reports in {self.reports_dir}: {e}") from e
        if not reports:
            raise AnalysisError("No report file was generated")
        logger.debug("Reading agent report %s", reports[0])
        try:
            return reports[0].read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise AnalysisError(f"Could not read agent report {reports[0].name}: {e}") from e
