"""Analysis backends: turn an uploaded artifact into scored project descriptors."""

from __future__ import annotations

from projreview_core.analyzers.agent import AgentAnalyzer
from projreview_core.analyzers.base import BaseAnalyzer, ProjectDescriptor
from projreview_core.analyzers.report import ReportAnalyzer

__all__ = ["AgentAnalyzer", "BaseAnalyzer", "ProjectDescriptor", "ReportAnalyzer", "get_analyzer"]


def get_analyzer(config: dict) -> BaseAnalyzer:
    kind = config.get("analyzer", "agent")
    if kind == "agent":
        return AgentAnalyzer(
            agent_dir=config.get("agent_dir", "agent"),
            script=config.get("agent_script", "run.py"),
            python=config.get("agent_python"),
            reports_dir=config.get("reports_dir", "reports"),
            timeout=config.get("analysis_timeout"),
        )
    if kind == "report":
        return ReportAnalyzer()
    raise ValueError(f"Unknown analyzer: {kind!r}. Choose 'agent' or 'report'.")
