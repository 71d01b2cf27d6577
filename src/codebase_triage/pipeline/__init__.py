"""Analysis pipeline: orchestration, report assembly and store contracts."""

from .orchestrator import AnalysisOrchestrator
from .report_generator import ReportGenerator
from .stores import ANALYZER_AGENT, AnalysisStore, MemoryStore, ProjectStore

__all__ = [
    "ANALYZER_AGENT",
    "AnalysisOrchestrator",
    "AnalysisStore",
    "MemoryStore",
    "ProjectStore",
    "ReportGenerator",
]
