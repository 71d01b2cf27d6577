"""Codebase Triage - analysis pipeline for legacy codebase triage.

Produces a structured report for a source tree: language composition,
declared dependencies and frameworks, size/complexity/maintainability
metrics, and code smells.
"""

__version__ = "0.1.0"

from .config import ThresholdConfig, TriageConfig, load_config
from .models import AnalysisReport, ProjectStatus, ReportStatus
from .pipeline import AnalysisOrchestrator, MemoryStore, ReportGenerator

__all__ = [
    "__version__",
    "AnalysisOrchestrator",
    "AnalysisReport",
    "MemoryStore",
    "ProjectStatus",
    "ReportGenerator",
    "ReportStatus",
    "ThresholdConfig",
    "TriageConfig",
    "load_config",
]
