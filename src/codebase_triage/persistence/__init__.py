"""SQLite persistence for projects and analysis reports."""

from .database import AnalysisRecord, ProjectRecord, TriageDB

__all__ = ["AnalysisRecord", "ProjectRecord", "TriageDB"]
