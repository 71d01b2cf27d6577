"""Pipeline exceptions: fatal run errors, cancellation, persistence."""

from pathlib import Path
from typing import Optional

from .base import TriageError


class PipelineError(TriageError):
    """Base class for errors that abort an analysis run."""

    pass


class NoSourceFilesError(PipelineError):
    """Raised when file discovery finds nothing to analyze."""

    def __init__(self, directory: Path):
        super().__init__(
            "No source files found in the codebase",
            details={"directory": str(directory)},
        )
        self.directory = directory


class OperationCancelledError(PipelineError):
    """Raised at a cancellation checkpoint once the run's token has fired."""

    pass


class AnalysisTimeoutError(OperationCancelledError):
    """Raised when the run exceeds its wall-clock budget."""

    def __init__(self, timeout_seconds: float):
        super().__init__(f"Analysis timeout exceeded ({timeout_seconds:g}s)")
        self.timeout_seconds = timeout_seconds


class AnalysisCancelledError(OperationCancelledError):
    """Raised when the run is cancelled explicitly."""

    def __init__(self, reason: str = "Analysis cancelled"):
        super().__init__(reason)
        self.reason = reason


class ReportPersistenceError(PipelineError):
    """Raised when the report store rejects a report."""

    def __init__(self, project_id: str, reason: str):
        super().__init__(
            f"Failed to persist report for project {project_id}",
            details={"project_id": project_id, "reason": reason},
        )
        self.project_id = project_id
        self.reason = reason


class InvalidStatusTransitionError(PipelineError):
    """Raised when a project status change violates the lifecycle."""

    def __init__(self, project_id: str, current: str, requested: str):
        super().__init__(
            f"Illegal status transition {current} -> {requested}",
            details={"project_id": project_id},
        )
        self.project_id = project_id
        self.current = current
        self.requested = requested


class WorkspaceCleanupError(PipelineError):
    """Raised when the working directory cannot be removed."""

    def __init__(self, directory: Path, reason: Optional[str] = None):
        super().__init__(
            f"Workspace cleanup failed: {directory}",
            details={"reason": reason} if reason else None,
        )
        self.directory = directory
        self.reason = reason
