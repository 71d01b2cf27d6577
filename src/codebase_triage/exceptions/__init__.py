"""Exception hierarchy for Codebase Triage."""

from .analysis import (
    AnalysisError,
    FileAccessError,
    ManifestParseError,
    ParsingError,
    UnsupportedLanguageError,
)
from .base import TriageError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)
from .pipeline import (
    AnalysisCancelledError,
    AnalysisTimeoutError,
    InvalidStatusTransitionError,
    NoSourceFilesError,
    OperationCancelledError,
    PipelineError,
    ReportPersistenceError,
    WorkspaceCleanupError,
)

__all__ = [
    "TriageError",
    "AnalysisError",
    "FileAccessError",
    "ParsingError",
    "ManifestParseError",
    "UnsupportedLanguageError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
    "PipelineError",
    "NoSourceFilesError",
    "OperationCancelledError",
    "AnalysisTimeoutError",
    "AnalysisCancelledError",
    "ReportPersistenceError",
    "InvalidStatusTransitionError",
    "WorkspaceCleanupError",
]
