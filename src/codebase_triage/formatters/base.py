"""Base formatter interface for Codebase Triage output rendering."""

from abc import ABC, abstractmethod

from ..models import AnalysisReport


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def render(self, report: AnalysisReport) -> None:
        """Render a report to stderr/stdout as appropriate."""

    @abstractmethod
    def format(self, report: AnalysisReport) -> str:
        """Return formatted string representation of a report."""
