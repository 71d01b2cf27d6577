"""Assembles analyzer output into an AnalysisReport and persists it."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..exceptions import ReportPersistenceError, TriageError
from ..models import (
    AnalysisData,
    AnalysisReport,
    CodeMetrics,
    LanguageDistribution,
    ReportStatus,
    utcnow,
)
from .stores import ANALYZER_AGENT, AnalysisStore

logger = logging.getLogger(__name__)

# Stamped with the real id by save_report
UNASSIGNED_PROJECT = ""


class ReportGenerator:
    """Builds completed and partial reports and hands them to the store."""

    def __init__(self, store: AnalysisStore) -> None:
        self.store = store

    def generate_report(
        self, data: AnalysisData, start_time: Optional[datetime] = None
    ) -> AnalysisReport:
        """A ``completed`` report from the collected analyzer output."""
        return self._build(data, ReportStatus.COMPLETED, start_time, error=None)

    def generate_partial_report(
        self,
        data: AnalysisData,
        error: BaseException | str,
        start_time: Optional[datetime] = None,
    ) -> AnalysisReport:
        """A ``partial`` report: whatever succeeded, defaults for the rest."""
        message = error if isinstance(error, str) else _error_message(error)
        return self._build(data, ReportStatus.PARTIAL, start_time, error=message)

    def save_report(self, project_id: str, report: AnalysisReport) -> AnalysisReport:
        """Stamp ``project_id`` on the report and store it.

        Returns:
            The stamped report as stored

        Raises:
            ReportPersistenceError: If the store rejects the report
        """
        stamped = replace(report, project_id=project_id)
        try:
            self.store.save(project_id, ANALYZER_AGENT, stamped)
        except TriageError:
            raise
        except Exception as e:
            raise ReportPersistenceError(project_id, str(e)) from e
        logger.debug(f"Saved {stamped.status.value} report for project {project_id}")
        return stamped

    def _build(
        self,
        data: AnalysisData,
        status: ReportStatus,
        start_time: Optional[datetime],
        error: Optional[str],
    ) -> AnalysisReport:
        end_time = utcnow()
        return AnalysisReport(
            project_id=UNASSIGNED_PROJECT,
            status=status,
            start_time=start_time or end_time,
            end_time=end_time,
            languages=data.languages or LanguageDistribution(),
            frameworks=tuple(data.frameworks or ()),
            dependencies=tuple(data.dependencies or ()),
            metrics=data.metrics or CodeMetrics(),
            issues=tuple(data.issues or ()),
            error=error,
        )


def _error_message(error: BaseException) -> str:
    if isinstance(error, TriageError):
        return error.message
    return str(error) or type(error).__name__
