"""AnalysisOrchestrator: runs one analysis of a working directory.

Stage order:
    1. file discovery            (fatal on failure or zero source files)
    2. language detection        (degrades to an empty distribution)
    3. dependency analysis       (degrades to no dependencies/frameworks)
    4. metrics calculation       (degrades to zeroed metrics)
    5. code smell detection      (degrades to no issues)
    6. report generation + save  (fatal on failure)

The whole run shares one CancellationToken carrying the timeout deadline.
Analyzers check it before every file read, so a timeout surfaces as an
AnalysisTimeoutError from whichever stage is running. Any fatal error
persists a partial report, marks the project failed and is re-raised after
the working directory has been removed.
"""

from __future__ import annotations

import logging
import shutil
import time
from collections.abc import Callable
from pathlib import Path
from typing import Optional, TypeVar

from ..analyzers.code_smell_detector import CodeSmellDetector
from ..analyzers.dependency_analyzer import DependencyAnalyzer
from ..analyzers.language_detector import LanguageDetector
from ..analyzers.metrics_calculator import MetricsCalculator
from ..cancellation import CancellationToken
from ..config import TriageConfig
from ..exceptions import NoSourceFilesError, OperationCancelledError, WorkspaceCleanupError
from ..models import (
    AnalysisData,
    AnalysisReport,
    CodeMetrics,
    DependencyReport,
    LanguageDistribution,
    ProjectStatus,
    utcnow,
)
from ..scanning.scanner import list_source_files
from ..scanning.syntax_extractor import SyntaxExtractor
from .report_generator import ReportGenerator
from .stores import AnalysisStore, ProjectStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AnalysisOrchestrator:
    """Sequences the analysis stages for a project.

    Holds only its collaborators and configuration; concurrent runs on one
    instance share no mutable state.
    """

    def __init__(
        self,
        project_store: ProjectStore,
        analysis_store: AnalysisStore,
        config: Optional[TriageConfig] = None,
        *,
        language_detector: Optional[LanguageDetector] = None,
        dependency_analyzer: Optional[DependencyAnalyzer] = None,
        metrics_calculator: Optional[MetricsCalculator] = None,
        smell_detector: Optional[CodeSmellDetector] = None,
        report_generator: Optional[ReportGenerator] = None,
    ) -> None:
        self.config = config or TriageConfig()
        self.project_store = project_store

        extractor = SyntaxExtractor(max_file_size_bytes=self.config.max_file_size_bytes)
        self.language_detector = language_detector or LanguageDetector(self.config)
        self.dependency_analyzer = dependency_analyzer or DependencyAnalyzer(self.config)
        self.metrics_calculator = metrics_calculator or MetricsCalculator(self.config, extractor)
        self.smell_detector = smell_detector or CodeSmellDetector(self.config, extractor)
        self.report_generator = report_generator or ReportGenerator(analysis_store)

    def run_analysis(
        self,
        project_id: str,
        working_directory: str | Path,
        token: Optional[CancellationToken] = None,
    ) -> AnalysisReport:
        """Analyze ``working_directory`` and persist the report for ``project_id``.

        Args:
            project_id: Project whose status and report are updated
            working_directory: Root of the source tree; removed afterwards
                when ``cleanup_workspace`` is enabled
            token: Cancellation token; defaults to one carrying the
                configured timeout

        Returns:
            The completed report as persisted

        Raises:
            TriageError: The fatal error, after a partial report has been
                saved, the project marked failed and the workspace removed
        """
        working_directory = Path(working_directory)
        token = token or CancellationToken(self.config.timeout_seconds)
        started = time.monotonic()

        logger.info(f"Starting analysis of project {project_id} in {working_directory}")

        try:
            self.update_status(project_id, ProjectStatus.ANALYZING)
            report = self._run_pipeline(project_id, working_directory, token)
            self.update_status(project_id, ProjectStatus.COMPLETED)
            logger.info(
                f"Analysis of project {project_id} completed in {time.monotonic() - started:.2f}s"
            )
            return report
        except Exception as e:
            self._handle_error(project_id, e)
            raise
        finally:
            if self.config.cleanup_workspace:
                try:
                    self.cleanup_workspace(working_directory)
                except WorkspaceCleanupError as e:
                    logger.warning(f"Project {project_id}: {e}")

    def update_status(self, project_id: str, status: ProjectStatus) -> None:
        self.project_store.update_status(project_id, status)
        logger.debug(f"Project {project_id} status -> {status.value}")

    def cleanup_workspace(self, working_directory: Path) -> None:
        """Remove the working directory recursively; a missing one is fine.

        Raises:
            WorkspaceCleanupError: If removal fails
        """
        if not working_directory.exists():
            return
        try:
            shutil.rmtree(working_directory)
        except OSError as e:
            raise WorkspaceCleanupError(working_directory, str(e)) from e

    # ── Pipeline ────────────────────────────────────────────────────

    def _run_pipeline(
        self, project_id: str, working_directory: Path, token: CancellationToken
    ) -> AnalysisReport:
        start_time = utcnow()
        data = AnalysisData()

        try:
            logger.debug(f"Project {project_id}: stage file_listing")
            files = list_source_files(working_directory, self.config, token)
            if not files:
                raise NoSourceFilesError(working_directory)
            logger.info(f"Project {project_id}: {len(files)} source files")

            data.languages = self._stage(
                "language_detection",
                project_id,
                token,
                lambda: self.language_detector.detect_languages(files, token),
                LanguageDistribution(),
            )
            logger.info(f"Project {project_id}: {len(data.languages)} languages detected")

            dependency_report = self._stage(
                "dependency_analysis",
                project_id,
                token,
                lambda: self.dependency_analyzer.analyze_dependencies(working_directory, token),
                DependencyReport(),
            )
            data.dependencies = dependency_report.dependencies
            data.frameworks = dependency_report.frameworks
            logger.info(
                f"Project {project_id}: {len(data.dependencies)} dependencies, "
                f"{len(data.frameworks)} frameworks"
            )

            data.metrics = self._stage(
                "metrics_calculation",
                project_id,
                token,
                lambda: self.metrics_calculator.calculate_metrics(files, token),
                CodeMetrics(),
            )
            logger.info(
                f"Project {project_id}: {data.metrics.total_lines} lines, "
                f"average complexity {data.metrics.average_complexity:.2f}"
            )

            data.issues = tuple(
                self._stage(
                    "code_smell_detection",
                    project_id,
                    token,
                    lambda: self.smell_detector.detect_smells(files, token, working_directory),
                    [],
                )
            )
            logger.info(f"Project {project_id}: {len(data.issues)} code smells")

            token.raise_if_cancelled()
            logger.debug(f"Project {project_id}: stage report_generation")
            report = self.report_generator.generate_report(data, start_time)
            return self.report_generator.save_report(project_id, report)

        except Exception as e:
            logger.warning(f"Project {project_id}: saving partial report after error: {e}")
            partial = self.report_generator.generate_partial_report(data, e, start_time)
            try:
                self.report_generator.save_report(project_id, partial)
            except Exception as save_error:
                logger.error(
                    f"Project {project_id}: partial report could not be saved: {save_error}",
                    exc_info=True,
                )
            raise

    def _stage(
        self,
        name: str,
        project_id: str,
        token: CancellationToken,
        func: Callable[[], T],
        default: T,
    ) -> T:
        """Run one analyzer stage; failures degrade to ``default``.

        Cancellation is never absorbed.
        """
        token.raise_if_cancelled()
        logger.debug(f"Project {project_id}: stage {name}")
        try:
            return func()
        except OperationCancelledError:
            raise
        except Exception as e:
            logger.error(f"Project {project_id}: stage {name} failed: {e}", exc_info=True)
            return default

    def _handle_error(self, project_id: str, error: Exception) -> None:
        logger.error(f"Analysis of project {project_id} failed: {error}")
        try:
            self.update_status(project_id, ProjectStatus.FAILED)
        except Exception as status_error:
            logger.error(f"Project {project_id}: could not mark failed: {status_error}")
