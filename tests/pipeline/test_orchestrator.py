"""Tests for AnalysisOrchestrator."""

import pytest

from codebase_triage.analyzers import LanguageDetector, MetricsCalculator
from codebase_triage.cancellation import CancellationToken
from codebase_triage.config import TriageConfig
from codebase_triage.exceptions import (
    AnalysisCancelledError,
    AnalysisTimeoutError,
    InvalidStatusTransitionError,
    NoSourceFilesError,
    ReportPersistenceError,
)
from codebase_triage.models import LanguageDistribution, ProjectStatus, ReportStatus, SmellType
from codebase_triage.pipeline import AnalysisOrchestrator, MemoryStore

APP_JS = """const express = require('express');

function handler(req, res) {
  if (req.user && req.user.admin) {
    res.send('admin');
  } else {
    res.send('user');
  }
}

module.exports = handler;
"""


class BrokenLanguageDetector(LanguageDetector):
    def detect_languages(self, files, token=None):
        raise RuntimeError("detector exploded")


class BrokenMetricsCalculator(MetricsCalculator):
    def calculate_metrics(self, files, token=None):
        raise ValueError("bad metrics")


class RejectingStore(MemoryStore):
    def save(self, project_id, agent_type, report):
        raise OSError("disk full")


class TestSuccessfulRun:
    def test_small_javascript_project(self, store, config, make_tree):
        root = make_tree(
            {
                "app.js": APP_JS,
                "package.json": '{"dependencies": {"express": "4.18.0"}}',
                "requirements.txt": b"\xff\xfe\x00broken",
            }
        )
        report = AnalysisOrchestrator(store, store, config).run_analysis("p1", root)

        assert report.status is ReportStatus.COMPLETED
        assert report.project_id == "p1"
        assert report.error is None
        assert report.languages.names() == ["JavaScript"]
        assert report.languages.languages[0].percentage == pytest.approx(100.0)
        assert [d.name for d in report.dependencies] == ["express"]
        assert [f.name for f in report.frameworks] == ["Express"]
        assert report.metrics.total_files == 1
        assert report.metrics.total_lines == 11
        # handler: if + &&
        assert report.metrics.average_complexity == pytest.approx(3.0)
        assert report.start_time <= report.end_time

        assert store.statuses["p1"] == [
            ProjectStatus.PENDING,
            ProjectStatus.ANALYZING,
            ProjectStatus.COMPLETED,
        ]
        assert store.latest_report("p1") == report
        assert not root.exists()

    def test_smell_paths_are_relative(self, store, config, make_tree):
        body = "".join(f"  const v{i} = {i};\n" for i in range(60))
        root = make_tree({"lib/big.js": f"function big() {{\n{body}}}\n"})
        report = AnalysisOrchestrator(store, store, config).run_analysis("p1", root)

        (smell,) = report.issues
        assert smell.type is SmellType.LONG_FUNCTION
        assert smell.file == "lib/big.js"

    def test_workspace_kept_when_cleanup_disabled(self, store, make_tree):
        root = make_tree({"main.py": "print('hi')\n"})
        config = TriageConfig(workers=1, cleanup_workspace=False)
        AnalysisOrchestrator(store, store, config).run_analysis("p1", root)
        assert root.exists()


class TestFatalErrors:
    def test_no_source_files(self, store, config, make_tree):
        root = make_tree({"README.md": "# Legacy app\n"})
        with pytest.raises(NoSourceFilesError):
            AnalysisOrchestrator(store, store, config).run_analysis("p1", root)

        assert store.status("p1") is ProjectStatus.FAILED
        partial = store.latest_report("p1")
        assert partial.status is ReportStatus.PARTIAL
        assert partial.error == "No source files found in the codebase"
        assert partial.languages == LanguageDistribution()
        assert partial.issues == ()
        assert not root.exists()

    def test_timeout(self, store, make_tree):
        root = make_tree({"app.js": APP_JS, "util.py": "x = 1\n"})
        config = TriageConfig(workers=1, timeout_seconds=1e-9)
        with pytest.raises(AnalysisTimeoutError):
            AnalysisOrchestrator(store, store, config).run_analysis("p1", root)

        assert store.status("p1") is ProjectStatus.FAILED
        partial = store.latest_report("p1")
        assert partial.status is ReportStatus.PARTIAL
        assert "timeout" in partial.error.lower()
        assert not root.exists()

    def test_cancellation_is_not_degraded(self, store, config, make_tree):
        root = make_tree({"app.js": APP_JS})
        token = CancellationToken()
        token.cancel("user aborted")
        with pytest.raises(AnalysisCancelledError):
            AnalysisOrchestrator(store, store, config).run_analysis("p1", root, token)
        assert store.latest_report("p1").error == "user aborted"

    def test_report_store_failure(self, config, make_tree):
        store = RejectingStore()
        store.create_project("p1")
        root = make_tree({"app.js": APP_JS})
        with pytest.raises(ReportPersistenceError):
            AnalysisOrchestrator(store, store, config).run_analysis("p1", root)
        assert store.status("p1") is ProjectStatus.FAILED
        assert not root.exists()

    def test_finished_project_cannot_rerun(self, store, config, make_tree):
        first = make_tree({"a.py": "x = 1\n"}, name="first")
        second = make_tree({"a.py": "x = 1\n"}, name="second")
        orchestrator = AnalysisOrchestrator(store, store, config)
        orchestrator.run_analysis("p1", first)

        with pytest.raises(InvalidStatusTransitionError):
            orchestrator.run_analysis("p1", second)
        assert store.status("p1") is ProjectStatus.COMPLETED
        assert not second.exists()


class TestDegradedStages:
    def test_failed_stage_uses_default(self, store, config, make_tree):
        root = make_tree(
            {"app.js": APP_JS, "package.json": '{"dependencies": {"express": "4.18.0"}}'}
        )
        orchestrator = AnalysisOrchestrator(
            store,
            store,
            config,
            language_detector=BrokenLanguageDetector(config),
            metrics_calculator=BrokenMetricsCalculator(config),
        )
        report = orchestrator.run_analysis("p1", root)

        assert report.status is ReportStatus.COMPLETED
        assert report.languages == LanguageDistribution()
        assert report.metrics.total_files == 0
        assert report.metrics.maintainability_index == 0.0
        assert [d.name for d in report.dependencies] == ["express"]
        assert store.status("p1") is ProjectStatus.COMPLETED


class TestCleanup:
    def test_missing_directory_is_fine(self, store, config, tmp_path):
        AnalysisOrchestrator(store, store, config).cleanup_workspace(tmp_path / "never-created")
