"""Tests for ReportGenerator and the in-memory store."""

from datetime import timedelta

import pytest

from codebase_triage.exceptions import (
    InvalidStatusTransitionError,
    NoSourceFilesError,
    ReportPersistenceError,
)
from codebase_triage.models import (
    AnalysisData,
    CodeMetrics,
    LanguageDistribution,
    LanguageStat,
    ProjectStatus,
    ReportStatus,
    utcnow,
)
from codebase_triage.pipeline import ANALYZER_AGENT, MemoryStore, ReportGenerator
from codebase_triage.pipeline.stores import AnalysisStore, ProjectStore


class ExplodingStore(MemoryStore):
    def save(self, project_id, agent_type, report):
        raise RuntimeError("connection reset")


@pytest.fixture
def generator(store):
    return ReportGenerator(store)


class TestGenerateReport:
    def test_defaults_for_missing_fields(self, generator):
        report = generator.generate_report(AnalysisData())
        assert report.status is ReportStatus.COMPLETED
        assert report.languages == LanguageDistribution()
        assert report.frameworks == ()
        assert report.dependencies == ()
        assert report.metrics == CodeMetrics()
        assert report.issues == ()
        assert report.error is None
        assert report.start_time == report.end_time

    def test_keeps_collected_data(self, generator):
        started = utcnow() - timedelta(seconds=5)
        languages = LanguageDistribution((LanguageStat("Python", 10, 100.0),))
        report = generator.generate_report(AnalysisData(languages=languages), started)
        assert report.languages is languages
        assert report.start_time == started
        assert report.end_time > started

    def test_partial_uses_error_message(self, generator, tmp_path):
        report = generator.generate_partial_report(AnalysisData(), NoSourceFilesError(tmp_path))
        assert report.status is ReportStatus.PARTIAL
        assert report.error == "No source files found in the codebase"

    def test_partial_from_plain_exception(self, generator):
        assert generator.generate_partial_report(AnalysisData(), KeyError("x")).error == "'x'"
        assert generator.generate_partial_report(AnalysisData(), "stopped").error == "stopped"


class TestSaveReport:
    def test_stamps_project_id(self, generator, store):
        saved = generator.save_report("p1", generator.generate_report(AnalysisData()))
        assert saved.project_id == "p1"
        assert store.reports["p1"] == [(ANALYZER_AGENT, saved)]

    def test_store_errors_are_wrapped(self):
        generator = ReportGenerator(ExplodingStore())
        with pytest.raises(ReportPersistenceError) as exc_info:
            generator.save_report("p9", generator.generate_report(AnalysisData()))
        assert exc_info.value.reason == "connection reset"


class TestMemoryStore:
    def test_satisfies_both_contracts(self, store):
        assert isinstance(store, ProjectStore)
        assert isinstance(store, AnalysisStore)

    def test_lifecycle(self, store):
        store.update_status("p1", ProjectStatus.ANALYZING)
        store.update_status("p1", ProjectStatus.COMPLETED)
        assert store.status("p1") is ProjectStatus.COMPLETED

    @pytest.mark.parametrize(
        "path",
        [
            [ProjectStatus.COMPLETED],
            [ProjectStatus.ANALYZING, ProjectStatus.PENDING],
            [ProjectStatus.FAILED, ProjectStatus.ANALYZING],
        ],
    )
    def test_illegal_transitions(self, store, path):
        *allowed, illegal = path
        for status in allowed:
            store.update_status("p1", status)
        with pytest.raises(InvalidStatusTransitionError):
            store.update_status("p1", illegal)

    def test_terminal_states(self):
        assert ProjectStatus.COMPLETED.is_terminal
        assert ProjectStatus.FAILED.is_terminal
        assert not ProjectStatus.ANALYZING.is_terminal
