"""Tests for report formatters."""

import json
from datetime import timedelta

from rich.console import Console

from codebase_triage.formatters import JsonFormatter, RichFormatter
from codebase_triage.formatters.rich_formatter import MAX_ISSUES_SHOWN
from codebase_triage.models import (
    AnalysisReport,
    CodeSmell,
    Framework,
    LanguageDistribution,
    LanguageStat,
    ReportStatus,
    Severity,
    SmellType,
    utcnow,
)


def _report(issue_count: int = 1, error=None) -> AnalysisReport:
    end = utcnow()
    issues = tuple(
        CodeSmell(
            SmellType.LONG_FUNCTION,
            Severity.HIGH if i == 0 else Severity.LOW,
            f"src/f{i}.py",
            i + 1,
            f"Function 'f{i}' is 120 lines long (threshold: 50)",
            {"function_name": f"f{i}", "line_count": 120},
        )
        for i in range(issue_count)
    )
    return AnalysisReport(
        project_id="p1",
        status=ReportStatus.PARTIAL if error else ReportStatus.COMPLETED,
        start_time=end - timedelta(seconds=1),
        end_time=end,
        languages=LanguageDistribution((LanguageStat("Python", 300, 100.0),)),
        frameworks=(Framework("Flask", None, 0.8),),
        issues=issues,
        error=error,
    )


class TestJsonFormatter:
    def test_output_is_report_dict(self):
        report = _report()
        data = json.loads(JsonFormatter().format(report))
        assert data == json.loads(json.dumps(report.to_dict()))
        assert data["issues"][0]["type"] == "long_function"
        assert data["frameworks"] == [{"name": "Flask", "version": None, "confidence": 0.8}]


class TestRichFormatter:
    def _format(self, report) -> str:
        return RichFormatter(Console(width=160, force_terminal=False)).format(report)

    def test_sections(self):
        text = self._format(_report())
        assert "Codebase Triage" in text
        assert "Python" in text
        assert "Flask" in text
        assert "src/f0.py:1" in text

    def test_issue_overflow_is_summarized(self):
        text = self._format(_report(issue_count=MAX_ISSUES_SHOWN + 5))
        assert "and 5 more" in text

    def test_error_is_shown(self):
        text = self._format(_report(error="Analysis timeout exceeded (600s)"))
        assert "partial" in text
        assert "Analysis timeout exceeded" in text

    def test_clean_report(self):
        assert "No code smells detected" in self._format(_report(issue_count=0))
