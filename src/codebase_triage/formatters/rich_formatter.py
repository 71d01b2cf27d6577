"""Rich terminal formatter for Codebase Triage."""

from collections import Counter
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..models import AnalysisReport, ReportStatus, Severity
from .base import BaseFormatter

# Issues shown in the table; the rest are summarized by count
MAX_ISSUES_SHOWN = 25

_SEVERITY_ORDER = {Severity.HIGH: 0, Severity.MEDIUM: 1, Severity.LOW: 2}


def _severity_label(severity: Severity) -> str:
    if severity is Severity.HIGH:
        return "[red bold]high[/red bold]"
    elif severity is Severity.MEDIUM:
        return "[yellow]medium[/yellow]"
    else:
        return "[green]low[/green]"


def _maintainability_label(mi: float) -> str:
    if mi >= 85:
        return f"[green]{mi:.1f}[/green]"
    elif mi >= 65:
        return f"[yellow]{mi:.1f}[/yellow]"
    else:
        return f"[red]{mi:.1f}[/red]"


class RichFormatter(BaseFormatter):
    """Rich terminal output: summary panel, languages, frameworks, issues."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def render(self, report: AnalysisReport) -> None:
        self._print_summary(report)
        self._print_languages(report)
        self._print_frameworks(report)
        self._print_issues(report)

    def format(self, report: AnalysisReport) -> str:
        with self.console.capture() as capture:
            self.render(report)
        return capture.get()

    def _print_summary(self, report: AnalysisReport) -> None:
        m = report.metrics
        duration = (report.end_time - report.start_time).total_seconds()
        status_color = "green" if report.status is ReportStatus.COMPLETED else "red"

        lines = [
            f"Status: [{status_color}]{report.status.value}[/{status_color}]"
            f"  ({duration:.2f}s)",
            f"Files: {m.total_files}   Lines: {m.total_lines} "
            f"(code {m.code_lines}, comments {m.comment_lines}, blank {m.blank_lines})",
            f"Average complexity: {m.average_complexity:.2f}   "
            f"Maintainability: {_maintainability_label(m.maintainability_index)}",
            f"Dependencies: {len(report.dependencies)}   Issues: {len(report.issues)}",
        ]
        if report.error:
            lines.append(f"[red]Error:[/red] {report.error}")

        self.console.print(
            Panel("\n".join(lines), title="[bold cyan]Codebase Triage[/bold cyan]", expand=False)
        )

    def _print_languages(self, report: AnalysisReport) -> None:
        if not report.languages.languages:
            return
        table = Table(title="Languages", show_lines=False)
        table.add_column("Language", style="bold")
        table.add_column("Lines", justify="right")
        table.add_column("Share", justify="right", style="cyan")
        for lang in report.languages.languages:
            table.add_row(lang.name, str(lang.line_count), f"{lang.percentage:.1f}%")
        self.console.print(table)

    def _print_frameworks(self, report: AnalysisReport) -> None:
        if not report.frameworks:
            return
        table = Table(title="Frameworks", show_lines=False)
        table.add_column("Framework", style="bold")
        table.add_column("Version")
        table.add_column("Confidence", justify="right")
        for fw in report.frameworks:
            table.add_row(fw.name, fw.version or "-", f"{fw.confidence:.0%}")
        self.console.print(table)

    def _print_issues(self, report: AnalysisReport) -> None:
        if not report.issues:
            self.console.print("[green]No code smells detected.[/green]")
            return

        counts = Counter(issue.type.value for issue in report.issues)
        summary = ", ".join(f"{kind}: {count}" for kind, count in sorted(counts.items()))
        self.console.print(f"[bold]Code smells[/bold] ({summary})")

        ranked = sorted(report.issues, key=lambda i: (_SEVERITY_ORDER[i.severity], i.file, i.line))
        table = Table(show_lines=False)
        table.add_column("Severity")
        table.add_column("Type", style="magenta")
        table.add_column("Location", style="cyan")
        table.add_column("Description")
        for issue in ranked[:MAX_ISSUES_SHOWN]:
            table.add_row(
                _severity_label(issue.severity),
                issue.type.value,
                f"{issue.file}:{issue.line}",
                issue.description,
            )
        self.console.print(table)

        hidden = len(ranked) - MAX_ISSUES_SHOWN
        if hidden > 0:
            self.console.print(f"[dim]... and {hidden} more (use --json for the full list)[/dim]")
