"""Analyze command: runs the pipeline on a copy of a source tree."""

import shutil
import uuid
from contextlib import ExitStack
from pathlib import Path
from typing import Optional

import typer

from ..exceptions import ConfigurationError, InvalidPathError, TriageError
from ..formatters import JsonFormatter, RichFormatter
from ..logging_config import get_logger, setup_logging
from ..models import ProjectStatus
from ..pipeline import AnalysisOrchestrator, MemoryStore
from ..persistence import TriageDB
from . import app
from ._common import console, copy_to_workspace, resolve_config

logger = get_logger(__name__)


@app.command()
def analyze(
    path: Path = typer.Argument(
        ...,
        help="Source tree to analyze",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output the report as JSON",
    ),
    db: Optional[Path] = typer.Option(
        None,
        "--db",
        help="SQLite database for results (default: PATH/.codebase-triage/triage.db)",
    ),
    no_save: bool = typer.Option(
        False,
        "--no-save",
        help="Keep results in memory only",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML configuration file",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Analysis timeout in seconds",
        min=0.001,
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        help="Parallel workers for per-file work",
        min=1,
        max=32,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file"),
):
    """
    Analyze a source tree and print its triage report.

    The tree is copied to a temporary workspace first; the original is
    never modified. Results are stored in a SQLite database unless
    [bold]--no-save[/bold] is given.

    [bold cyan]Examples:[/bold cyan]

      codebase-triage analyze ./legacy-app

      codebase-triage analyze ./legacy-app --json --timeout 120
    """
    setup_logging(verbose=verbose, quiet=quiet, log_file=str(log_file) if log_file else None)

    try:
        settings = resolve_config(config, timeout, workers, verbose, quiet)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(2)

    root = path.resolve()

    with ExitStack() as stack:
        if no_save:
            store = MemoryStore()
            project_id = uuid.uuid4().hex
            store.create_project(project_id)
        else:
            store = stack.enter_context(TriageDB(db) if db else TriageDB.for_project(root))
            project_id = store.create_project(root.name, source_type="local", source_url=str(root))

        try:
            temp_root, working = copy_to_workspace(root)
        except InvalidPathError as e:
            store.update_status(project_id, ProjectStatus.FAILED)
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(2)
        stack.callback(shutil.rmtree, temp_root, ignore_errors=True)

        orchestrator = AnalysisOrchestrator(store, store, settings)
        try:
            report = orchestrator.run_analysis(project_id, working)
        except TriageError as e:
            console.print(f"[red]Analysis failed:[/red] {e.message}")
            logger.debug(f"Project {project_id} failed", exc_info=True)
            raise typer.Exit(1)

    if json_output:
        JsonFormatter().render(report)
    else:
        RichFormatter(console).render(report)
