"""History CLI command -- list stored analyses."""

import json
from pathlib import Path
from typing import Optional

import typer

from ..persistence import TriageDB
from ..persistence.database import DB_DIRNAME, DB_FILENAME
from . import app
from ._common import console


@app.command()
def history(
    path: Path = typer.Argument(
        Path("."),
        help="Project root whose database to read",
        file_okay=False,
        dir_okay=True,
    ),
    db: Optional[Path] = typer.Option(
        None,
        "--db",
        help="SQLite database to read (default: PATH/.codebase-triage/triage.db)",
    ),
    limit: int = typer.Option(
        20,
        "--limit",
        "-n",
        help="Maximum number of analyses to list",
        min=1,
        max=1000,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    List past analysis runs and the status of their projects.

    [bold cyan]Examples:[/bold cyan]

      codebase-triage history ./legacy-app

      codebase-triage history --db triage.db --json
    """
    db_path = db or (path.resolve() / DB_DIRNAME / DB_FILENAME)

    if not db_path.exists():
        console.print(
            "[yellow]No history found.[/yellow] "
            "Run [bold]codebase-triage analyze[/bold] first."
        )
        raise typer.Exit(0)

    with TriageDB(db_path) as store:
        projects = {p.id: p for p in store.list_projects()}
        analyses = store.list_analyses()[:limit]

    if not analyses:
        console.print("[yellow]No analyses recorded yet.[/yellow]")
        raise typer.Exit(0)

    rows = [
        {
            "id": a.id,
            "project_id": a.project_id,
            "project": projects[a.project_id].name if a.project_id in projects else "-",
            "project_status": (
                projects[a.project_id].status.value if a.project_id in projects else "-"
            ),
            "report_status": a.status,
            "created_at": a.created_at,
        }
        for a in analyses
    ]

    if json_output:
        print(json.dumps(rows, indent=2))
    else:
        _output_rich(rows)


def _output_rich(rows):
    """Human-readable Rich table output."""
    from rich.table import Table

    table = Table(title="Analysis History", show_lines=False, pad_edge=True)
    table.add_column("ID", style="bold", justify="right")
    table.add_column("Project", style="cyan")
    table.add_column("Report", style="green")
    table.add_column("Project status")
    table.add_column("Created", style="dim")

    for row in rows:
        ts = row["created_at"].replace("T", " ")
        if "." in ts:
            ts = ts[: ts.index(".")]
        table.add_row(
            str(row["id"]),
            row["project"],
            row["report_status"],
            row["project_status"],
            ts,
        )

    console.print()
    console.print(table)
