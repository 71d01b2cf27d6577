"""CLI entry point: registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="codebase-triage",
    help="Codebase Triage - legacy codebase analysis pipeline",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"codebase-triage {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Analyze a source tree and report languages, dependencies, metrics and code smells."""


# Import subcommands to register them
from .analyze import analyze as _analyze  # noqa: F401, E402
from .history import history as _history  # noqa: F401, E402
