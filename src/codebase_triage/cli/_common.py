"""Shared CLI helpers."""

import shutil
import tempfile
from pathlib import Path
from typing import Optional

from rich.console import Console

from ..analyzers.dependency_analyzer import MANIFEST_SKIP_DIRS
from ..config import TriageConfig, load_config
from ..exceptions import InvalidPathError
from ..persistence.database import DB_DIRNAME
from ..scanning.languages import SKIP_DIRS

console = Console()

# Skipped by both discovery and manifest search, so never worth copying
_COPY_IGNORE = sorted((SKIP_DIRS & MANIFEST_SKIP_DIRS) | {DB_DIRNAME})


def resolve_config(
    config: Optional[Path] = None,
    timeout: Optional[float] = None,
    workers: Optional[int] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> TriageConfig:
    """Build configuration from CLI options."""
    overrides = {}
    if timeout is not None:
        overrides["timeout_seconds"] = timeout
    if workers is not None:
        overrides["workers"] = workers
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    return load_config(config_file=config, **overrides)


def copy_to_workspace(source: Path) -> tuple[Path, Path]:
    """Copy ``source`` into a fresh temporary directory.

    The pipeline deletes its working directory when it finishes, so it is
    always pointed at a copy, never at the user's tree.

    Returns:
        (temporary root, working directory inside it)

    Raises:
        InvalidPathError: If the tree cannot be copied
    """
    temp_root = Path(tempfile.mkdtemp(prefix="codebase-triage-"))
    working = temp_root / (source.name or "project")
    try:
        shutil.copytree(source, working, symlinks=True, ignore=shutil.ignore_patterns(*_COPY_IGNORE))
    except OSError as e:
        shutil.rmtree(temp_root, ignore_errors=True)
        raise InvalidPathError(source, f"cannot copy to workspace: {e}")
    return temp_root, working
