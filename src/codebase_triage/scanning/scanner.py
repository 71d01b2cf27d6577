"""File discovery for an analysis run."""

import logging
from pathlib import Path
from typing import Optional

from ..cancellation import CancellationToken, checkpoint
from ..config import TriageConfig
from ..file_ops import walk_files
from .languages import SKIP_DIRS, is_source_file

logger = logging.getLogger(__name__)


def list_files(
    root_dir: Path,
    config: Optional[TriageConfig] = None,
    token: Optional[CancellationToken] = None,
) -> list[Path]:
    """Every regular file under ``root_dir`` outside skipped directories."""
    config = config or TriageConfig()
    files: list[Path] = []
    for path in walk_files(root_dir, SKIP_DIRS, follow_symlinks=config.follow_symlinks):
        checkpoint(token)
        files.append(path)
    return files


def filter_source_files(files: list[Path], max_file_size_bytes: Optional[int] = None) -> list[Path]:
    """Keep files with a recognized source extension and acceptable size."""
    result: list[Path] = []
    for path in files:
        if not is_source_file(path):
            continue
        if max_file_size_bytes is not None:
            try:
                size = path.stat().st_size
            except OSError as e:
                logger.debug(f"Cannot stat {path}: {e}")
                continue
            if size > max_file_size_bytes:
                logger.debug(f"Skipping {path}: {size} bytes exceeds limit")
                continue
        result.append(path)
    return result


def list_source_files(
    root_dir: Path,
    config: Optional[TriageConfig] = None,
    token: Optional[CancellationToken] = None,
) -> list[Path]:
    """Discover the source files an analysis run should look at."""
    config = config or TriageConfig()
    return filter_source_files(
        list_files(root_dir, config, token), max_file_size_bytes=config.max_file_size_bytes
    )
