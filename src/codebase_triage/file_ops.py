"""
Safe file operations for Codebase Triage.

Provides size-limited reads, pruned directory walks and an order-preserving
per-file worker pool. Every read passes through a cancellation checkpoint.
"""

import logging
import os
from collections.abc import Callable, Generator, Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, TypeVar

from .cancellation import CancellationToken, checkpoint
from .exceptions import FileAccessError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

# Default worker count: use CPU count, capped at 8 to avoid overwhelming I/O
DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)

# Below this many items the pool overhead is not worth it
PARALLEL_THRESHOLD = 10


def read_source(
    filepath: Path,
    token: Optional[CancellationToken] = None,
    max_bytes: Optional[int] = None,
    limit_chars: Optional[int] = None,
    encoding: str = "utf-8",
    errors: str = "replace",
) -> str:
    """
    Read a source file after a cancellation checkpoint.

    Args:
        filepath: File to read
        token: Cancellation token checked before the read
        max_bytes: Files larger than this are refused
        limit_chars: Read at most this many characters
        encoding: Text encoding
        errors: How to handle encoding errors

    Returns:
        File contents as string

    Raises:
        OperationCancelledError: If the token has fired
        FileAccessError: If the file cannot be read or is too large
    """
    checkpoint(token)

    filepath = Path(filepath)
    try:
        if max_bytes is not None and filepath.stat().st_size > max_bytes:
            raise FileAccessError(filepath, f"File exceeds {max_bytes} bytes")
        with open(filepath, encoding=encoding, errors=errors) as f:
            if limit_chars is not None:
                return f.read(limit_chars)
            return f.read()
    except UnicodeDecodeError as e:
        raise FileAccessError(filepath, f"Encoding error: {e}")
    except OSError as e:
        raise FileAccessError(filepath, f"OS error: {e}")


def walk_files(
    root_dir: Path,
    skip_dirs: Iterable[str] = (),
    follow_symlinks: bool = False,
    max_depth: Optional[int] = None,
) -> Generator[Path, None, None]:
    """
    Walk a directory tree, pruning skipped directory names.

    Args:
        root_dir: Directory to scan
        skip_dirs: Directory basenames never descended into
        follow_symlinks: Whether to follow symbolic links
        max_depth: Deepest directory level to descend to (root is 0)

    Yields:
        File paths in deterministic (sorted) order

    Raises:
        FileAccessError: If the root cannot be listed
    """
    root_dir = Path(root_dir)
    skip = frozenset(skip_dirs)

    if not root_dir.is_dir():
        raise FileAccessError(root_dir, "Not a directory")

    def _on_error(err: OSError) -> None:
        if Path(err.filename or "") == root_dir:
            raise FileAccessError(root_dir, f"Directory scan failed: {err}")
        logger.debug(f"Skipping unreadable directory {err.filename}: {err}")

    for dirpath, dirnames, filenames in os.walk(
        root_dir, onerror=_on_error, followlinks=follow_symlinks
    ):
        current = Path(dirpath)
        depth = len(current.relative_to(root_dir).parts)

        dirnames[:] = sorted(d for d in dirnames if d not in skip)
        if max_depth is not None and depth >= max_depth:
            dirnames[:] = []

        for name in sorted(filenames):
            path = current / name
            if path.is_symlink() and not follow_symlinks:
                continue
            yield path


def display_path(path: Path, root_dir: Optional[Path] = None) -> str:
    """``path`` relative to ``root_dir`` when it lies under it, else as given."""
    if root_dir is not None:
        try:
            return Path(path).relative_to(root_dir).as_posix()
        except ValueError:
            pass
    return str(path)


def map_files(
    func: Callable[[T], R],
    items: list[T],
    max_workers: Optional[int] = None,
) -> list[R]:
    """
    Apply ``func`` to every item, in parallel for larger batches.

    Results come back in input order whichever path runs, so callers see the
    same output sequential or parallel. The first exception raised by ``func``
    propagates.
    """
    if len(items) < PARALLEL_THRESHOLD or max_workers == 1:
        return [func(item) for item in items]

    with ThreadPoolExecutor(max_workers=max_workers or DEFAULT_WORKERS) as executor:
        return list(executor.map(func, items))
