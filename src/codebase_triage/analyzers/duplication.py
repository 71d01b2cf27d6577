"""Cross-file duplicate block detection.

Every file is cut into overlapping windows of ``duplication_window`` raw
lines. Each window is normalized (comments of the file's language removed,
whitespace collapsed, empty lines dropped) and keyed by the SHA-256 of the
normalized text. Windows with at least ``duplication_min_lines`` logical
lines that occur at two or more locations are duplicates.

This is exact matching after normalization, not token-level clone
detection: renamed identifiers defeat it.
"""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..cancellation import CancellationToken
from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..exceptions import FileAccessError
from ..file_ops import display_path, read_source
from ..models import CodeSmell, Severity, SmellType, SourceFile
from ..scanning.languages import LanguageSpec, get_language

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def _block_comment_pattern(language: Optional[LanguageSpec]) -> Optional[re.Pattern[str]]:
    if language is None or language.block_comment is None:
        return None
    start, end = language.block_comment
    return re.compile(re.escape(start) + r".*?" + re.escape(end), re.DOTALL)


_QUOTES = "\"'`"


def strip_line_comment(line: str, prefixes: tuple[str, ...]) -> str:
    """Cut ``line`` at the first comment marker outside a quoted string."""
    quote: Optional[str] = None
    i = 0
    while i < len(line):
        char = line[i]
        if quote is not None:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in _QUOTES:
            quote = char
        elif line.startswith(prefixes, i):
            return line[:i]
        i += 1
    return line


def normalize_block(lines: list[str], language: Optional[LanguageSpec]) -> list[str]:
    """Logical lines of a window: comments removed, whitespace collapsed."""
    text = "\n".join(lines)
    pattern = _block_comment_pattern(language)
    if pattern is not None:
        # Keep the newlines a comment spanned so line structure survives
        text = pattern.sub(lambda m: "\n" * m.group(0).count("\n"), text)

    prefixes = language.line_comment if language else ()
    result: list[str] = []
    for line in text.split("\n"):
        if prefixes:
            line = strip_line_comment(line, prefixes)
        collapsed = _WHITESPACE.sub(" ", line).strip()
        if collapsed:
            result.append(collapsed)
    return result


def window_digest(logical_lines: list[str]) -> str:
    return hashlib.sha256("\n".join(logical_lines).encode("utf-8")).hexdigest()


@dataclass
class _Group:
    line_count: int
    locations: list[tuple[str, int]] = field(default_factory=list)


def duplication_severity(line_count: int, occurrences: int, thresholds: ThresholdConfig) -> Severity:
    score = line_count * occurrences
    if score > thresholds.duplication_high:
        return Severity.HIGH
    if score > thresholds.duplication_medium:
        return Severity.MEDIUM
    return Severity.LOW


def detect_duplication(
    files: list[Path],
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
    token: Optional[CancellationToken] = None,
    root_dir: Optional[Path] = None,
    max_file_size_bytes: Optional[int] = None,
) -> list[CodeSmell]:
    """One ``duplication`` smell per occurrence of every repeated window.

    Each smell lists the other locations of the same block in its metadata.
    Unreadable files are skipped.
    """
    window = thresholds.duplication_window
    groups: dict[str, _Group] = {}

    for path in files:
        try:
            content = read_source(path, token=token, max_bytes=max_file_size_bytes)
        except FileAccessError as e:
            logger.debug(f"Skipping {path} for duplication: {e}")
            continue

        language = get_language(path)
        source = SourceFile(display_path(path, root_dir), content)
        lines = source.lines

        for start in range(len(lines) - window + 1):
            logical = normalize_block(lines[start : start + window], language)
            if len(logical) < thresholds.duplication_min_lines:
                continue
            group = groups.setdefault(window_digest(logical), _Group(len(logical)))
            group.locations.append((source.path, start + 1))

    smells: list[CodeSmell] = []
    for group in groups.values():
        occurrences = len(group.locations)
        if occurrences < 2:
            continue
        severity = duplication_severity(group.line_count, occurrences, thresholds)
        for index, (file, line) in enumerate(group.locations):
            others = [
                {"file": other_file, "line": other_line}
                for other_index, (other_file, other_line) in enumerate(group.locations)
                if other_index != index
            ]
            smells.append(
                CodeSmell(
                    type=SmellType.DUPLICATION,
                    severity=severity,
                    file=file,
                    line=line,
                    description=(
                        f"Duplicate code block ({group.line_count} lines) "
                        f"found in {len(others)} other location(s)"
                    ),
                    metadata={
                        "line_count": group.line_count,
                        "duplicate_count": occurrences,
                        "other_locations": others,
                    },
                )
            )
    return smells
