"""Size, complexity and maintainability metrics.

LOC is counted for every file using the comment syntax from the language
table. Cyclomatic complexity is computed per function for files with a
tree-sitter grammar; other files only contribute to LOC.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..cancellation import CancellationToken
from ..config import TriageConfig
from ..exceptions import FileAccessError, ParsingError
from ..file_ops import map_files, read_source
from ..models import CodeMetrics, ComplexityMetrics, FunctionMetric, LOCCount, split_lines
from ..scanning.languages import LanguageSpec, get_language
from ..scanning.syntax_extractor import SyntaxExtractor

logger = logging.getLogger(__name__)


def count_lines(content: str, language: Optional[LanguageSpec]) -> LOCCount:
    """Classify each line as code, comment or blank.

    Block-comment state carries across lines. Totals always satisfy
    ``code + comments + blank == total``.
    """
    line_prefixes = language.line_comment if language else ()
    block = language.block_comment if language else None

    code = comments = blank = 0
    in_block = False
    lines = split_lines(content)

    for line in lines:
        stripped = line.strip()

        if not stripped:
            blank += 1
            continue

        if in_block:
            comments += 1
            if block and block[1] in stripped:
                in_block = False
            continue

        if block and stripped.startswith(block[0]):
            comments += 1
            in_block = block[1] not in stripped[len(block[0]) :]
            continue

        if line_prefixes and stripped.startswith(line_prefixes):
            comments += 1
            continue

        code += 1
        # A code line can still open a block comment that runs on
        if block:
            start = stripped.rfind(block[0])
            if start != -1 and block[1] not in stripped[start + len(block[0]) :]:
                in_block = True

    return LOCCount(total=len(lines), code=code, comments=comments, blank=blank)


def calculate_maintainability(average_complexity: float) -> float:
    """Simplified maintainability index in [0, 100].

    ``(171 - 5.2 * ln(avg + 1) - 0.23 * avg) / 171 * 100``, clamped. There is
    no Halstead volume or LOC term.
    """
    avg = max(0.0, average_complexity)
    raw = 171 - 5.2 * math.log(avg + 1) - 0.23 * avg
    return max(0.0, min(100.0, raw / 171 * 100))


@dataclass(frozen=True)
class FileMetrics:
    """Per-file result before aggregation."""

    path: str
    loc: LOCCount
    functions: tuple[FunctionMetric, ...]


class MetricsCalculator:
    """Computes CodeMetrics for a set of files."""

    def __init__(
        self,
        config: Optional[TriageConfig] = None,
        extractor: Optional[SyntaxExtractor] = None,
    ) -> None:
        self.config = config or TriageConfig()
        self.extractor = extractor or SyntaxExtractor(
            max_file_size_bytes=self.config.max_file_size_bytes
        )

    def calculate_metrics(
        self, files: list[Path], token: Optional[CancellationToken] = None
    ) -> CodeMetrics:
        """Aggregate LOC and complexity over all readable files.

        ``average_complexity`` is total complexity over total function count
        across the whole run, not an average of per-file averages.
        """
        results = [
            r
            for r in map_files(lambda p: self._measure_file(p, token), list(files), self.config.workers)
            if r is not None
        ]

        functions = [fn for r in results for fn in r.functions]
        average = ComplexityMetrics(tuple(functions)).average_complexity

        return CodeMetrics(
            total_files=len(results),
            total_lines=sum(r.loc.total for r in results),
            code_lines=sum(r.loc.code for r in results),
            comment_lines=sum(r.loc.comments for r in results),
            blank_lines=sum(r.loc.blank for r in results),
            average_complexity=average,
            maintainability_index=calculate_maintainability(average),
        )

    def count_loc(self, path: Path, token: Optional[CancellationToken] = None) -> LOCCount:
        """Line counts for one file.

        Raises:
            FileAccessError: If the file cannot be read
        """
        content = read_source(path, token=token, max_bytes=self.config.max_file_size_bytes)
        return count_lines(content, get_language(path))

    def calculate_complexity(
        self, path: Path, token: Optional[CancellationToken] = None
    ) -> ComplexityMetrics:
        """Per-function complexity for one file.

        Files without a grammar, and files with syntax errors, have no
        functions.

        Raises:
            FileAccessError: If the file cannot be read
        """
        try:
            syntax = self.extractor.extract(path, token)
        except ParsingError as e:
            logger.debug(f"No complexity for {path}: {e}")
            return ComplexityMetrics()
        if syntax is None:
            return ComplexityMetrics()
        return ComplexityMetrics(tuple(syntax.functions))

    def _measure_file(
        self, path: Path, token: Optional[CancellationToken]
    ) -> Optional[FileMetrics]:
        try:
            content = read_source(path, token=token, max_bytes=self.config.max_file_size_bytes)
        except FileAccessError as e:
            logger.debug(f"Skipping {path}: {e}")
            return None

        loc = count_lines(content, get_language(path))

        functions: tuple[FunctionMetric, ...] = ()
        try:
            syntax = self.extractor.parse(content, str(path))
        except ParsingError as e:
            logger.debug(f"No complexity for {path}: {e}")
            syntax = None
        if syntax is not None:
            functions = tuple(syntax.functions)

        return FileMetrics(path=str(path), loc=loc, functions=functions)
