"""Code smell detection.

Per-file smells (long functions, excessive complexity, deep nesting) come
from the normalized syntax tree of grammar-backed files. Duplication is a
separate cross-file pass over every file (see duplication.py).

Smells are not deduplicated across detectors: one function can be both long
and too complex.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..cancellation import CancellationToken
from ..config import TriageConfig
from ..exceptions import AnalysisError
from ..file_ops import display_path, map_files
from ..models import CodeSmell, FunctionMetric, Severity, SmellType
from ..scanning.syntax import FileSyntax, NestingFinding
from ..scanning.syntax_extractor import SyntaxExtractor
from .duplication import detect_duplication

logger = logging.getLogger(__name__)


def _severity(value: int, medium: int, high: int) -> Severity:
    if value > high:
        return Severity.HIGH
    if value > medium:
        return Severity.MEDIUM
    return Severity.LOW


class CodeSmellDetector:
    """Finds code smells in a set of files."""

    def __init__(
        self,
        config: Optional[TriageConfig] = None,
        extractor: Optional[SyntaxExtractor] = None,
    ) -> None:
        self.config = config or TriageConfig()
        self.thresholds = self.config.thresholds
        self.extractor = extractor or SyntaxExtractor(
            max_file_size_bytes=self.config.max_file_size_bytes
        )

    def detect_smells(
        self,
        files: list[Path],
        token: Optional[CancellationToken] = None,
        root_dir: Optional[Path] = None,
    ) -> list[CodeSmell]:
        """All smells for ``files``: per-file smells in file order, then duplication.

        Args:
            files: Files to inspect
            token: Cancellation token checked before each read
            root_dir: When given, smell paths are reported relative to it
        """
        per_file = map_files(
            lambda path: self._file_smells(path, token, root_dir), list(files), self.config.workers
        )
        smells = [smell for file_smells in per_file for smell in file_smells]
        smells.extend(self.detect_duplication(files, token, root_dir))
        return smells

    # ── Per-file detectors ──────────────────────────────────────────

    def detect_long_functions(
        self, path: Path, token: Optional[CancellationToken] = None
    ) -> list[CodeSmell]:
        syntax = self.extractor.extract(path, token)
        if syntax is None:
            return []
        return self.long_function_smells(syntax.functions, str(path))

    def detect_complex_functions(
        self, path: Path, token: Optional[CancellationToken] = None
    ) -> list[CodeSmell]:
        syntax = self.extractor.extract(path, token)
        if syntax is None:
            return []
        return self.complex_function_smells(syntax.functions, str(path))

    def detect_deep_nesting(
        self, path: Path, token: Optional[CancellationToken] = None
    ) -> list[CodeSmell]:
        syntax = self.extractor.extract(path, token)
        if syntax is None:
            return []
        return self.deep_nesting_smells(syntax.nesting(), str(path))

    def detect_duplication(
        self,
        files: list[Path],
        token: Optional[CancellationToken] = None,
        root_dir: Optional[Path] = None,
    ) -> list[CodeSmell]:
        return detect_duplication(
            files,
            self.thresholds,
            token=token,
            root_dir=root_dir,
            max_file_size_bytes=self.config.max_file_size_bytes,
        )

    # ── Rules ───────────────────────────────────────────────────────

    def long_function_smells(self, functions: list[FunctionMetric], file: str) -> list[CodeSmell]:
        t = self.thresholds
        return [
            CodeSmell(
                type=SmellType.LONG_FUNCTION,
                severity=_severity(fn.line_count, t.long_function_medium, t.long_function_high),
                file=file,
                line=fn.line,
                description=(
                    f"Function '{fn.name}' is {fn.line_count} lines long "
                    f"(threshold: {t.long_function_lines})"
                ),
                metadata={"function_name": fn.name, "line_count": fn.line_count},
            )
            for fn in functions
            if fn.line_count > t.long_function_lines
        ]

    def complex_function_smells(self, functions: list[FunctionMetric], file: str) -> list[CodeSmell]:
        t = self.thresholds
        return [
            CodeSmell(
                type=SmellType.TOO_COMPLEX,
                severity=_severity(fn.complexity, t.complexity_medium, t.complexity_high),
                file=file,
                line=fn.line,
                description=(
                    f"Function '{fn.name}' has complexity {fn.complexity} "
                    f"(threshold: {t.complexity})"
                ),
                metadata={"function_name": fn.name, "complexity": fn.complexity},
            )
            for fn in functions
            if fn.complexity > t.complexity
        ]

    def deep_nesting_smells(self, findings: list[NestingFinding], file: str) -> list[CodeSmell]:
        t = self.thresholds
        return [
            CodeSmell(
                type=SmellType.DEEP_NESTING,
                severity=_severity(f.depth, t.nesting_medium, t.nesting_high),
                file=file,
                line=f.line,
                description=f"Deep nesting detected ({f.depth} levels, threshold: {t.nesting_depth})",
                metadata={"depth": f.depth, "context": f.kind.value},
            )
            for f in findings
            if f.depth > t.nesting_depth
        ]

    def _file_smells(
        self, path: Path, token: Optional[CancellationToken], root_dir: Optional[Path]
    ) -> list[CodeSmell]:
        try:
            syntax: Optional[FileSyntax] = self.extractor.extract(path, token)
        except AnalysisError as e:
            logger.debug(f"Skipping smells for {path}: {e}")
            return []
        if syntax is None:
            return []

        name = display_path(path, root_dir)
        functions = syntax.functions
        return [
            *self.long_function_smells(functions, name),
            *self.complex_function_smells(functions, name),
            *self.deep_nesting_smells(syntax.nesting(), name),
        ]
