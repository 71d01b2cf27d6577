"""Language detection and line-weighted language distribution.

A file's language comes from its extension when the extension is known,
otherwise from scoring the opening characters against CONTENT_SIGNATURES.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from typing import Optional

from ..cancellation import CancellationToken
from ..config import TriageConfig
from ..exceptions import FileAccessError
from ..file_ops import map_files, read_source
from ..models import LanguageDistribution, LanguageStat, split_lines
from ..scanning.languages import CONTENT_SIGNATURES, get_language

logger = logging.getLogger(__name__)


def score_content(sample: str) -> Optional[str]:
    """Language whose signature set matches the most patterns in ``sample``.

    Ties go to the language declared first; no match at all gives None.
    """
    best: Optional[str] = None
    best_score = 0
    for language, patterns in CONTENT_SIGNATURES:
        score = sum(1 for pattern in patterns if pattern.search(sample))
        if score > best_score:
            best, best_score = language, score
    return best


class LanguageDetector:
    """Builds a LanguageDistribution for a set of files."""

    def __init__(self, config: Optional[TriageConfig] = None) -> None:
        self.config = config or TriageConfig()

    def detect_languages(
        self, files: list[Path], token: Optional[CancellationToken] = None
    ) -> LanguageDistribution:
        """Classify every file and aggregate line counts per language.

        Unreadable and unclassifiable files are left out of the totals.
        """
        results = map_files(
            lambda path: self._classify_file(path, token), list(files), self.config.workers
        )

        line_counts: dict[str, int] = defaultdict(int)
        for result in results:
            if result is None:
                continue
            language, lines = result
            line_counts[language] += lines

        total = sum(line_counts.values())
        stats = [
            LanguageStat(
                name=name,
                line_count=count,
                percentage=(count / total * 100) if total > 0 else 0.0,
            )
            for name, count in line_counts.items()
        ]
        stats.sort(key=lambda s: (-s.line_count, s.name))
        return LanguageDistribution(tuple(stats))

    def detect_by_extension(self, path: Path) -> Optional[str]:
        spec = get_language(path)
        return spec.name if spec else None

    def detect_by_content(
        self, path: Path, token: Optional[CancellationToken] = None
    ) -> Optional[str]:
        """Score the first ``content_sample_chars`` characters of a file."""
        try:
            sample = read_source(
                path, token=token, limit_chars=self.config.content_sample_chars
            )
        except FileAccessError as e:
            logger.debug(f"Cannot sniff {path}: {e}")
            return None
        return score_content(sample)

    def _classify_file(
        self, path: Path, token: Optional[CancellationToken]
    ) -> Optional[tuple[str, int]]:
        try:
            content = read_source(
                path, token=token, max_bytes=self.config.max_file_size_bytes
            )
        except FileAccessError as e:
            logger.debug(f"Skipping {path}: {e}")
            return None

        language = self.detect_by_extension(path)
        if language is None:
            language = score_content(content[: self.config.content_sample_chars])
        if language is None:
            return None

        return language, len(split_lines(content))
