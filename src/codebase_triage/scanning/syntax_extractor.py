"""SyntaxExtractor: produces FileSyntax for grammar-backed source files.

Usage:
    extractor = SyntaxExtractor()
    syntax = extractor.extract(path, token)   # None when no grammar applies

Files in languages without a grammar yield None. Files that cannot be read
or parsed raise, and callers decide whether that is a per-file skip.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..cancellation import CancellationToken
from ..file_ops import read_source
from .languages import get_grammar
from .normalizer import TreeSitterNormalizer
from .syntax import FileSyntax

logger = logging.getLogger(__name__)


class SyntaxExtractor:
    """Extracts FileSyntax from source files.

    One extractor is safe to share between worker threads.
    """

    def __init__(
        self,
        normalizer: Optional[TreeSitterNormalizer] = None,
        max_file_size_bytes: Optional[int] = None,
    ) -> None:
        self._normalizer = normalizer or TreeSitterNormalizer()
        self._max_bytes = max_file_size_bytes

    def supports(self, file_path: Path) -> bool:
        """True if a grammar is installed for this file's extension."""
        grammar = get_grammar(file_path)
        return grammar is not None and self._normalizer.supports(grammar)

    def extract(
        self, file_path: Path, token: Optional[CancellationToken] = None
    ) -> Optional[FileSyntax]:
        """Read and parse one file.

        Returns:
            FileSyntax, or None if the file has no supported grammar

        Raises:
            OperationCancelledError: If the token has fired
            FileAccessError: If the file cannot be read
            ParsingError: If the file has syntax errors
        """
        if not self.supports(file_path):
            return None
        content = read_source(file_path, token=token, max_bytes=self._max_bytes)
        return self.parse(content, str(file_path))

    def parse(self, content: str, path: str) -> Optional[FileSyntax]:
        """Parse already-read content; None if ``path`` has no supported grammar."""
        grammar = get_grammar(Path(path))
        if grammar is None or not self._normalizer.supports(grammar):
            return None
        root = self._normalizer.parse_file(content, path, grammar)
        return FileSyntax(path=path, grammar=grammar, root=root)
