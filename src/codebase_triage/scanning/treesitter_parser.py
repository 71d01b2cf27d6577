"""Tree-sitter parser wrapper.

Provides a unified interface for tree-sitter parsing across the grammars
the metrics and smell analyzers understand.

Usage:
    parser = TreeSitterParser()
    tree = parser.parse(code_bytes, "python")
"""

from __future__ import annotations

from types import ModuleType
from typing import Any

import tree_sitter
import tree_sitter_javascript
import tree_sitter_python
import tree_sitter_typescript

from ..exceptions import UnsupportedLanguageError

# Grammar name -> module exposing language_<name>() or language()
_LANGUAGE_MODULES: dict[str, ModuleType] = {
    "javascript": tree_sitter_javascript,
    "typescript": tree_sitter_typescript,
    # TSX is bundled with tree-sitter-typescript
    "tsx": tree_sitter_typescript,
    "python": tree_sitter_python,
}


def get_supported_languages() -> list[str]:
    """Get list of grammar names with an installed grammar."""
    return list(_LANGUAGE_MODULES.keys())


def _load_language(name: str, module: ModuleType) -> tree_sitter.Language:
    # Some modules use language_<name>() instead of language()
    lang_fn = getattr(module, f"language_{name}", None)
    if lang_fn is None:
        lang_fn = module.language
    # tree-sitter >= 0.23 returns PyCapsule; wrap in Language()
    return tree_sitter.Language(lang_fn())


class TreeSitterParser:
    """Wrapper around tree-sitter for multi-language parsing.

    Language objects are built once. A fresh ``Parser`` is created per call
    so one instance can be shared across worker threads.
    """

    def __init__(self) -> None:
        self._languages: dict[str, tree_sitter.Language] = {
            name: _load_language(name, module) for name, module in _LANGUAGE_MODULES.items()
        }

    def parse(self, code: bytes, language: str) -> Any:
        """Parse code and return the tree-sitter syntax tree.

        Args:
            code: Source code as bytes
            language: Grammar name (e.g., "python", "tsx")

        Raises:
            UnsupportedLanguageError: If no grammar is registered for ``language``
        """
        lang = self._languages.get(language)
        if lang is None:
            raise UnsupportedLanguageError(language, get_supported_languages())
        return tree_sitter.Parser(lang).parse(code)

    def is_language_supported(self, language: str) -> bool:
        """Check if a grammar is available."""
        return language in self._languages
