"""Scanning: file discovery, language facts and syntax trees."""

from .languages import (
    CONTENT_SIGNATURES,
    LANGUAGES,
    SOURCE_EXTENSIONS,
    LanguageSpec,
    get_grammar,
    get_language,
)
from .normalizer import TreeSitterNormalizer
from .scanner import filter_source_files, list_files, list_source_files
from .syntax import FileSyntax, NestingFinding, NodeKind, SyntaxNode
from .syntax_extractor import SyntaxExtractor
from .treesitter_parser import TreeSitterParser

__all__ = [
    "CONTENT_SIGNATURES",
    "LANGUAGES",
    "SOURCE_EXTENSIONS",
    "LanguageSpec",
    "get_grammar",
    "get_language",
    "TreeSitterNormalizer",
    "TreeSitterParser",
    "SyntaxExtractor",
    "FileSyntax",
    "NestingFinding",
    "NodeKind",
    "SyntaxNode",
    "list_files",
    "filter_source_files",
    "list_source_files",
]
