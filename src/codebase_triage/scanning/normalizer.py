"""Normalizer: converts raw tree-sitter trees to SyntaxNode trees.

This module hides the grammar-specific node names. Nodes the analyzers do
not care about are dropped and their children are lifted to the nearest
kept ancestor, so every consumer sees the same small vocabulary for
JavaScript, TypeScript, TSX and Python.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..exceptions import ParsingError
from .syntax import NodeKind, SyntaxNode
from .treesitter_parser import TreeSitterParser

logger = logging.getLogger(__name__)

# tree-sitter node type -> NodeKind, across all supported grammars
_NODE_KINDS: dict[str, NodeKind] = {
    # JavaScript / TypeScript
    "function_declaration": NodeKind.FUNCTION,
    "generator_function_declaration": NodeKind.FUNCTION,
    "function_expression": NodeKind.FUNCTION,
    "function": NodeKind.FUNCTION,
    "generator_function": NodeKind.FUNCTION,
    "method_definition": NodeKind.METHOD,
    "arrow_function": NodeKind.LAMBDA,
    "ternary_expression": NodeKind.TERNARY,
    "for_in_statement": NodeKind.FOR_IN,
    "do_statement": NodeKind.DO_WHILE,
    "switch_statement": NodeKind.SWITCH,
    "switch_case": NodeKind.CASE,
    "switch_default": NodeKind.DEFAULT,
    "catch_clause": NodeKind.CATCH,
    # Python
    "function_definition": NodeKind.FUNCTION,
    "lambda": NodeKind.LAMBDA,
    "elif_clause": NodeKind.ELIF,
    "conditional_expression": NodeKind.TERNARY,
    "match_statement": NodeKind.SWITCH,
    "case_clause": NodeKind.CASE,
    "except_clause": NodeKind.CATCH,
    # Shared
    "if_statement": NodeKind.IF,
    "for_statement": NodeKind.FOR,
    "while_statement": NodeKind.WHILE,
    "try_statement": NodeKind.TRY,
}

_LOGICAL_NODES = frozenset({"binary_expression", "boolean_operator"})

_LOGICAL_OPERATORS: dict[str, NodeKind] = {
    "&&": NodeKind.LOGICAL_AND,
    "||": NodeKind.LOGICAL_OR,
    "and": NodeKind.LOGICAL_AND,
    "or": NodeKind.LOGICAL_OR,
}

_NAMED_KINDS = frozenset({NodeKind.FUNCTION, NodeKind.METHOD})


def _classify(node: Any) -> Optional[NodeKind]:
    """NodeKind for a tree-sitter node, or None if it should be dropped."""
    # Keyword tokens share names with node types ("function", "lambda")
    if not node.is_named:
        return None
    if node.type in _LOGICAL_NODES:
        operator = node.child_by_field_name("operator")
        if operator is None:
            return None
        return _LOGICAL_OPERATORS.get(operator.type)
    return _NODE_KINDS.get(node.type)


def _node_name(node: Any) -> Optional[str]:
    name_node = node.child_by_field_name("name")
    if name_node is None or name_node.text is None:
        return None
    return name_node.text.decode("utf-8", errors="replace")


def normalize_tree(tree: Any) -> SyntaxNode:
    """Convert a tree-sitter tree to a SyntaxNode rooted at a MODULE node."""
    ts_root = tree.root_node
    root = SyntaxNode(
        kind=NodeKind.MODULE,
        start_line=ts_root.start_point[0] + 1,
        end_line=ts_root.end_point[0] + 1,
    )

    # Pre-order walk; appending on pop keeps siblings in source order
    stack: list[tuple[Any, SyntaxNode]] = [(child, root) for child in reversed(ts_root.children)]
    while stack:
        ts_node, parent = stack.pop()
        kind = _classify(ts_node)
        if kind is None:
            target = parent
        else:
            target = SyntaxNode(
                kind=kind,
                start_line=ts_node.start_point[0] + 1,
                end_line=ts_node.end_point[0] + 1,
                name=_node_name(ts_node) if kind in _NAMED_KINDS else None,
            )
            parent.children.append(target)
        for child in reversed(ts_node.children):
            stack.append((child, target))

    return root


class TreeSitterNormalizer:
    """Parses source text and returns its normalized syntax tree.

    Usage:
        normalizer = TreeSitterNormalizer()
        root = normalizer.parse_file(content, path, "typescript")
    """

    def __init__(self, parser: Optional[TreeSitterParser] = None) -> None:
        self._parser = parser or TreeSitterParser()

    def supports(self, grammar: str) -> bool:
        return self._parser.is_language_supported(grammar)

    def parse_file(self, content: str, path: str, grammar: str) -> SyntaxNode:
        """Parse file content and return its SyntaxNode tree.

        Raises:
            UnsupportedLanguageError: If ``grammar`` has no parser
            ParsingError: If the source contains syntax errors
        """
        tree = self._parser.parse(content.encode("utf-8", errors="replace"), grammar)
        if tree.root_node.has_error:
            raise ParsingError(path, grammar, "source contains syntax errors")
        return normalize_tree(tree)
