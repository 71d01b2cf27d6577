"""Syntax models for parsed source files.

SyntaxNode is a language-agnostic view of a tree-sitter tree: only nodes the
analyzers care about survive normalization, tagged with a NodeKind. Both the
metrics calculator and the smell detector walk this tree instead of raw
tree-sitter nodes, so they never depend on grammar-specific node names.

All traversals here are iterative; deeply nested generated code must not hit
the interpreter's recursion limit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..models import FunctionMetric


class NodeKind(str, Enum):
    """Kinds of syntax node kept after normalization."""

    MODULE = "module"

    # Function-like
    FUNCTION = "function"
    METHOD = "method"
    LAMBDA = "lambda"

    # Control structures
    IF = "if"
    ELIF = "elif"
    FOR = "for"
    FOR_IN = "for_in"
    WHILE = "while"
    DO_WHILE = "do_while"
    SWITCH = "switch"
    TRY = "try"

    # Other decision points
    TERNARY = "ternary"
    CASE = "case"
    DEFAULT = "default"
    CATCH = "catch"
    LOGICAL_AND = "logical_and"
    LOGICAL_OR = "logical_or"


FUNCTION_KINDS = frozenset({NodeKind.FUNCTION, NodeKind.METHOD, NodeKind.LAMBDA})

# Each occurrence adds one to the enclosing function's complexity
DECISION_KINDS = frozenset(
    {
        NodeKind.IF,
        NodeKind.ELIF,
        NodeKind.TERNARY,
        NodeKind.FOR,
        NodeKind.FOR_IN,
        NodeKind.WHILE,
        NodeKind.DO_WHILE,
        NodeKind.CATCH,
        NodeKind.CASE,
        NodeKind.LOGICAL_AND,
        NodeKind.LOGICAL_OR,
    }
)

# Entering one of these increases nesting depth
CONTROL_KINDS = frozenset(
    {
        NodeKind.IF,
        NodeKind.FOR,
        NodeKind.FOR_IN,
        NodeKind.WHILE,
        NodeKind.DO_WHILE,
        NodeKind.SWITCH,
        NodeKind.TRY,
    }
)

ANONYMOUS = "anonymous"


@dataclass
class SyntaxNode:
    """A normalized syntax node.

    Attributes:
        kind: What the node is
        start_line: First line (1-indexed)
        end_line: Last line (1-indexed)
        name: Declared name for named functions, else None
        children: Normalized children in source order
    """

    kind: NodeKind
    start_line: int
    end_line: int
    name: Optional[str] = None
    children: list[SyntaxNode] = field(default_factory=list)

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1

    def iter_descendants(self) -> list[SyntaxNode]:
        """All descendants in pre-order, excluding self."""
        result: list[SyntaxNode] = []
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            result.append(node)
            stack.extend(reversed(node.children))
        return result


@dataclass(frozen=True)
class NestingFinding:
    """A control structure and the depth at which it sits."""

    kind: NodeKind
    line: int
    depth: int


@dataclass
class FileSyntax:
    """Syntax facts for one file.

    Attributes:
        path: File path as given to the extractor
        grammar: Tree-sitter grammar used
        root: Normalized syntax tree
    """

    path: str
    grammar: str
    root: SyntaxNode

    @property
    def functions(self) -> list[FunctionMetric]:
        return function_metrics(self.root)

    def nesting(self) -> list[NestingFinding]:
        return control_depths(self.root)


def cyclomatic_complexity(node: SyntaxNode) -> int:
    """1 + every decision point below ``node``, nested functions included."""
    return 1 + sum(1 for d in node.iter_descendants() if d.kind in DECISION_KINDS)


def function_metrics(root: SyntaxNode) -> list[FunctionMetric]:
    """One FunctionMetric per function-like node, in source order."""
    metrics: list[FunctionMetric] = []
    for node in [root, *root.iter_descendants()]:
        if node.kind not in FUNCTION_KINDS:
            continue
        metrics.append(
            FunctionMetric(
                name=node.name or ANONYMOUS,
                line=node.start_line,
                line_count=node.line_count,
                complexity=cyclomatic_complexity(node),
            )
        )
    return metrics


def control_depths(root: SyntaxNode) -> list[NestingFinding]:
    """Depth of every control structure, counted from the file root.

    Function boundaries do not reset the depth.
    """
    findings: list[NestingFinding] = []
    stack: list[tuple[SyntaxNode, int]] = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        if node.kind in CONTROL_KINDS:
            depth += 1
            findings.append(NestingFinding(node.kind, node.start_line, depth))
        for child in reversed(node.children):
            stack.append((child, depth))
    return findings
