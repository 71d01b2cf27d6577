"""Language table: the single source of truth for language facts.

Adding a new language:
  1. Add a LanguageSpec entry to LANGUAGES below.
  2. That's it. Discovery, language detection and LOC counting pick it up.

Grammar-backed languages additionally need an entry in GRAMMARS and a
tree-sitter grammar package registered in treesitter_parser.
"""

import re as _re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class LanguageSpec:
    """Everything the analyzers need to know about a language."""

    name: str
    extensions: tuple[str, ...]

    # Prefixes that start a whole-line comment, checked on the stripped line.
    line_comment: tuple[str, ...] = ()

    # (open, close) delimiters of a block comment, or None.
    block_comment: Optional[tuple[str, str]] = None


# ── Re-usable building blocks ──────────────────────────────────────

_SLASHES = ("//",)
_HASH = ("#",)
_DASHES = ("--",)
_C_BLOCK = ("/*", "*/")


# ── Language table ─────────────────────────────────────────────────

LANGUAGES: tuple[LanguageSpec, ...] = (
    LanguageSpec("Python", (".py", ".pyw", ".pyi"), _HASH),
    LanguageSpec("JavaScript", (".js", ".jsx", ".mjs", ".cjs"), _SLASHES, _C_BLOCK),
    LanguageSpec("TypeScript", (".ts", ".tsx"), _SLASHES, _C_BLOCK),
    LanguageSpec("Java", (".java",), _SLASHES, _C_BLOCK),
    LanguageSpec("C#", (".cs", ".csx"), _SLASHES, _C_BLOCK),
    LanguageSpec("Ruby", (".rb", ".rake", ".gemspec"), _HASH),
    LanguageSpec(
        "PHP", (".php", ".phtml", ".php3", ".php4", ".php5"), ("//", "#"), _C_BLOCK
    ),
    LanguageSpec("Go", (".go",), _SLASHES, _C_BLOCK),
    LanguageSpec("C", (".c", ".h"), _SLASHES, _C_BLOCK),
    LanguageSpec("C++", (".cpp", ".cc", ".cxx", ".hpp", ".hxx"), _SLASHES, _C_BLOCK),
    LanguageSpec("Swift", (".swift",), _SLASHES, _C_BLOCK),
    LanguageSpec("Kotlin", (".kt", ".kts"), _SLASHES, _C_BLOCK),
    LanguageSpec("Rust", (".rs",), _SLASHES, _C_BLOCK),
    LanguageSpec("Scala", (".scala",), _SLASHES, _C_BLOCK),
    LanguageSpec("Clojure", (".clj",), (";",)),
    LanguageSpec("HTML", (".html", ".htm")),
    LanguageSpec("CSS", (".css",), (), _C_BLOCK),
    LanguageSpec("SCSS", (".scss",), _SLASHES, _C_BLOCK),
    LanguageSpec("Sass", (".sass",), _SLASHES, _C_BLOCK),
    LanguageSpec("Less", (".less",), _SLASHES, _C_BLOCK),
    LanguageSpec("Vue", (".vue",)),
    LanguageSpec("SQL", (".sql",), _DASHES),
    LanguageSpec("Shell", (".sh", ".bash", ".zsh"), _HASH),
    LanguageSpec("Objective-C", (".m",), _SLASHES, _C_BLOCK),
    LanguageSpec("Objective-C++", (".mm",), _SLASHES, _C_BLOCK),
    LanguageSpec("Perl", (".pl",), _HASH),
    LanguageSpec("R", (".r",), _HASH),
    LanguageSpec("Dart", (".dart",), _SLASHES, _C_BLOCK),
    LanguageSpec("Lua", (".lua",), _DASHES),
    LanguageSpec("Groovy", (".groovy",), _SLASHES, _C_BLOCK),
    LanguageSpec("Erlang", (".erl",), ("%",)),
    LanguageSpec("Elixir", (".ex", ".exs"), _HASH),
)

_BY_EXTENSION: dict[str, LanguageSpec] = {
    ext: spec for spec in LANGUAGES for ext in spec.extensions
}

# Extensions that count as source during discovery
SOURCE_EXTENSIONS: frozenset[str] = frozenset(_BY_EXTENSION)

# Extension -> tree-sitter grammar name for languages with a syntax tree
GRAMMARS: dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".py": "python",
    ".pyw": "python",
    ".pyi": "python",
}

# Directories never descended into during discovery
SKIP_DIRS: frozenset[str] = frozenset(
    {
        "node_modules",
        ".git",
        "dist",
        "build",
        "target",
        "bin",
        "obj",
        ".idea",
        ".vscode",
        "__pycache__",
        ".pytest_cache",
        "coverage",
        ".next",
        ".nuxt",
        "vendor",
        "packages",
        ".gradle",
        ".mvn",
    }
)


# ── Content signatures ─────────────────────────────────────────────
#
# Ordered: when two languages match the same number of patterns the one
# declared first wins.

_M = _re.MULTILINE

CONTENT_SIGNATURES: tuple[tuple[str, tuple[_re.Pattern[str], ...]], ...] = (
    (
        "Python",
        (
            _re.compile(r"^import\s+\w+", _M),
            _re.compile(r"^from\s+\w+\s+import", _M),
            _re.compile(r"^def\s+\w+\s*\(", _M),
            _re.compile(r"^class\s+\w+", _M),
            _re.compile(r"^if\s+__name__\s*==\s*['\"]__main__['\"]", _M),
        ),
    ),
    (
        "JavaScript",
        (
            _re.compile(r"^const\s+\w+\s*=", _M),
            _re.compile(r"^let\s+\w+\s*=", _M),
            _re.compile(r"^var\s+\w+\s*=", _M),
            _re.compile(r"^function\s+\w+\s*\(", _M),
            _re.compile(r"^import\s+.*\s+from\s+['\"]", _M),
            _re.compile(r"^export\s+(default|const|function|class)", _M),
            _re.compile(r"require\s*\(['\"]"),
        ),
    ),
    (
        "TypeScript",
        (
            _re.compile(r":\s*(string|number|boolean|any|void|never)\s*[;=)]"),
            _re.compile(r"^interface\s+\w+", _M),
            _re.compile(r"^type\s+\w+\s*=", _M),
            _re.compile(r"^enum\s+\w+", _M),
            _re.compile(r"<\w+>"),
        ),
    ),
    (
        "Java",
        (
            _re.compile(r"package\s+[\w.]+;"),
            _re.compile(r"import\s+[\w.]+;"),
            _re.compile(r"public\s+class\s+\w+"),
            _re.compile(r"private\s+(static\s+)?(final\s+)?[\w<>]+\s+\w+"),
            _re.compile(r"System\.out\.println"),
            _re.compile(r"public\s+static\s+void\s+main"),
        ),
    ),
    (
        "C#",
        (
            _re.compile(r"^using\s+[\w.]+;", _M),
            _re.compile(r"^namespace\s+[\w.]+", _M),
            _re.compile(r"^public\s+class\s+\w+", _M),
            _re.compile(r"Console\.WriteLine"),
            _re.compile(r"\[\w+\]"),
        ),
    ),
    (
        "Ruby",
        (
            _re.compile(r"^require\s+['\"]", _M),
            _re.compile(r"^class\s+\w+", _M),
            _re.compile(r"^def\s+\w+", _M),
            _re.compile(r"^module\s+\w+", _M),
            _re.compile(r"^end$", _M),
            _re.compile(r"puts\s+"),
        ),
    ),
    (
        "PHP",
        (
            _re.compile(r"^<\?php", _M),
            _re.compile(r"\$\w+\s*="),
            _re.compile(r"^function\s+\w+\s*\(", _M),
            _re.compile(r"^class\s+\w+", _M),
            _re.compile(r"echo\s+"),
        ),
    ),
    (
        "Go",
        (
            _re.compile(r"^package\s+\w+", _M),
            _re.compile(r"^import\s+\(", _M),
            _re.compile(r"^func\s+\w+\s*\(", _M),
            _re.compile(r"^type\s+\w+\s+struct", _M),
            _re.compile(r"fmt\.Print"),
        ),
    ),
)


def get_language(path: Path) -> Optional[LanguageSpec]:
    """Look up the language for a path by its (case-insensitive) extension."""
    return _BY_EXTENSION.get(Path(path).suffix.lower())


def get_grammar(path: Path) -> Optional[str]:
    """Tree-sitter grammar name for a path, or None if it has no syntax tree."""
    return GRAMMARS.get(Path(path).suffix.lower())


def is_source_file(path: Path) -> bool:
    return Path(path).suffix.lower() in SOURCE_EXTENSIONS
