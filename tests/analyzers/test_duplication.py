"""Tests for cross-file duplicate block detection."""

from pathlib import Path

import pytest

from codebase_triage.analyzers import detect_duplication
from codebase_triage.analyzers.duplication import (
    duplication_severity,
    normalize_block,
    strip_line_comment,
)
from codebase_triage.config import DEFAULT_THRESHOLDS
from codebase_triage.models import Severity, SmellType
from codebase_triage.scanning.languages import get_language

SHARED_BLOCK = "".join(f"total_{i} = compute(value, {i})\n" for i in range(10))


class TestNormalizeBlock:
    def test_strips_comments_and_whitespace(self):
        lines = ["  x  =   1", "// note", "", "/* a", "b */ y = 2"]
        assert normalize_block(lines, get_language(Path("a.js"))) == ["x = 1", "y = 2"]

    def test_unknown_language_keeps_everything(self):
        assert normalize_block(["# not a comment", "  a"], None) == ["# not a comment", "a"]

    def test_trailing_comments_are_removed(self):
        lines = ["total = compute(a); // step 1", "x = 1  # why"]
        assert normalize_block(lines[:1], get_language(Path("a.js"))) == ["total = compute(a);"]
        assert normalize_block(lines[1:], get_language(Path("a.py"))) == ["x = 1"]


class TestStripLineComment:
    @pytest.mark.parametrize(
        "line, expected",
        [
            ("call(); // note", "call(); "),
            ('url = "http://example.com"; // site', 'url = "http://example.com"; '),
            ("s = 'a \\' // b' // c", "s = 'a \\' // b' "),
            ("no comment here", "no comment here"),
        ],
    )
    def test_slash_comments(self, line, expected):
        assert strip_line_comment(line, ("//",)) == expected

    def test_hash_inside_string_is_kept(self):
        assert strip_line_comment('tag = "#main"  # anchor', ("#",)) == 'tag = "#main"  '


class TestDetectDuplication:
    def test_shared_block_is_flagged_in_both_files(self, make_tree):
        root = make_tree({"a.py": SHARED_BLOCK, "b.py": SHARED_BLOCK})
        smells = detect_duplication([root / "a.py", root / "b.py"], root_dir=root)

        assert [(s.file, s.line) for s in smells] == [("a.py", 1), ("b.py", 1)]
        first = smells[0]
        assert first.type is SmellType.DUPLICATION
        assert first.severity is Severity.LOW
        assert first.metadata == {
            "line_count": 10,
            "duplicate_count": 2,
            "other_locations": [{"file": "b.py", "line": 1}],
        }
        assert first.description == "Duplicate code block (10 lines) found in 1 other location(s)"

    def test_short_block_is_not_flagged(self, make_tree):
        short = "".join(f"x{i} = {i}\n" for i in range(4))
        root = make_tree({"a.py": short, "b.py": short})
        assert detect_duplication([root / "a.py", root / "b.py"]) == []

    def test_distinct_files(self, make_tree):
        other = "".join(f"other_{i} = compute(value, {i})\n" for i in range(10))
        root = make_tree({"a.py": SHARED_BLOCK, "b.py": other})
        assert detect_duplication([root / "a.py", root / "b.py"]) == []

    def test_blocks_differing_only_in_trailing_comments_are_flagged(self, make_tree):
        a = "".join(f"const total{i} = compute(value, {i}); // step {i}\n" for i in range(10))
        b = "".join(f"const total{i} = compute(value, {i}); // note {i}\n" for i in range(10))
        root = make_tree({"a.js": a, "b.js": b})
        smells = detect_duplication([root / "a.js", root / "b.js"], root_dir=root)
        assert [(s.file, s.line) for s in smells] == [("a.js", 1), ("b.js", 1)]

    def test_whitespace_differences_are_ignored(self, make_tree):
        variant = SHARED_BLOCK.replace(" = ", "   =   ")
        root = make_tree({"a.py": SHARED_BLOCK, "b.py": variant})
        smells = detect_duplication([root / "a.py", root / "b.py"], root_dir=root)
        assert {s.file for s in smells} == {"a.py", "b.py"}

    def test_blocks_that_are_mostly_comments_are_ignored(self, make_tree):
        content = "".join("# comment\n" for _ in range(7)) + "a = 1\nb = 2\nc = 3\n"
        root = make_tree({"a.py": content, "b.py": content})
        assert detect_duplication([root / "a.py", root / "b.py"]) == []

    def test_three_copies(self, make_tree):
        root = make_tree({"a.py": SHARED_BLOCK, "b.py": SHARED_BLOCK, "c.py": SHARED_BLOCK})
        smells = detect_duplication(
            [root / "a.py", root / "b.py", root / "c.py"], root_dir=root
        )
        assert len(smells) == 3
        assert all(s.metadata["duplicate_count"] == 3 for s in smells)
        assert [loc["file"] for loc in smells[1].metadata["other_locations"]] == ["a.py", "c.py"]

    def test_missing_files_are_skipped(self, make_tree):
        root = make_tree({"a.py": SHARED_BLOCK})
        assert detect_duplication([root / "a.py", root / "gone.py"]) == []


class TestDuplicationSeverity:
    def test_ladder(self):
        assert duplication_severity(10, 2, DEFAULT_THRESHOLDS) is Severity.LOW
        assert duplication_severity(10, 6, DEFAULT_THRESHOLDS) is Severity.MEDIUM
        assert duplication_severity(10, 11, DEFAULT_THRESHOLDS) is Severity.HIGH
