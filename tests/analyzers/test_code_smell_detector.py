"""Tests for CodeSmellDetector."""

import pytest

from codebase_triage.analyzers import CodeSmellDetector
from codebase_triage.config import ThresholdConfig, TriageConfig
from codebase_triage.models import FunctionMetric, Severity, SmellType
from codebase_triage.scanning.syntax import NestingFinding, NodeKind


def _long_function(body_lines: int) -> str:
    body = "".join(f"    v{i} = {i}\n" for i in range(body_lines))
    return f"def long_one():\n{body}"


def _branchy_function(branches: int) -> str:
    body = "".join(f"    if x == {i}:\n        return {i}\n" for i in range(branches))
    return f"def branchy(x):\n{body}    return -1\n"


def _nested(depth: int) -> str:
    lines = ["def nested(x):"]
    for level in range(depth):
        lines.append("    " * (level + 1) + "if x:")
    lines.append("    " * (depth + 1) + "pass")
    return "\n".join(lines) + "\n"


@pytest.fixture
def detector():
    return CodeSmellDetector(TriageConfig(workers=1))


class TestLongFunctions:
    def test_function_over_threshold(self, detector, make_tree):
        root = make_tree({"long.py": _long_function(55)})
        (smell,) = detector.detect_long_functions(root / "long.py")
        assert smell.type is SmellType.LONG_FUNCTION
        assert smell.severity is Severity.LOW
        assert smell.line == 1
        assert smell.metadata == {"function_name": "long_one", "line_count": 56}
        assert smell.description == "Function 'long_one' is 56 lines long (threshold: 50)"

    def test_function_at_threshold_is_fine(self, detector, make_tree):
        root = make_tree({"ok.py": _long_function(49)})
        assert detector.detect_long_functions(root / "ok.py") == []

    @pytest.mark.parametrize("lines,severity", [(51, Severity.LOW), (76, Severity.MEDIUM), (101, Severity.HIGH)])
    def test_severity_ladder(self, detector, lines, severity):
        fn = FunctionMetric("f", 1, lines, 1)
        (smell,) = detector.long_function_smells([fn], "f.py")
        assert smell.severity is severity


class TestComplexFunctions:
    def test_function_over_threshold(self, detector, make_tree):
        root = make_tree({"branchy.py": _branchy_function(16)})
        (smell,) = detector.detect_complex_functions(root / "branchy.py")
        assert smell.type is SmellType.TOO_COMPLEX
        assert smell.metadata == {"function_name": "branchy", "complexity": 17}
        assert smell.severity is Severity.MEDIUM
        assert "threshold: 10" in smell.description

    def test_simple_function(self, detector, make_tree):
        root = make_tree({"simple.py": _branchy_function(9)})
        assert detector.detect_complex_functions(root / "simple.py") == []

    def test_custom_threshold(self, make_tree):
        config = TriageConfig(
            workers=1,
            thresholds=ThresholdConfig(complexity=2, complexity_medium=3, complexity_high=4),
        )
        root = make_tree({"b.py": _branchy_function(2)})
        (smell,) = CodeSmellDetector(config).detect_complex_functions(root / "b.py")
        assert smell.severity is Severity.LOW


class TestDeepNesting:
    def test_one_smell_per_structure_beyond_threshold(self, detector, make_tree):
        root = make_tree({"deep.py": _nested(6)})
        smells = detector.detect_deep_nesting(root / "deep.py")
        assert [(s.line, s.metadata["depth"], s.severity) for s in smells] == [
            (6, 5, Severity.LOW),
            (7, 6, Severity.MEDIUM),
        ]
        assert smells[0].metadata["context"] == "if"
        assert smells[0].description == "Deep nesting detected (5 levels, threshold: 4)"

    def test_shallow_code(self, detector, make_tree):
        root = make_tree({"shallow.py": _nested(4)})
        assert detector.detect_deep_nesting(root / "shallow.py") == []

    def test_high_severity(self, detector):
        finding = NestingFinding(NodeKind.FOR, 10, 7)
        (smell,) = detector.deep_nesting_smells([finding], "x.js")
        assert smell.severity is Severity.HIGH
        assert smell.metadata == {"depth": 7, "context": "for"}


class TestDetectSmells:
    """Test the combined pass."""

    def test_paths_relative_to_root(self, detector, make_tree):
        root = make_tree({"src/long.py": _long_function(60)})
        smells = detector.detect_smells([root / "src" / "long.py"], root_dir=root)
        assert [s.file for s in smells] == ["src/long.py"]

    def test_one_function_can_have_several_smells(self, detector, make_tree):
        code = _branchy_function(30)
        root = make_tree({"both.py": code})
        smells = detector.detect_smells([root / "both.py"], root_dir=root)
        assert {s.type for s in smells} == {SmellType.LONG_FUNCTION, SmellType.TOO_COMPLEX}

    def test_unparseable_and_unsupported_files(self, detector, make_tree):
        root = make_tree(
            {
                "bad.py": "def broken(:\n    pass\n",
                "Main.java": "class Main {}\n",
            }
        )
        assert detector.detect_smells([root / "bad.py", root / "Main.java"], root_dir=root) == []

    def test_missing_file_is_skipped(self, detector, make_tree):
        root = make_tree({"a.py": "x = 1\n"})
        assert detector.detect_smells([root / "gone.py", root / "a.py"]) == []
