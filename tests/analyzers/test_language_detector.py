"""Tests for language detection and distribution."""

import pytest

from codebase_triage.analyzers import LanguageDetector
from codebase_triage.analyzers.language_detector import score_content
from codebase_triage.config import TriageConfig


@pytest.fixture
def detector():
    return LanguageDetector(TriageConfig(workers=1))


class TestScoreContent:
    """Test content-signature scoring."""

    def test_python_script(self):
        sample = "import os\nfrom sys import argv\n\ndef main():\n    pass\n"
        assert score_content(sample) == "Python"

    def test_go_source(self):
        sample = 'package main\n\nimport (\n  "fmt"\n)\n\nfunc main() {\n  fmt.Println(1)\n}\n'
        assert score_content(sample) == "Go"

    def test_no_match(self):
        assert score_content("") is None
        assert score_content("lorem ipsum dolor sit amet") is None

    def test_tie_goes_to_first_declared(self):
        """``class Foo`` matches Python, Ruby and PHP equally; Python is declared first."""
        assert score_content("class Foo") == "Python"


class TestLanguageDetector:
    """Test LanguageDetector.detect_languages."""

    def test_empty_input(self, detector):
        assert detector.detect_languages([]).languages == ()

    def test_line_weighted_distribution(self, detector, make_tree):
        root = make_tree({"a.py": "a = 1\nb = 2\nc = 3\n", "b.js": "x();\n"})
        dist = detector.detect_languages([root / "a.py", root / "b.js"])

        assert dist.names() == ["Python", "JavaScript"]
        python, javascript = dist.languages
        assert python.line_count == 3
        assert python.percentage == pytest.approx(75.0)
        assert javascript.percentage == pytest.approx(25.0)

    def test_percentages_sum_to_100(self, detector, make_tree):
        root = make_tree(
            {
                "a.py": "x = 1\n" * 7,
                "b.rb": "puts 1\n" * 3,
                "c.go": "package main\n" * 5,
                "d.sql": "SELECT 1;\n",
            }
        )
        dist = detector.detect_languages(sorted(root.iterdir()))
        assert sum(lang.percentage for lang in dist.languages) == pytest.approx(100.0)

    def test_ties_sorted_by_name(self, detector, make_tree):
        root = make_tree({"a.rb": "x\n", "b.go": "y\n"})
        dist = detector.detect_languages([root / "a.rb", root / "b.go"])
        assert dist.names() == ["Go", "Ruby"]

    def test_unknown_extension_uses_content(self, detector, make_tree):
        root = make_tree({"manage": "import os\nfrom sys import argv\n\ndef main():\n    pass\n"})
        dist = detector.detect_languages([root / "manage"])
        assert dist.names() == ["Python"]
        assert dist.languages[0].line_count == 5

    def test_unclassifiable_and_missing_files_are_skipped(self, detector, make_tree):
        root = make_tree({"notes": "hello there\n", "a.py": "x = 1\n"})
        dist = detector.detect_languages([root / "notes", root / "gone.py", root / "a.py"])
        assert dist.names() == ["Python"]
        assert dist.languages[0].percentage == pytest.approx(100.0)

    def test_parallel_matches_sequential(self, make_tree):
        files = {f"f{i:02d}.py": "x = 1\n" * (i + 1) for i in range(12)}
        files.update({f"g{i:02d}.js": "y();\n" for i in range(12)})
        root = make_tree(files)
        paths = sorted(root.iterdir())

        sequential = LanguageDetector(TriageConfig(workers=1)).detect_languages(paths)
        parallel = LanguageDetector(TriageConfig(workers=4)).detect_languages(paths)
        assert sequential == parallel

    def test_detect_by_extension(self, detector, tmp_path):
        assert detector.detect_by_extension(tmp_path / "x.kt") == "Kotlin"
        assert detector.detect_by_extension(tmp_path / "x.unknown") is None

    def test_detect_by_content_reads_sample_only(self, make_tree):
        detector = LanguageDetector(TriageConfig(content_sample_chars=12))
        root = make_tree({"script": "lorem ipsum\nimport os\ndef main():\n    pass\n"})
        assert detector.detect_by_content(root / "script") is None
