"""Tests for the analyze and history commands."""

import json
import shutil

from typer.testing import CliRunner

from codebase_triage import __version__
from codebase_triage.cli import app
from codebase_triage.cli._common import copy_to_workspace

runner = CliRunner()

MODULE = """import sys


def main(argv):
    if len(argv) > 1 and argv[1] == "--help":
        print("usage")
        return 0
    return 1


if __name__ == "__main__":
    sys.exit(main(sys.argv))
"""


class TestAnalyzeCommand:
    def test_json_report(self, make_tree):
        root = make_tree({"tool.py": MODULE, "requirements.txt": "click==8.1.0\n"})
        result = runner.invoke(app, ["analyze", str(root), "--no-save", "--json"])

        assert result.exit_code == 0, result.output
        report = json.loads(result.stdout)
        assert report["status"] == "completed"
        assert report["languages"][0]["name"] == "Python"
        assert report["dependencies"] == [{"name": "click", "version": "8.1.0", "kind": "runtime"}]
        assert report["metrics"]["average_complexity"] == 3.0

    def test_source_tree_is_left_alone(self, make_tree):
        root = make_tree({"tool.py": MODULE})
        result = runner.invoke(app, ["analyze", str(root), "--no-save"])
        assert result.exit_code == 0, result.output
        assert (root / "tool.py").read_text() == MODULE
        assert "Codebase Triage" in result.stdout

    def test_no_source_files_fails(self, make_tree):
        root = make_tree({"README.md": "# nothing here\n"})
        result = runner.invoke(app, ["analyze", str(root), "--no-save", "--quiet"])
        assert result.exit_code == 1
        assert "No source files found" in result.output

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestHistoryCommand:
    def test_lists_saved_runs(self, make_tree):
        root = make_tree({"tool.py": MODULE})
        assert runner.invoke(app, ["analyze", str(root), "--json"]).exit_code == 0

        result = runner.invoke(app, ["history", str(root), "--json"])
        assert result.exit_code == 0, result.output
        (row,) = json.loads(result.stdout)
        assert row["project"] == "project"
        assert row["report_status"] == "completed"
        assert row["project_status"] == "completed"

    def test_no_database(self, tmp_path):
        result = runner.invoke(app, ["history", str(tmp_path)])
        assert result.exit_code == 0
        assert "No history found" in result.stdout


class TestWorkspaceCopy:
    def test_copy_skips_dependency_and_database_dirs(self, make_tree):
        root = make_tree(
            {
                "src/app.js": "x();\n",
                "node_modules/react/index.js": "y();\n",
                ".codebase-triage/triage.db": b"",
            }
        )
        temp_root, working = copy_to_workspace(root)
        try:
            copied = sorted(p.relative_to(working).as_posix() for p in working.rglob("*") if p.is_file())
            assert copied == ["src/app.js"]
        finally:
            shutil.rmtree(temp_root)
