"""Shared test fixtures for Codebase Triage tests."""

import os
from pathlib import Path

import pytest

from codebase_triage.config import TriageConfig
from codebase_triage.pipeline import MemoryStore


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def write_tree(root: Path, files: dict) -> Path:
    """Create ``files`` (relative path -> str or bytes) under ``root``."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_tree(tmp_path):
    """Factory: build a project tree under a fresh directory."""

    def _make(files: dict, name: str = "project") -> Path:
        return write_tree(tmp_path / name, files)

    return _make


@pytest.fixture
def config():
    """Sequential configuration so tests never spin up a worker pool."""
    return TriageConfig(workers=1)


@pytest.fixture
def store():
    """In-memory store with one pending project, ``p1``."""
    s = MemoryStore()
    s.create_project("p1")
    return s


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user and project config files and TRIAGE_* variables out of tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(home)
    for key in list(os.environ):
        if key.startswith("TRIAGE_"):
            monkeypatch.delenv(key)
