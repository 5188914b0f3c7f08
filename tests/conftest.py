"""Shared test fixtures for fnregistry tests."""

import logging
import os
from pathlib import Path

import pytest


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


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo setup_logging() calls made by a test."""
    root = logging.getLogger()
    package = logging.getLogger("fnregistry")
    handlers, root_level, package_level = root.handlers[:], root.level, package.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(root_level)
    package.setLevel(package_level)


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Run with no global/project config files and no FNREGISTRY_* variables."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    for key in list(os.environ):
        if key.startswith("FNREGISTRY_"):
            monkeypatch.delenv(key)
    return work


@pytest.fixture
def write_tree(tmp_path):
    """Write a {relative path: text} mapping under tmp_path and return the root."""

    def _write(files, root: Path = None) -> Path:
        base = root or tmp_path
        for rel, text in files.items():
            path = base / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return base

    return _write


C_LIBRARY = """\
#include <stdio.h>

int bar(void) {
    return 1;
}
"""

C_CALLER = """\
int main(void) {
    bar();
    bar();
    return bar();
}
"""


@pytest.fixture
def c_project(write_tree, tmp_path):
    """Two C files: bar() defined in one and called three times from the other."""
    root = tmp_path / "cproj"
    write_tree({"a.c": C_LIBRARY, "b.c": C_CALLER}, root)
    return root
