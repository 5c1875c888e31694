"""Shared test fixtures for tmplsync tests."""

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from typer.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner(env={"COLUMNS": "200"})


@pytest.fixture
def make_version_dir(tmp_path: Path) -> Callable[..., Path]:
    """Factory for version content directories.

    Usage: make_version_dir("v1", {"main.tf": "..."}) creates tmp_path/v1 with
    the given files (nested paths allowed).
    """

    def _make(name: str, files: dict[str, str] | None = None) -> Path:
        directory = tmp_path / name
        directory.mkdir(parents=True, exist_ok=True)
        for relative, content in (files or {"main.tf": f"# {name}\n"}).items():
            path = directory / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return directory

    return _make


@pytest.fixture
def project_root(tmp_path: Path) -> Generator[Path, None, None]:
    """Create an initialized project and chdir into it for the test."""
    (tmp_path / ".tmplsync" / "state").mkdir(parents=True)
    original_cwd = os.getcwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(original_cwd)
