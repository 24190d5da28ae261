"""Shared fixtures for aioundo tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from aioundo.git.backend import GitBackend
from aioundo.undo.engine import UndoEngine


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project directory with a couple of files and no repository yet."""
    project = tmp_path / "project"
    project.mkdir()
    (project / "README.md").write_text("# demo\n")
    src = project / "src"
    src.mkdir()
    (src / "app.txt").write_text("app v1\n")
    return project


@pytest.fixture
def backend(tmp_path: Path) -> GitBackend:
    """A fresh repository with one commit on ``master``."""
    root = tmp_path / "repo"
    root.mkdir()
    git_backend = GitBackend(root)
    git_backend.init()
    (root / "base.txt").write_text("base\n")
    git_backend.stage_all_and_commit("base commit")
    return git_backend


@pytest.fixture
def engine(project_dir: Path) -> UndoEngine:
    """An installed undo engine."""
    undo_engine = UndoEngine(project_dir)
    undo_engine.install()
    return undo_engine
