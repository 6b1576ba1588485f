"""Shared test fixtures and utilities."""

import os
from pathlib import Path

import pytest

from treesnap.core import FingerprintStrategy
from treesnap.engine import CommitEngine, init_project


@pytest.fixture(autouse=True)
def isolated_registry(tmp_path_factory, monkeypatch):
    """Keep the cross-project registry out of the real home directory."""
    home = tmp_path_factory.mktemp("treesnap-home")
    monkeypatch.setenv("TREESNAP_HOME", str(home))
    return home


@pytest.fixture
def project(tmp_path):
    """An initialized project (metadata strategy) rooted at tmp_path."""
    init_project(tmp_path)
    return tmp_path


@pytest.fixture
def hash_project(tmp_path):
    """An initialized project using the content hash strategy."""
    init_project(tmp_path, strategy=FingerprintStrategy.HASH)
    return tmp_path


@pytest.fixture
def engine(project):
    return CommitEngine(project)


@pytest.fixture
def write_file(tmp_path):
    """Factory fixture to write files relative to tmp_path."""
    def _write(path: str, content: str = "test content", mtime: int = None) -> Path:
        file_path = tmp_path / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)
        if mtime is not None:
            os.utime(file_path, (mtime, mtime))
        return file_path
    return _write
