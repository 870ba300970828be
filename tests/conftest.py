"""
Shared pytest fixtures and configuration for leyline tests.

This module provides:
- Settings/logging isolation (every test gets its own cache directory)
- A sample standards corpus on disk
- A git repository serving that corpus over file://, for sync tests

Usage:
    Fixtures are auto-discovered by pytest::

        def test_something(leyline_repo, remote_url):
            ...
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Iterator
from pathlib import Path

import pytest

from _support import build_docs, build_repo, git_installed, init_git_repo
from leyline.core.config import clear_settings_cache
from leyline.core.logging import configure_logging

# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Fresh settings per test with the cache under ``tmp_path``."""
    for key in list(os.environ):
        if key.startswith("LEYLINE_"):
            monkeypatch.delenv(key, raising=False)
    cache_dir = tmp_path / "cache"
    monkeypatch.setenv("LEYLINE_CACHE_DIR", str(cache_dir))
    clear_settings_cache()
    configure_logging("WARNING")
    yield cache_dir
    clear_settings_cache()


@pytest.fixture
def cache_dir(isolated_settings: Path) -> Path:
    return isolated_settings


# =============================================================================
# Corpus fixtures
# =============================================================================


@pytest.fixture
def leyline_repo(tmp_path: Path) -> Path:
    """A leyline repository checkout with VERSION and docs/."""
    return build_repo(tmp_path / "leyline-repo")


@pytest.fixture
def docs_root(tmp_path: Path) -> Path:
    """A bare docs tree (tenets/, bindings/core, bindings/categories)."""
    return build_docs(tmp_path / "docs-tree")


@pytest.fixture
def project(tmp_path: Path) -> Path:
    directory = tmp_path / "project"
    directory.mkdir()
    return directory


@pytest.fixture
def synced_project(project: Path, docs_root: Path) -> Path:
    """A project whose docs/leyline already holds the sample corpus."""
    shutil.copytree(docs_root, project / "docs" / "leyline")
    return project


# =============================================================================
# Git fixtures
# =============================================================================


@pytest.fixture
def remote_url(leyline_repo: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Serve ``leyline_repo`` over file:// and point LEYLINE_REMOTE_URL at it."""
    if not git_installed():
        pytest.skip("git is not installed")
    url = init_git_repo(leyline_repo)
    monkeypatch.setenv("LEYLINE_REMOTE_URL", url)
    monkeypatch.setenv("LEYLINE_REMOTE_REF", "master")
    clear_settings_cache()
    return url
