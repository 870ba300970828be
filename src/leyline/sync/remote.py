"""Fetch the upstream docs tree for a category selection into a temp dir."""

from __future__ import annotations

import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from leyline.categories import build_sparse_paths
from leyline.core.config import get_settings
from leyline.core.errors import GitError
from leyline.core.logging import get_logger
from leyline.sync.git_client import GitClient

logger = get_logger(__name__)


@contextmanager
def fetch_remote_docs(
    categories: list[str],
    base_dir: str | Path | None = None,
    remote_url: str | None = None,
    remote_ref: str | None = None,
    git_client: GitClient | None = None,
) -> Iterator[Path]:
    """Yield the fetched ``docs`` root; the temp checkout is always removed.

    When the fetch fails and ``base_dir`` is itself a leyline source checkout
    (a git repository whose ``docs/tenets`` exists), its local ``docs/`` is
    used instead.  Any other project re-raises the fetch error.
    """
    settings = get_settings()
    remote_url = remote_url or settings.remote_url
    remote_ref = remote_ref or settings.remote_ref
    client = git_client or GitClient()
    temp_dir = Path(tempfile.mkdtemp(prefix="leyline-remote-"))

    try:
        try:
            client.setup_sparse_checkout(temp_dir)
            client.add_sparse_paths(build_sparse_paths(categories))
            client.fetch_version(remote_url, remote_ref)
        except GitError as e:
            if not _is_source_checkout(base_dir):
                raise
            fallback = Path(base_dir) / "docs"
            logger.warning("remote_fetch_fallback", error=e.message, docs=str(fallback))
            shutil.rmtree(temp_dir / "docs", ignore_errors=True)
            shutil.copytree(fallback, temp_dir / "docs")
        yield temp_dir / "docs"
    finally:
        client.cleanup()
        shutil.rmtree(temp_dir, ignore_errors=True)


def _is_source_checkout(base_dir: str | Path | None) -> bool:
    if not base_dir:
        return False
    base = Path(base_dir)
    return (base / ".git").exists() and (base / "docs" / "tenets").is_dir()
