"""``leyline diff``: local ``docs/leyline`` against the upstream standards."""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from leyline.commands.base import BaseCommand
from leyline.core.config import get_settings
from leyline.core.errors import CommandError, GitCommandError, GitNotAvailableError, RemoteAccessError
from leyline.core.logging import get_logger
from leyline.sync.comparator import FileComparator
from leyline.sync.git_client import GitClient
from leyline.sync.remote import fetch_remote_docs

logger = get_logger(__name__)

MISSING_LEYLINE_SUGGESTIONS = [
    "Run leyline sync first to establish baseline",
    "Check if files exist in docs/leyline directory",
    "Use --verbose flag for detailed error information",
]


class DiffCommand(BaseCommand):
    def __init__(
        self,
        directory: str | Path = ".",
        categories: list[str] | None = None,
        cache_dir: str | Path | None = None,
        verbose: bool = False,
        *,
        remote_url: str | None = None,
        remote_ref: str | None = None,
        git_client: GitClient | None = None,
    ):
        super().__init__(directory, categories, cache_dir, verbose)
        self.remote_url = remote_url
        self.remote_ref = remote_ref
        self.git_client = git_client

    def execute(self) -> dict[str, Any]:
        started = time.perf_counter()
        if not self.leyline_exists():
            raise CommandError(
                "No leyline directory found to compare",
                suggestions=MISSING_LEYLINE_SUGGESTIONS,
                context={"leyline_path": str(self.leyline_path)},
            )

        categories = self.active_categories()
        local_manifest = self.relative_manifest(self.leyline_path, self.discover_files(categories=categories))

        with self.remote_docs(categories) as remote_root:
            remote_manifest = self.relative_manifest(
                remote_root, self.discover_files(remote_root, categories)
            )
            changes = FileComparator.compare_manifests(local_manifest, remote_manifest)
            unified_diffs = {
                relative: FileComparator.unified_diff(
                    self.leyline_path / relative, remote_root / relative, relative
                )
                for relative in changes["modified"]
            }

        return {
            "summary": {
                "total_changes": sum(len(changes[k]) for k in ("added", "modified", "removed")),
                "added_files": len(changes["added"]),
                "modified_files": len(changes["modified"]),
                "removed_files": len(changes["removed"]),
            },
            "changes": {k: changes[k] for k in ("added", "modified", "removed")},
            "unified_diffs": unified_diffs,
            "categories": categories,
            "base_directory": str(self.base_directory),
            "performance": {
                "execution_time_ms": self.elapsed_ms(started),
                "files_compared": len(set(local_manifest) | set(remote_manifest)),
            },
        }

    @contextmanager
    def remote_docs(self, categories: list[str]) -> Iterator[Path]:
        """``fetch_remote_docs`` with git failures turned into command errors."""
        try:
            with fetch_remote_docs(
                categories,
                base_dir=self.base_directory,
                remote_url=self.remote_url,
                remote_ref=self.remote_ref,
                git_client=self.git_client,
            ) as remote_root:
                yield remote_root
        except GitNotAvailableError as e:
            raise CommandError(
                "Git is required for diff operations but was not found",
                suggestions=["Install git and make sure it is on your PATH"],
                cause=e,
            ) from e
        except GitCommandError as e:
            raise RemoteAccessError(
                f"Failed to fetch remote content: {e.message}",
                url=self.remote_url or get_settings().remote_url,
                operation_type="fetch",
                cause=e,
            ) from e
