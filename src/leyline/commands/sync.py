"""
``leyline sync``: fetch the selected standards and copy them into a project.

Architecture:
    ::

        SyncCommand.execute()
          ├── validate target path + categories
          ├── dry run?  → SyncReport(sparse_paths, target) and stop
          ├── fetch_remote_docs(categories)      git sparse checkout (temp dir)
          ├── FileSyncer(remote, target).sync()  cache-aware copy
          └── SyncState.save_sync_state()        upstream hashes of every synced *.md

Guardrails:
    ❌ DON'T: save sync state after a sync that reported file errors
    ✅ DO: keep the previous baseline so ``status`` stays truthful

Tags:
    leyline, commands, sync, git, cache
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from leyline import __version__
from leyline.cache.stats import CacheStats
from leyline.categories import build_sparse_paths, normalize_categories, validate_categories
from leyline.commands.base import BaseCommand
from leyline.core.errors import CommandError
from leyline.core.hashing import build_manifest
from leyline.core.logging import get_logger
from leyline.sync.file_syncer import FileSyncer, SyncResult
from leyline.sync.git_client import GitClient
from leyline.sync.remote import fetch_remote_docs
from leyline.sync.state import SyncState

logger = get_logger(__name__)

DEFAULT_CATEGORIES = ["core"]


@dataclass
class SyncReport:
    target: Path
    categories: list[str]
    sparse_paths: list[str]
    options: list[str] = field(default_factory=list)
    dry_run: bool = False
    result: SyncResult | None = None
    stats: CacheStats | None = None
    cache_directory_stats: dict[str, Any] | None = None
    cache_health_issues: list[dict[str, Any]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    state_saved: bool = False
    duration_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": str(self.target),
            "categories": list(self.categories),
            "sparse_paths": list(self.sparse_paths),
            "options": list(self.options),
            "dry_run": self.dry_run,
            "result": self.result.to_dict() if self.result else None,
            "stats": self.stats.to_dict() if self.stats else None,
            "cache_health_issues": list(self.cache_health_issues),
            "warnings": list(self.warnings),
            "state_saved": self.state_saved,
            "duration_ms": self.duration_ms,
        }


def validate_target_path(path: str | Path) -> Path:
    """Expanded target project path; raises CommandError when unusable."""
    raw = str(path)
    if raw.startswith("-"):
        raise CommandError(
            f"Invalid path '{raw}'. Path cannot start with a dash.",
            suggestions=["Use './" + raw + "' if the directory name really starts with a dash"],
        )
    target = Path(raw).expanduser().absolute()
    if not target.parent.is_dir():
        raise CommandError(
            f"Parent directory does not exist: {target.parent}",
            suggestions=["Create the parent directory first", "Check the path for typos"],
        )
    return target


class SyncCommand(BaseCommand):
    """Synchronize leyline standards into ``<directory>/docs/leyline``."""

    def __init__(
        self,
        directory: str | Path = ".",
        categories: list[str] | None = None,
        cache_dir: str | Path | None = None,
        verbose: bool = False,
        *,
        force: bool = False,
        force_git: bool = False,
        no_cache: bool = False,
        dry_run: bool = False,
        stats: bool = False,
        remote_url: str | None = None,
        remote_ref: str | None = None,
        git_client: GitClient | None = None,
    ):
        target = validate_target_path(directory)
        if categories:
            validate_categories(categories)
        super().__init__(target, normalize_categories(categories), cache_dir, verbose)
        self.force = force
        self.force_git = force_git
        self.no_cache = no_cache
        self.dry_run = dry_run
        self.show_stats = stats
        self.remote_url = remote_url
        self.remote_ref = remote_ref
        self.git_client = git_client

    def active_categories(self) -> list[str]:
        return list(self.categories or DEFAULT_CATEGORIES)

    def options(self) -> list[str]:
        flags = [
            ("force", self.force),
            ("force-git", self.force_git),
            ("no-cache", self.no_cache),
            ("dry-run", self.dry_run),
            ("stats", self.show_stats),
        ]
        return [name for name, enabled in flags if enabled]

    def execute(self) -> SyncReport:
        started = time.perf_counter()
        categories = self.active_categories()
        report = SyncReport(
            target=self.leyline_path,
            categories=categories,
            sparse_paths=build_sparse_paths(categories),
            options=self.options(),
            dry_run=self.dry_run,
        )
        if self.dry_run:
            logger.info("sync_dry_run", target=str(report.target), categories=categories)
            return report

        cache = None if self.no_cache else self.file_cache
        if cache is not None and self.verbose:
            health = cache.health_status()
            if not health["healthy"]:
                report.cache_health_issues = health["issues"]
        stats = CacheStats() if self.show_stats else None

        with fetch_remote_docs(
            categories,
            remote_url=self.remote_url,
            remote_ref=self.remote_ref,
            git_client=self.git_client,
        ) as remote_docs:
            syncer = FileSyncer(remote_docs, report.target, cache=cache, stats=stats)
            report.result = syncer.sync(force=self.force, force_git=self.force_git)
            remote_manifest = build_manifest(remote_docs)

        report.duration_ms = self.elapsed_ms(started)
        report.stats = stats
        if stats is not None and cache is not None:
            report.cache_directory_stats = cache.directory_stats()

        if report.result.ok:
            state = SyncState(self.cache_dir)
            report.state_saved = state.save_sync_state(
                categories,
                state.baseline_manifest(remote_manifest, build_manifest(report.target)),
                leyline_version=__version__,
                cache_hit_ratio=stats.hit_ratio if stats else None,
                sync_duration_ms=report.duration_ms,
            )
        else:
            logger.warning("sync_state_not_saved", errors=len(report.result.errors))

        report.warnings = list(self.warnings)
        return report
