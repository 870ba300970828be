"""
Cache-aware copy of a fetched docs tree into a project.

Flow::

    sync(force, force_git)
      │
      ├─ cache fast path (cache present, not force_git, files present)
      │     hit ratio >= threshold and every target identical
      │     → everything "skipped", git work recorded as avoided
      │
      └─ per file
            target missing            → copy
            target identical          → skip
            target differs, no force  → skip (local edits preserved)
            target differs, force     → copy

Cache failures are logged and ignored; only copy failures end up in
``SyncResult.errors``.

Tags:
    leyline, sync, cache, filesystem
"""

from __future__ import annotations

import shutil
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from leyline.cache.file_cache import FileCache
from leyline.cache.stats import CacheStats
from leyline.core.config import get_settings
from leyline.core.errors import SyncError
from leyline.core.hashing import content_hash
from leyline.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SyncResult:
    copied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[dict[str, str]] = field(default_factory=list)
    served_from_cache: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "copied": list(self.copied),
            "skipped": list(self.skipped),
            "errors": list(self.errors),
            "served_from_cache": self.served_from_cache,
        }


class FileSyncer:
    """Copy every file under ``source_dir`` into ``target_dir``."""

    def __init__(
        self,
        source_dir: str | Path,
        target_dir: str | Path,
        cache: FileCache | None = None,
        stats: CacheStats | None = None,
        threshold: float | None = None,
    ):
        self.source_dir = Path(source_dir)
        self.target_dir = Path(target_dir)
        self.cache = cache
        self.stats = stats
        self.threshold = get_settings().cache_threshold if threshold is None else threshold

    def sync(
        self, force: bool = False, force_git: bool = False, paths: Iterable[str] | None = None
    ) -> SyncResult:
        """Copy the source tree, or only ``paths`` (relative, POSIX) when given."""
        if self.stats:
            self.stats.start_sync_timing()

        if not self.source_dir.is_dir():
            raise SyncError(
                f"Source directory does not exist: {self.source_dir}",
                operation="sync",
                context={"source_dir": str(self.source_dir)},
            )
        if self.target_dir.name.startswith("-"):
            raise SyncError(
                f"Invalid target directory name '{self.target_dir.name}'. "
                "Directory names cannot start with a dash.",
                operation="sync",
            )

        self.target_dir.mkdir(parents=True, exist_ok=True)
        result = SyncResult()
        source_files = self._find_files()
        if paths is not None:
            wanted = set(paths)
            source_files = [f for f in source_files if f in wanted]

        if self.cache is not None and not force_git and source_files:
            started = time.perf_counter()
            ratio = self.cache_hit_ratio(source_files)
            if self.stats:
                self.stats.add_cache_check_time(time.perf_counter() - started)

            if ratio >= self.threshold and self._targets_match(source_files):
                logger.info("sync_served_from_cache", hit_ratio=round(ratio, 3))
                if self.stats:
                    self.stats.record_git_operations_skipped()
                    self.stats.end_sync_timing()
                result.skipped.extend(source_files)
                result.served_from_cache = True
                return result
            logger.debug("sync_cache_insufficient", hit_ratio=round(ratio, 3), threshold=self.threshold)

        for relative in source_files:
            self._sync_file(relative, force, result)

        if self.stats:
            self.stats.end_sync_timing()
        logger.info(
            "sync_completed",
            copied=len(result.copied),
            skipped=len(result.skipped),
            errors=len(result.errors),
        )
        return result

    def cache_hit_ratio(self, source_files: list[str]) -> float:
        """Share of source files whose content is already cached."""
        if self.cache is None or not source_files:
            return 0.0

        hits = 0
        for relative in source_files:
            try:
                digest = content_hash((self.source_dir / relative).read_bytes())
                found = self.cache.get(digest) is not None
            except Exception as e:  # cache failures are non-fatal
                logger.debug("cache_lookup_failed", file=relative, error=str(e))
                found = False
            if found:
                hits += 1
            if self.stats and found:
                self.stats.record_hit()
            elif self.stats:
                self.stats.record_miss()
        return hits / len(source_files)

    # ── Internals ────────────────────────────────────────────────────────

    def _find_files(self) -> list[str]:
        return sorted(
            path.relative_to(self.source_dir).as_posix()
            for path in self.source_dir.rglob("*")
            if path.is_file()
        )

    def _targets_match(self, source_files: list[str]) -> bool:
        for relative in source_files:
            target = self.target_dir / relative
            if not target.is_file():
                return False
            try:
                if (self.source_dir / relative).read_bytes() != target.read_bytes():
                    return False
            except OSError:
                return False
        return True

    def _sync_file(self, relative: str, force: bool, result: SyncResult) -> None:
        source = self.source_dir / relative
        target = self.target_dir / relative

        target_existed = target.exists()
        if target_existed and (not self._files_differ(source, target) or not force):
            result.skipped.append(relative)
            return

        try:
            self._copy(source, target)
        except OSError as e:
            logger.warning("sync_copy_failed", file=relative, error=str(e))
            result.errors.append({"file": relative, "error": str(e)})
            return

        result.copied.append(relative)
        # existing targets were already cached while comparing
        if not target_existed:
            self._cache_put(source)

    def _copy(self, source: Path, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)

    def _files_differ(self, source: Path, target: Path) -> bool:
        try:
            source_bytes = source.read_bytes()
            target_bytes = target.read_bytes()
        except OSError:
            return True
        self._cache_content(source_bytes)
        return content_hash(source_bytes) != content_hash(target_bytes)

    def _cache_put(self, source: Path) -> None:
        try:
            self._cache_content(source.read_bytes())
        except OSError as e:
            logger.debug("cache_put_failed", file=str(source), error=str(e))

    def _cache_content(self, data: bytes) -> None:
        if self.cache is None:
            return
        try:
            stored = self.cache.put(data.decode("utf-8"))
        except Exception as e:  # cache failures are non-fatal
            logger.debug("cache_put_failed", error=str(e))
            return
        if stored and self.stats:
            self.stats.record_put()
