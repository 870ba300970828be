"""File and manifest comparison for status, diff and update."""

from __future__ import annotations

import difflib
import errno
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from leyline.cache.file_cache import FileCache
from leyline.core.errors import ComparisonFailedError
from leyline.core.hashing import content_hash
from leyline.core.logging import get_logger

logger = get_logger(__name__)


class FileComparator:
    """Hash-based comparison of files and manifests.

    When a cache is given, every file read for hashing is also stored in the
    cache so later syncs can be served from it.
    """

    def __init__(self, cache: FileCache | None = None):
        self.cache = cache

    def content_hash(self, path: str | Path) -> str:
        path = Path(path)
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            raise ComparisonFailedError(str(path), reason="file_not_found", cause=e) from e
        except PermissionError as e:
            raise ComparisonFailedError(str(path), reason="permission_denied", cause=e) from e
        except OSError as e:
            if e.errno in (errno.EMFILE, errno.ENFILE):
                raise ComparisonFailedError(str(path), reason="too_many_files", cause=e) from e
            raise ComparisonFailedError(str(path), reason=str(e), cause=e) from e

        if self.cache is not None:
            try:
                self.cache.put(data.decode("utf-8"))
            except UnicodeDecodeError as e:
                raise ComparisonFailedError(str(path), reason="encoding_error", cause=e) from e
        return content_hash(data)

    def create_manifest(self, paths: list[str | Path]) -> dict[str, str]:
        """Map each readable path to its hash; unreadable files are skipped."""
        manifest: dict[str, str] = {}
        for path in paths:
            if not Path(path).exists():
                continue
            try:
                manifest[str(path)] = self.content_hash(path)
            except ComparisonFailedError as e:
                logger.warning("manifest_hash_failed", file=str(path), reason=e.reason)
        return manifest

    def files_identical(self, file_a: str | Path, file_b: str | Path) -> bool:
        a, b = Path(file_a), Path(file_b)
        if not (a.exists() and b.exists()):
            return False
        if a == b:
            return True
        try:
            if a.stat().st_size != b.stat().st_size:
                return False
            return self.content_hash(a) == self.content_hash(b)
        except (OSError, ComparisonFailedError):
            return False

    def generate_diff_data(self, file_a: str | Path, file_b: str | Path) -> dict[str, Any]:
        a, b = Path(file_a), Path(file_b)
        for path in (a, b):
            if not path.exists():
                raise ComparisonFailedError(str(a), str(b), reason="file_not_found")

        stat_a, stat_b = a.stat(), b.stat()
        return {
            "file_a": str(a),
            "file_b": str(b),
            "identical": self.files_identical(a, b),
            "size_a": stat_a.st_size,
            "size_b": stat_b.st_size,
            "hash_a": self.content_hash(a),
            "hash_b": self.content_hash(b),
            "modified_time_a": datetime.fromtimestamp(stat_a.st_mtime, tz=timezone.utc),
            "modified_time_b": datetime.fromtimestamp(stat_b.st_mtime, tz=timezone.utc),
        }

    def detect_modifications(
        self, base_manifest: dict[str, str] | None, paths: list[str | Path] | None
    ) -> list[str]:
        """Paths whose hash differs from, or is absent in, ``base_manifest``."""
        if base_manifest is None or paths is None:
            return []
        modified = []
        for path in paths:
            if not Path(path).exists():
                continue
            if base_manifest.get(str(path)) != self.content_hash(path):
                modified.append(str(path))
        return modified

    @staticmethod
    def compare_manifests(local: dict[str, str], remote: dict[str, str]) -> dict[str, list[str]]:
        """Classify relative paths present locally and/or remotely."""
        local_files, remote_files = set(local), set(remote)
        common = local_files & remote_files
        return {
            "added": sorted(remote_files - local_files),
            "removed": sorted(local_files - remote_files),
            "modified": sorted(p for p in common if local[p] != remote[p]),
            "unchanged": sorted(p for p in common if local[p] == remote[p]),
        }

    @staticmethod
    def unified_diff(local_path: str | Path, remote_path: str | Path, relative: str) -> str:
        """``git diff`` style text for one file."""
        local_lines = _read_lines(local_path)
        remote_lines = _read_lines(remote_path)
        diff = difflib.unified_diff(
            local_lines, remote_lines, fromfile=f"a/{relative}", tofile=f"b/{relative}"
        )
        return f"diff --git a/{relative} b/{relative}\n" + "".join(diff)


def _read_lines(path: str | Path) -> list[str]:
    path = Path(path)
    if not path.exists():
        return []
    lines = path.read_text(encoding="utf-8", errors="replace").splitlines(keepends=True)
    if lines and not lines[-1].endswith("\n"):
        lines[-1] += "\n"
    return lines
