"""
Content-addressed file cache.

Documents are stored by the SHA-256 of their text, sharded by the first two
hex characters::

    <cache_dir>/content/2c/f24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824

Manifesto:
    The cache must never be the reason a sync fails.  Constructor, ``put``
    and ``get`` swallow I/O problems, count them, and report them through
    :class:`~leyline.cache.error_handler.CacheErrorHandler`.  Every ``get``
    re-hashes what it read, so a corrupted entry is deleted and treated as a
    miss instead of being copied into a project.

Examples:
    >>> cache = FileCache("/tmp/leyline-cache")
    >>> key = cache.put("# Simplicity")
    >>> cache.get(key)
    '# Simplicity'
    >>> cache.get("not-a-hash") is None
    True

Tags:
    leyline, cache, content-addressed, sha256, filesystem
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Any

from leyline.cache.error_handler import CacheErrorHandler
from leyline.core.config import get_settings
from leyline.core.hashing import content_hash, is_sha256
from leyline.core.logging import get_logger

logger = get_logger(__name__)

MAX_CACHE_BYTES = 500 * 1024 * 1024


class FileCache:
    """SHA-256 keyed store of document text under ``<cache_dir>/content``."""

    def __init__(self, cache_dir: str | Path | None = None, error_handler: CacheErrorHandler | None = None):
        if cache_dir is None:
            cache_dir = get_settings().cache_path
        self.cache_dir = Path(cache_dir).expanduser()
        self.content_dir = self.cache_dir / "content"
        self.error_handler = error_handler or CacheErrorHandler()
        self.operation_count = 0
        self.error_count = 0
        self.init_error: str | None = None

        try:
            self.content_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.init_error = str(e)
            self.error_count += 1
            self.error_handler.handle_error(e, "initialize", cache_dir=str(self.cache_dir))

    def _path_for(self, digest: str) -> Path:
        return self.content_dir / digest[:2] / digest[2:]

    def put(self, content: Any) -> str | None:
        """Store ``content``; return its hash, or None when it cannot be stored."""
        if not isinstance(content, str):
            return None

        self.operation_count += 1
        digest = content_hash(content)
        target = self._path_for(digest)
        if target.is_file():
            return digest

        tmp = target.with_name(f"{target.name}.{os.getpid()}.tmp")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(content.encode("utf-8"))
            os.replace(tmp, target)
        except OSError as e:
            self.error_count += 1
            tmp.unlink(missing_ok=True)
            self.error_handler.handle_error(e, "put", cache_path=str(target))
            self.error_handler.attempt_recovery(self.cache_dir, e)
            return None

        logger.debug("cache_put", hash=digest[:12])
        return digest

    def get(self, digest: Any) -> str | None:
        """Return cached text for ``digest``; None when missing, invalid or corrupt."""
        if not is_sha256(digest):
            return None

        self.operation_count += 1
        path = self._path_for(digest)
        if not path.is_file():
            return None

        try:
            content = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self.error_count += 1
            self.error_handler.handle_error(e, "get", cache_path=str(path))
            return None

        if content_hash(content) != digest:
            self.error_count += 1
            self.error_handler.warn("Corrupted cache entry removed", cache_path=str(path))
            try:
                path.unlink()
            except OSError as e:
                self.error_handler.handle_error(e, "delete", cache_path=str(path))
            return None

        return content

    def contains(self, digest: str) -> bool:
        return is_sha256(digest) and self._path_for(digest).is_file()

    def clear(self) -> None:
        """Remove every cached entry."""
        try:
            if self.content_dir.exists():
                shutil.rmtree(self.content_dir)
            self.content_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.error_count += 1
            self.error_handler.handle_error(e, "clear", cache_dir=str(self.cache_dir))

    # ── Health / stats ───────────────────────────────────────────────────

    @property
    def error_rate(self) -> float:
        """Errors as a percentage of operations."""
        if not self.operation_count:
            return 100.0 if self.error_count else 0.0
        return round(self.error_count / self.operation_count * 100, 2)

    def health_status(self) -> dict[str, Any]:
        issues = self.error_handler.check_cache_health(self.cache_dir)
        if self.init_error:
            issues.append({"type": "init_failed", "error": self.init_error})
        return {
            "healthy": not issues,
            "issues": issues,
            "error_rate": self.error_rate,
            "operation_count": self.operation_count,
            "error_count": self.error_count,
        }

    def directory_stats(self) -> dict[str, Any]:
        size = 0
        file_count = 0
        if self.content_dir.is_dir():
            for path in self.content_dir.rglob("*"):
                if path.is_file():
                    try:
                        size += path.stat().st_size
                    except OSError:
                        continue
                    file_count += 1
        return {
            "path": str(self.cache_dir),
            "size": size,
            "file_count": file_count,
            "utilization_percent": round(size / MAX_CACHE_BYTES * 100, 2),
        }

    def __repr__(self) -> str:
        return f"FileCache({str(self.cache_dir)!r})"
