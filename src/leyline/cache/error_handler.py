"""
Cache diagnostics that never interrupt a sync.

Cache problems are warnings, not failures: a broken cache only costs
performance.  :class:`CacheErrorHandler` reports them on stderr, either as a
human line (``WARNING: [Cache] ...``) or, with
``LEYLINE_STRUCTURED_LOGGING=true``, as ``cache_warning``/``cache_error``
structlog events rendered by the configured JSON pipeline.

Guardrails:
    ❌ DON'T: raise from cache code paths used by sync
    ✅ DO: ``CacheErrorHandler().handle_error(e, "put")`` and fall back

Tags:
    leyline, cache, diagnostics, stderr
"""

from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path
from typing import Any, TextIO

from leyline.core.config import LeylineSettings, get_settings
from leyline.core.logging import get_logger

logger = get_logger(__name__)

LARGE_CACHE_BYTES = 500 * 1024 * 1024


class CacheErrorHandler:
    """Report cache warnings/errors and inspect cache directory health."""

    def __init__(self, settings: LeylineSettings | None = None, stream: TextIO | None = None):
        self._settings = settings
        self._stream = stream

    @property
    def settings(self) -> LeylineSettings:
        return self._settings or get_settings()

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stderr

    # ── Reporting ────────────────────────────────────────────────────────

    def warn(self, message: str, **context: Any) -> None:
        if not self.settings.cache_warnings:
            return
        if self.settings.structured_logging:
            logger.warning("cache_warning", message=message, **context)
        else:
            self._print("WARNING", message, context.get("operation"))

    def handle_error(self, error: BaseException, operation: str, **context: Any) -> None:
        if not self.settings.cache_warnings:
            logger.debug("cache_error", operation=operation, error=str(error))
            return
        if self.settings.structured_logging:
            logger.error(
                "cache_error",
                message=str(error),
                operation=operation,
                error_class=type(error).__name__,
                **context,
            )
        else:
            self._print("ERROR", str(error), operation)

    def _print(self, prefix: str, message: str, operation: str | None) -> None:
        line = f"{prefix}: [Cache] {message}"
        if self.settings.debug and operation:
            line += f" (operation: {operation})"
        print(line, file=self.stream)

    # ── Health ───────────────────────────────────────────────────────────

    def check_cache_health(self, cache_dir: str | Path) -> list[dict[str, Any]]:
        """Return a list of ``{type, ...}`` issues; empty means healthy."""
        cache_dir = Path(cache_dir)
        issues: list[dict[str, Any]] = []

        if not cache_dir.is_dir():
            issues.append({"type": "missing_directory", "path": str(cache_dir)})
        else:
            if not os.access(cache_dir, os.R_OK):
                issues.append({"type": "not_readable", "path": str(cache_dir)})
            if not os.access(cache_dir, os.W_OK):
                issues.append({"type": "not_writable", "path": str(cache_dir)})

        try:
            cache_dir.stat()
            size = _content_size(cache_dir / "content")
            if size > LARGE_CACHE_BYTES:
                issues.append({"type": "large_cache", "size": size})
        except OSError as e:
            issues.append({"type": "stat_failed", "error": str(e)})

        return issues

    def attempt_recovery(self, cache_dir: str | Path, error: BaseException) -> bool:
        """Recreate the content directory when auto recovery is enabled."""
        if not self.settings.cache_auto_recovery:
            return False

        self.warn("Attempting cache recovery", cache_dir=str(cache_dir), error=str(error))
        content_dir = Path(cache_dir) / "content"
        try:
            if content_dir.exists():
                shutil.rmtree(content_dir)
            content_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.handle_error(e, "recovery", cache_dir=str(cache_dir))
            return False
        logger.info("cache_recovered", cache_dir=str(cache_dir))
        return True


def _content_size(content_dir: Path) -> int:
    if not content_dir.is_dir():
        return 0
    return sum(p.stat().st_size for p in content_dir.rglob("*") if p.is_file())
