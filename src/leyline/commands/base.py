"""
Shared plumbing for the sync/status/diff/update commands.

Commands gather data and return it; they never print.  ``leyline.cli``
renders what they return and turns raised :class:`LeylineError` instances
into the ``Error: ...`` / ``To resolve this issue, try:`` block.

Tags:
    leyline, commands, error-normalization
"""

from __future__ import annotations

import errno
import time
from pathlib import Path
from typing import Any

import yaml

from leyline.cache.file_cache import FileCache
from leyline.categories import (
    build_search_patterns,
    discover_categories,
    normalize_categories,
    validate_categories,
)
from leyline.core.config import LeylineFile, get_settings
from leyline.core.errors import (
    CacheOperationError,
    CommandError,
    FileSystemError,
    GitCommandError,
    InvalidSyncStateError,
    LeylineError,
    RemoteAccessError,
)
from leyline.core.hashing import file_hash
from leyline.core.logging import get_logger

logger = get_logger(__name__)

_NETWORK_MARKERS = (
    "could not resolve host",
    "unable to access",
    "connection",
    "timed out",
    "network",
    "repository not found",
)


def normalize_error(exc: BaseException, *, cache_dir: str | Path | None = None) -> LeylineError:
    """Map any exception raised inside a command onto the leyline hierarchy."""
    if isinstance(exc, GitCommandError):
        details = f"{exc.message} {exc.stderr_output or ''}".lower()
        if any(marker in details for marker in _NETWORK_MARKERS):
            return RemoteAccessError(
                f"Failed to reach the leyline repository: {exc.message}",
                operation_type="fetch",
                cause=exc,
            )
        return exc
    if isinstance(exc, LeylineError):
        return exc
    if isinstance(exc, PermissionError):
        return FileSystemError(
            "Permission denied accessing files",
            path=exc.filename,
            reason="permission_denied",
            cause=exc,
        )
    if isinstance(exc, FileNotFoundError):
        return CommandError(f"File or directory not found: {exc.filename or exc}", cause=exc)
    if isinstance(exc, OSError) and exc.errno == errno.ENOSPC:
        return CacheOperationError(
            "No space left on device",
            cache_path=str(cache_dir) if cache_dir else None,
            operation_type="disk_full",
            cause=exc,
        )
    if isinstance(exc, yaml.YAMLError):
        return InvalidSyncStateError("Data file is corrupted", cause=exc)
    return CommandError(str(exc) or type(exc).__name__, cause=exc)


class BaseCommand:
    """Common state for commands operating on ``<directory>/docs/leyline``."""

    def __init__(
        self,
        directory: str | Path = ".",
        categories: list[str] | None = None,
        cache_dir: str | Path | None = None,
        verbose: bool = False,
    ):
        self.base_directory = Path(directory).expanduser().absolute()
        self.cache_dir = Path(cache_dir).expanduser() if cache_dir else get_settings().cache_path
        self.categories = list(categories) if categories else None
        self.verbose = verbose
        self.warnings: list[str] = []
        self._file_cache: FileCache | None = None
        self._file_cache_loaded = False

    @property
    def leyline_path(self) -> Path:
        return self.base_directory / "docs" / "leyline"

    def leyline_exists(self) -> bool:
        return self.leyline_path.is_dir()

    def active_categories(self) -> list[str]:
        if self.categories:
            return list(self.categories)
        return discover_categories(self.leyline_path)

    @property
    def file_cache(self) -> FileCache | None:
        """Lazily created cache; None when it cannot be initialized."""
        if not self._file_cache_loaded:
            self._file_cache_loaded = True
            cache = FileCache(self.cache_dir)
            if cache.init_error:
                self.warnings.append(f"Cache initialization failed: {cache.init_error}")
                logger.warning("cache_init_failed", error=cache.init_error)
            else:
                self._file_cache = cache
        return self._file_cache

    def cache_available(self) -> bool:
        return self.file_cache is not None

    def discover_files(self, root: Path | None = None, categories: list[str] | None = None) -> list[Path]:
        """Markdown files under ``root`` selected by the category patterns."""
        root = root or self.leyline_path
        if not root.is_dir():
            return []
        found: set[Path] = set()
        for pattern in build_search_patterns(categories or self.active_categories()):
            found.update(p for p in root.glob(pattern) if p.is_file())
        return sorted(found)

    def relative_manifest(self, root: Path, files: list[Path]) -> dict[str, str]:
        """``relative posix path → sha256`` for readable files."""
        manifest: dict[str, str] = {}
        for path in files:
            try:
                manifest[path.relative_to(root).as_posix()] = file_hash(path)
            except PermissionError as e:
                self.warnings.append(f"Cannot read {path.relative_to(root).as_posix()}: {e}")
        return manifest

    def normalize_error(self, exc: BaseException) -> LeylineError:
        return normalize_error(exc, cache_dir=self.cache_dir)

    @staticmethod
    def elapsed_ms(started: float) -> float:
        return round((time.perf_counter() - started) * 1000, 2)

    def execute(self) -> Any:
        raise NotImplementedError


def resolve_categories(
    directory: str | Path, explicit: list[str] | None
) -> tuple[list[str] | None, str | None]:
    """Category selection for a project and where it came from.

    ``-c`` wins; otherwise a valid ``.leyline`` file in ``directory`` is used.
    Returns ``(None, None)`` when neither selects anything.
    """
    if explicit:
        validate_categories(explicit)
        return normalize_categories(explicit), "command line"

    leyline_file = LeylineFile.load(directory)
    if leyline_file is None:
        return None, None
    if not leyline_file.valid:
        logger.warning("leyline_file_invalid", path=str(leyline_file.file_path), errors=leyline_file.errors)
        return None, None
    selected = normalize_categories(leyline_file.categories)
    return (selected, ".leyline file") if selected else (None, None)
