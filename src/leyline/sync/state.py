"""
Persistent record of the last successful sync.

``status``, ``diff`` and ``update`` compare the working tree against the
manifest saved here, so local edits can be told apart from upstream
changes.  The file lives next to the content cache::

    <cache_dir>/sync_state.yaml

    version: 1
    timestamp: '2026-03-01T12:00:00+00:00'
    leyline_version: 0.1.0
    categories: [core, typescript]
    manifest:
      tenets/simplicity.md: 2cf24d...
    metadata:
      total_files: 1

Writes go to ``sync_state.yaml.tmp`` first and are renamed into place so a
crash never leaves a half-written state.

Tags:
    leyline, sync-state, yaml, manifest
"""

from __future__ import annotations

import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from leyline import __version__
from leyline.cache.error_handler import CacheErrorHandler
from leyline.core.config import get_settings
from leyline.core.errors import SyncStateError
from leyline.core.hashing import is_sha256
from leyline.core.logging import get_logger

logger = get_logger(__name__)

SCHEMA_VERSION = 1
STATE_FILENAME = "sync_state.yaml"


class SyncState:
    """Load/save the sync state file inside a cache directory."""

    def __init__(self, cache_dir: str | Path | None = None, error_handler: CacheErrorHandler | None = None):
        if cache_dir is None:
            cache_dir = get_settings().cache_path
        self._cache_dir = Path(cache_dir).expanduser()
        self._state_file = self._cache_dir / STATE_FILENAME
        self._error_handler = error_handler or CacheErrorHandler()

    @property
    def cache_directory(self) -> Path:
        return self._cache_dir

    @property
    def state_file_path(self) -> Path:
        return self._state_file

    def save_sync_state(
        self,
        categories: list[str],
        manifest: dict[str, str],
        leyline_version: str | None = None,
        cache_hit_ratio: float | None = None,
        sync_duration_ms: float | None = None,
    ) -> bool:
        """Validate and atomically write the state; False on I/O failure."""
        _validate_metadata(categories, manifest)

        metadata: dict[str, Any] = {"total_files": len(manifest)}
        if cache_hit_ratio is not None:
            metadata["cache_hit_ratio"] = cache_hit_ratio
        if sync_duration_ms is not None:
            metadata["sync_duration_ms"] = sync_duration_ms

        state = {
            "version": SCHEMA_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "leyline_version": leyline_version or __version__,
            "categories": list(categories),
            "manifest": dict(manifest),
            "metadata": metadata,
        }

        tmp = self._state_file.with_name(f"{STATE_FILENAME}.tmp")
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            tmp.write_text(yaml.safe_dump(state, sort_keys=False), encoding="utf-8")
            os.replace(tmp, self._state_file)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            self._error_handler.handle_error(e, "save_sync_state", state_file=str(self._state_file))
            return False

        logger.info("sync_state_saved", files=len(manifest), categories=list(categories))
        return True

    def load_sync_state(self) -> dict[str, Any] | None:
        """Return the stored state, or None when missing or unusable."""
        if not self.state_exists():
            return None
        try:
            state = yaml.safe_load(self._state_file.read_text(encoding="utf-8"))
            _validate_state_structure(state)
        except (OSError, yaml.YAMLError, SyncStateError) as e:
            self._error_handler.handle_error(e, "load_sync_state", state_file=str(self._state_file))
            return None
        return state

    def state_exists(self) -> bool:
        return self._state_file.is_file()

    def clear_sync_state(self) -> bool:
        if not self.state_exists():
            return True
        try:
            self._state_file.unlink()
        except OSError as e:
            self._error_handler.handle_error(e, "clear_sync_state", state_file=str(self._state_file))
            return False
        return True

    def state_age_seconds(self) -> float | None:
        try:
            return time.time() - self._state_file.stat().st_mtime
        except OSError:
            return None

    def baseline_manifest(self, remote_manifest: dict[str, str], local_manifest: dict[str, str]) -> dict[str, str]:
        """The manifest to save after a sync or update.

        Synced files are recorded with their upstream hash.  A file that still
        differs from upstream was kept because of local edits, so it keeps its
        previous baseline hash and stays visible as a local modification.
        """
        state = self.load_sync_state()
        previous: dict[str, str] = state["manifest"] if state else {}
        manifest: dict[str, str] = {}
        for path, digest in remote_manifest.items():
            if path not in local_manifest:
                continue
            if local_manifest[path] != digest and path in previous:
                manifest[path] = previous[path]
            else:
                manifest[path] = digest
        return manifest

    def compare_with_current_files(self, current_manifest: dict[str, str]) -> dict[str, Any] | None:
        """Classify current files against the stored manifest."""
        state = self.load_sync_state()
        if not state:
            return None

        base: dict[str, str] = state["manifest"]
        base_files = set(base)
        current_files = set(current_manifest)
        common = base_files & current_files

        return {
            "base_timestamp": state["timestamp"],
            "base_version": state.get("leyline_version"),
            "base_categories": state["categories"],
            "added": sorted(current_files - base_files),
            "removed": sorted(base_files - current_files),
            "modified": sorted(p for p in common if base[p] != current_manifest[p]),
            "unchanged": sorted(p for p in common if base[p] == current_manifest[p]),
        }


def _validate_metadata(categories: Any, manifest: Any) -> None:
    if not isinstance(categories, list):
        raise SyncStateError("Categories must be an array", operation="save_sync_state")
    if not isinstance(manifest, dict):
        raise SyncStateError("Manifest must be a hash", operation="save_sync_state")
    for path, digest in manifest.items():
        if not is_sha256(digest):
            raise SyncStateError(
                f"Invalid hash for file {path}: {digest}", operation="save_sync_state"
            )


def _validate_state_structure(state: Any) -> None:
    if not isinstance(state, dict):
        raise SyncStateError("Invalid state structure")
    if not state.get("version"):
        raise SyncStateError("Missing version")
    if not state.get("timestamp"):
        raise SyncStateError("Missing timestamp")
    if not isinstance(state.get("categories"), list):
        raise SyncStateError("Missing categories")
    if not isinstance(state.get("manifest"), dict):
        raise SyncStateError("Missing manifest")
    if not isinstance(state["version"], int) or state["version"] > SCHEMA_VERSION:
        raise SyncStateError(
            f"Incompatible state version {state['version']} (expected <= {SCHEMA_VERSION})"
        )
