"""``leyline status``: local changes against the last recorded sync."""

from __future__ import annotations

import time
from datetime import datetime
from pathlib import Path
from typing import Any

from leyline import __version__
from leyline.commands.base import BaseCommand
from leyline.core.logging import get_logger
from leyline.sync.state import SyncState

logger = get_logger(__name__)


def coverage_status(percentage: float) -> str:
    if percentage == 100:
        return "perfect"
    if percentage >= 80:
        return "good"
    if percentage >= 50:
        return "fair"
    return "poor"


class StatusCommand(BaseCommand):
    """Compare the files under ``docs/leyline`` with the saved manifest."""

    def execute(self) -> dict[str, Any]:
        started = time.perf_counter()
        state = SyncState(self.cache_dir)
        categories = self.active_categories()

        files = self.discover_files(categories=categories)
        manifest = self.relative_manifest(self.leyline_path, files)
        comparison = state.compare_with_current_files(manifest) if state.state_exists() else None

        return {
            "leyline_version": __version__,
            "base_directory": str(self.base_directory),
            "cache_directory": str(self.cache_dir),
            "sync_state": self._sync_state_info(state),
            "local_changes": self._local_changes(comparison),
            "file_summary": self._file_summary(files, comparison),
            "categories": categories,
            "performance": {
                "execution_time_ms": self.elapsed_ms(started),
                "cache_enabled": self.cache_available(),
            },
        }

    def _sync_state_info(self, state: SyncState) -> dict[str, Any]:
        data = state.load_sync_state()
        if data is None:
            return {
                "exists": False,
                "last_sync": None,
                "synced_version": None,
                "synced_categories": [],
                "state_age_seconds": None,
            }
        return {
            "exists": True,
            "last_sync": data["timestamp"],
            "synced_version": data.get("leyline_version"),
            "synced_categories": list(data["categories"]),
            "state_age_seconds": state.state_age_seconds(),
        }

    @staticmethod
    def _local_changes(comparison: dict[str, Any] | None) -> dict[str, Any]:
        if comparison is None:
            return {"total_changes": 0, "added": [], "modified": [], "removed": [], "unchanged": []}
        total = sum(len(comparison[key]) for key in ("added", "modified", "removed"))
        return {
            "total_changes": total,
            "added": comparison["added"],
            "modified": comparison["modified"],
            "removed": comparison["removed"],
            "unchanged": comparison["unchanged"],
        }

    def _file_summary(self, files: list[Path], comparison: dict[str, Any] | None) -> dict[str, Any]:
        by_category: dict[str, int] = {}
        for path in files:
            parts = path.relative_to(self.leyline_path).parts
            if parts[0] == "tenets":
                key = "tenets"
            elif parts[:2] == ("bindings", "core"):
                key = "core"
            elif len(parts) > 3 and parts[:2] == ("bindings", "categories"):
                key = parts[2]
            else:
                continue
            by_category[key] = by_category.get(key, 0) + 1

        return {
            "total_files": len(files),
            "by_category": by_category,
            "sync_coverage": self._coverage(comparison),
        }

    @staticmethod
    def _coverage(comparison: dict[str, Any] | None) -> dict[str, Any]:
        if comparison is None:
            return {"percentage": 0, "status": "no_sync_state"}
        total = sum(len(comparison[key]) for key in ("added", "modified", "removed", "unchanged"))
        if total == 0:
            return {"percentage": 100, "status": "perfect"}
        percentage = round(len(comparison["unchanged"]) / total * 100, 2)
        return {"percentage": percentage, "status": coverage_status(percentage)}


def format_age(seconds: float | None) -> str:
    """Compact ``s/m/h/d`` rendering of a sync-state age."""
    if seconds is None:
        return "unknown"
    seconds = int(seconds)
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    return f"{seconds // 86400}d"


def format_timestamp(value: str | None) -> str:
    if not value:
        return "never"
    try:
        return datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return value
